"""
Mock 저장소

테스트용 인메모리 저장소.
IStorageAdapter Protocol 준수.
지연, 게이트, 실패 주입으로 쓰기 타이밍 시나리오 재현.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone

from core.constants import Defaults


class MockStorageError(Exception):
    """주입된 저장소 실패"""
    pass


@dataclass
class WriteRecord:
    """쓰기 기록"""

    data: bytes
    timestamp: datetime
    succeeded: bool


class MockStorage:
    """Mock 저장소

    IStorageAdapter Protocol 구현.
    모든 쓰기 시도를 기록하여 테스트에서 검증 가능.

    사용 예시:
    ```python
    storage = MockStorage(write_delay=0.05)
    storage.fail_next_writes(2)

    ledger = LedgerStore(storage)
    await ledger.add("Book A", 500)

    assert storage.write_count == 2
    ```
    """

    def __init__(
        self,
        initial: bytes | None = None,
        key: str = Defaults.STORAGE_KEY,
        read_delay: float = 0.0,
        write_delay: float = 0.0,
        fail_reads: bool = False,
    ):
        """
        Args:
            initial: 초기 저장 데이터
            key: 저장 키
            read_delay: read 지연 (초)
            write_delay: write 지연 (초)
            fail_reads: True면 모든 read 실패
        """
        self._key = key
        self.data: bytes | None = initial
        self.read_delay = read_delay
        self.write_delay = write_delay
        self.fail_reads = fail_reads

        self.writes: list[WriteRecord] = []
        self.read_count = 0
        self.in_flight = 0
        self.max_in_flight = 0

        self._fail_writes_remaining = 0
        self._gate: asyncio.Event | None = None

    @property
    def key(self) -> str:
        """저장 키"""
        return self._key

    async def read(self) -> bytes | None:
        """저장된 blob 조회"""
        self.read_count += 1

        if self.read_delay:
            await asyncio.sleep(self.read_delay)

        if self.fail_reads:
            raise MockStorageError("read failed")

        return self.data

    async def write(self, data: bytes) -> None:
        """blob 전체 교체"""
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)

        try:
            if self._gate is not None:
                await self._gate.wait()

            if self.write_delay:
                await asyncio.sleep(self.write_delay)

            if self._fail_writes_remaining > 0:
                self._fail_writes_remaining -= 1
                self._record(data, succeeded=False)
                raise MockStorageError("write failed")

            self.data = data
            self._record(data, succeeded=True)
        finally:
            self.in_flight -= 1

    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------

    def fail_next_writes(self, count: int) -> None:
        """다음 count번의 쓰기를 실패시킴"""
        self._fail_writes_remaining = count

    def hold_writes(self) -> None:
        """release_writes() 호출 전까지 쓰기 대기"""
        self._gate = asyncio.Event()

    def release_writes(self) -> None:
        """대기 중인 쓰기 진행"""
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    def _record(self, data: bytes, succeeded: bool) -> None:
        self.writes.append(
            WriteRecord(
                data=data,
                timestamp=datetime.now(timezone.utc),
                succeeded=succeeded,
            )
        )

    @property
    def write_count(self) -> int:
        """전체 쓰기 시도 수"""
        return len(self.writes)

    @property
    def succeeded_count(self) -> int:
        """성공한 쓰기 수"""
        return sum(1 for w in self.writes if w.succeeded)

    @property
    def failed_count(self) -> int:
        """실패한 쓰기 수"""
        return sum(1 for w in self.writes if not w.succeeded)
