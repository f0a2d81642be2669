"""
단일 writer 쓰기 큐

모든 영속 쓰기를 큐에 넣고 워커 태스크 하나가 순서대로 하나씩 실행.
각 쓰기는 실행 시점의 "현재" 메모리 상태를 직렬화함.
(등록 시점 스냅샷을 쓰면 느린 쓰기가 최신 변경을 덮어쓰는 lost update 발생)

상태 전이:
    APPLIED → QUEUED → WRITING → PERSISTED
                              → FAILED → WRITING (재시도) → PERSISTED | FAILED(최종)
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Callable

from adapters.interfaces import IStorageAdapter
from core.constants import Defaults
from core.ledger.errors import PersistenceWriteFailed
from core.types import WriteState

logger = logging.getLogger(__name__)


@dataclass
class WriteTicket:
    """쓰기 요청 하나의 진행 상태

    Attributes:
        seq: 등록 순번 (1부터 증가)
        state: 현재 상태
        attempts: 실행한 쓰기 시도 수
        error: 최종 실패 시 에러
    """

    seq: int
    state: WriteState = WriteState.APPLIED
    attempts: int = 0
    error: PersistenceWriteFailed | None = None
    _done: asyncio.Future | None = field(default=None, repr=False, compare=False)

    @property
    def settled(self) -> bool:
        """PERSISTED 또는 최종 FAILED 도달 여부"""
        return self._done is not None and self._done.done()

    @property
    def persisted(self) -> bool:
        return self.state == WriteState.PERSISTED

    async def wait(self) -> "WriteTicket":
        """쓰기 종료까지 대기

        호출자가 취소되어도 쓰기 자체는 계속 진행.
        """
        await asyncio.shield(self._done)
        return self


class WriteQueue:
    """단일 writer 쓰기 큐

    Args:
        storage: 영속 저장소 어댑터
        serialize: 현재 메모리 상태를 bytes로 만드는 함수 (실행 시점에 호출)
        max_retries: 실패 시 같은 위치에서 재시도할 횟수
        retry_delay: 재시도 전 대기 (초)
        on_settled: 쓰기 종료 시 호출되는 콜백 (대기자 깨우기 전에 호출)

    사용 예시:
    ```python
    queue = WriteQueue(storage, serialize=lambda: encode_items(items))

    ticket = queue.submit()
    await ticket.wait()

    await queue.close()
    ```
    """

    def __init__(
        self,
        storage: IStorageAdapter,
        serialize: Callable[[], bytes],
        max_retries: int = Defaults.WRITE_RETRIES,
        retry_delay: float = Defaults.RETRY_DELAY_SEC,
        on_settled: Callable[[WriteTicket], None] | None = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries는 0 이상이어야 합니다")

        self.storage = storage
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self._serialize = serialize
        self._on_settled = on_settled
        self._queue: asyncio.Queue[WriteTicket] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._seq = 0
        self._unsettled = 0
        self._closed = False

    @property
    def pending(self) -> int:
        """아직 종료되지 않은 쓰기 수 (대기 + 실행 중)"""
        return self._unsettled

    @property
    def is_closed(self) -> bool:
        return self._closed

    def submit(self) -> WriteTicket:
        """쓰기 요청 등록

        이벤트 루프 안에서 호출해야 함.

        Returns:
            QUEUED 상태의 WriteTicket

        Raises:
            RuntimeError: 큐가 닫힌 경우
        """
        if self._closed:
            raise RuntimeError("WriteQueue is closed")

        loop = asyncio.get_running_loop()

        self._seq += 1
        ticket = WriteTicket(seq=self._seq, _done=loop.create_future())
        ticket.state = WriteState.QUEUED

        self._unsettled += 1
        self._queue.put_nowait(ticket)
        self._ensure_worker(loop)

        logger.debug("쓰기 등록", extra={"seq": ticket.seq, "pending": self._unsettled})

        return ticket

    async def drain(self) -> None:
        """등록된 모든 쓰기가 종료될 때까지 대기"""
        if self._unsettled == 0:
            return
        await self._queue.join()

    async def close(self) -> None:
        """남은 쓰기를 모두 처리한 뒤 워커 종료"""
        if self._closed:
            return

        await self.drain()
        self._closed = True

        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None

        logger.info("쓰기 큐 종료", extra={"total_writes": self._seq})

    # -------------------------------------------------------------------------
    # 워커
    # -------------------------------------------------------------------------

    def _ensure_worker(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._run(), name="ledger-write-queue")

    async def _run(self) -> None:
        while True:
            ticket = await self._queue.get()
            try:
                await self._execute(ticket)
            finally:
                self._queue.task_done()

    async def _execute(self, ticket: WriteTicket) -> None:
        """쓰기 실행 (최대 1 + max_retries회)"""
        max_attempts = 1 + self.max_retries

        for attempt in range(1, max_attempts + 1):
            ticket.state = WriteState.WRITING
            ticket.attempts = attempt

            try:
                # 실행 시점의 현재 상태 직렬화
                data = self._serialize()
                await self.storage.write(data)

            except Exception as e:
                ticket.state = WriteState.FAILED
                logger.warning(
                    "영속 쓰기 실패",
                    extra={"seq": ticket.seq, "attempt": attempt, "error": str(e)},
                    exc_info=True,
                )

                if attempt < max_attempts:
                    if self.retry_delay:
                        await asyncio.sleep(self.retry_delay)
                    continue

                ticket.error = PersistenceWriteFailed(attempts=attempt, cause=e)
                logger.error(
                    "영속 쓰기 최종 실패, 메모리 상태 유지",
                    extra={"seq": ticket.seq, "attempts": attempt},
                )

            else:
                ticket.state = WriteState.PERSISTED
                logger.debug(
                    "영속 쓰기 완료",
                    extra={"seq": ticket.seq, "attempt": attempt, "bytes": len(data)},
                )

            break

        self._settle(ticket)

    def _settle(self, ticket: WriteTicket) -> None:
        self._unsettled -= 1

        if self._on_settled is not None:
            try:
                self._on_settled(ticket)
            except Exception:
                logger.error("on_settled 콜백 실패", extra={"seq": ticket.seq}, exc_info=True)

        if not ticket._done.done():
            ticket._done.set_result(ticket)
