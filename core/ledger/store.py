"""
Ledger 저장소

아이템 컬렉션의 메모리 원본을 소유하고, 모든 변경을 쓰기 큐로 직렬화.

- 메모리 반영은 동기적으로 즉시 (첫 로드 완료 이후에는 첫 await 이전)
- 첫 로드 전의 변경 연산은 로드를 시작하고 끝날 때까지 대기
- 영속 쓰기는 WriteQueue가 하나씩 순서대로, 항상 현재 상태로 실행
- 쓰기 실패 시 1회 재시도, 최종 실패는 경고로 전달 (메모리 롤백 없음)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from adapters.interfaces import IStorageAdapter
from core.constants import Defaults
from core.ledger.codec import decode_items, encode_items
from core.ledger.errors import NotFound, PersistenceUnavailable, PersistenceWriteFailed
from core.ledger.item import Item, total_revenue, validate_name, validate_price
from core.ledger.write_queue import WriteQueue, WriteTicket
from core.types import ChangeKind, WriteState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerChange:
    """구독자에게 전달되는 변경 알림

    Attributes:
        kind: 변경 종류
        item: 변경된 아이템 (LOADED는 None)
    """

    kind: ChangeKind
    item: Item | None = None


Listener = Callable[[LedgerChange], Any]


@dataclass(frozen=True)
class MutationResult:
    """변경 연산 결과

    Attributes:
        item: 변경 후 아이템 (remove는 삭제된 아이템)
        state: 이 변경의 쓰기 상태 (변경 없는 no-op이면 None)
        warnings: 아직 보고되지 않았던 쓰기 최종 실패 목록
    """

    item: Item
    state: WriteState | None
    warnings: tuple[PersistenceWriteFailed, ...] = ()

    @property
    def changed(self) -> bool:
        """메모리 상태 변경 여부"""
        return self.state is not None

    @property
    def persisted(self) -> bool:
        """이 변경의 쓰기가 PERSISTED에 도달했는지"""
        return self.state == WriteState.PERSISTED

    @property
    def warning(self) -> PersistenceWriteFailed | None:
        """가장 최근 쓰기 실패 (없으면 None)"""
        return self.warnings[-1] if self.warnings else None


class LedgerStore:
    """Ledger 저장소

    아이템 시퀀스의 유일한 소유자. 외부에는 복사본만 전달.

    Args:
        storage: 영속 저장소 어댑터 (IStorageAdapter)
        write_retries: 쓰기 실패 시 재시도 횟수
        retry_delay: 재시도 전 대기 (초)

    사용 예시:
    ```python
    ledger = LedgerStore(storage)
    await ledger.load()

    result = await ledger.add("Book A", 500)
    await ledger.increment(result.item.id)

    ledger.total_revenue()  # 500
    await ledger.close()
    ```
    """

    def __init__(
        self,
        storage: IStorageAdapter,
        write_retries: int = Defaults.WRITE_RETRIES,
        retry_delay: float = Defaults.RETRY_DELAY_SEC,
    ):
        self.storage = storage

        self._items: list[Item] = []
        self._degraded = False
        self._listeners: list[Listener] = []
        # 아직 어떤 호출자에게도 보고되지 않은 쓰기 실패 (seq → error)
        self._unreported: dict[int, PersistenceWriteFailed] = {}
        # 호출자가 완료를 기다리는 쓰기 seq
        self._awaited: set[int] = set()
        self._last_write_error: PersistenceWriteFailed | None = None

        self._load_task: asyncio.Task | None = None
        # 첫 로드 시도 종료 여부 (성공/실패 무관)
        self._loaded = False
        # 상태 변경마다 증가. 저장소에 반영된 마지막 revision과 비교해 미영속 변경 판단
        self._revision = 0
        self._persisted_revision = 0
        self._serializing_revision = 0

        self._writes = WriteQueue(
            storage,
            serialize=self._encode_current,
            max_retries=write_retries,
            retry_delay=retry_delay,
            on_settled=self._on_write_settled,
        )

    # -------------------------------------------------------------------------
    # 상태
    # -------------------------------------------------------------------------

    @property
    def degraded(self) -> bool:
        """초기 로드 실패로 메모리 전용 동작 중인지"""
        return self._degraded

    @property
    def pending_writes(self) -> int:
        """종료되지 않은 쓰기 수"""
        return self._writes.pending

    @property
    def last_write_error(self) -> PersistenceWriteFailed | None:
        """마지막 쓰기 최종 실패 (성공 쓰기 시 초기화)"""
        return self._last_write_error

    def __len__(self) -> int:
        return len(self._items)

    # -------------------------------------------------------------------------
    # 로드
    # -------------------------------------------------------------------------

    async def load(self) -> tuple[Item, ...]:
        """저장소에서 메모리 상태 채우기

        진행 중인 쓰기를 먼저 모두 끝낸 뒤 읽음. 데이터가 없으면 빈 시퀀스.
        동시에 여러 번 호출하면 같은 로드 하나를 공유.

        첫 로드가 끝나기 전의 변경 연산은 로드 완료까지 대기하므로
        로드 전 빈 상태가 저장된 데이터를 덮어쓰지 않음.
        다시 로드할 때 메모리에 아직 영속되지 않은 변경이 있으면
        (읽는 도중의 변경 포함) 메모리 상태를 유지하고 저장소를 다시 씀.

        Returns:
            로드 후 아이템 시퀀스 (복사본)

        Raises:
            PersistenceUnavailable: 읽기 또는 해석 실패 (degraded)
        """
        if self._load_task is None or self._load_task.done():
            loop = asyncio.get_running_loop()
            self._load_task = loop.create_task(self._load(), name="ledger-load")

        return await asyncio.shield(self._load_task)

    async def _load(self) -> tuple[Item, ...]:
        await self._writes.drain()
        revision = self._revision

        try:
            data = await self.storage.read()
            items = decode_items(data)

        except Exception as e:
            if not self._loaded:
                self._items = []
            self._degraded = True
            logger.error(
                "Ledger 로드 실패, 메모리 전용 모드로 동작",
                extra={"storage_key": self.storage.key, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceUnavailable(f"Failed to load ledger: {e}") from e

        finally:
            self._loaded = True

        self._degraded = False

        if self._revision != revision or self._revision != self._persisted_revision:
            # 메모리가 저장소보다 앞서 있음: 롤백하지 않고 현재 상태로 다시 씀
            logger.warning(
                "영속되지 않은 변경이 있어 로드 결과 대신 메모리 상태 유지",
                extra={"storage_key": self.storage.key, "item_count": len(self._items)},
            )
            self._writes.submit()
            return self.snapshot()

        self._items = items
        self._revision += 1
        self._persisted_revision = self._revision

        logger.info(
            "Ledger 로드 완료",
            extra={"storage_key": self.storage.key, "item_count": len(items)},
        )

        self._notify(LedgerChange(kind=ChangeKind.LOADED))
        return self.snapshot()

    async def _ensure_loaded(self) -> None:
        """첫 로드가 끝날 때까지 대기 (아직 시작 전이면 시작)

        로드 실패는 degraded로 기록되고 변경 연산은 계속 진행.
        """
        if self._loaded:
            return

        try:
            await self.load()
        except PersistenceUnavailable:
            # _load에서 로그 + degraded 기록됨
            pass

    # -------------------------------------------------------------------------
    # 변경 연산
    # -------------------------------------------------------------------------

    async def add(self, name: Any, price: Any, wait: bool = True) -> MutationResult:
        """아이템 추가 (새 ID, count=0, 맨 뒤)

        Raises:
            ValidationError: name/price 검증 실패 (상태 변경 없음)
        """
        clean_name = validate_name(name)
        clean_price = validate_price(price)
        await self._ensure_loaded()

        item = Item.create(clean_name, clean_price, existing_ids=(i.id for i in self._items))
        self._items.append(item)

        logger.info("아이템 추가", extra={"item_id": item.id, "price": item.price})

        return await self._commit(ChangeKind.ADDED, item, wait)

    async def update(
        self,
        item_id: str,
        name: Any,
        price: Any,
        wait: bool = True,
    ) -> MutationResult:
        """이름/가격 변경 (id, count, 위치 유지)

        Raises:
            ValidationError: name/price 검증 실패
            NotFound: 아이템 없음
        """
        clean_name = validate_name(name)
        clean_price = validate_price(price)
        await self._ensure_loaded()
        index = self._index_of(item_id)

        item = self._items[index].with_details(clean_name, clean_price)
        self._items[index] = item

        logger.info("아이템 수정", extra={"item_id": item_id, "price": clean_price})

        return await self._commit(ChangeKind.UPDATED, item, wait)

    async def increment(self, item_id: str, wait: bool = True) -> MutationResult:
        """판매 수 +1

        Raises:
            NotFound: 아이템 없음
        """
        await self._ensure_loaded()
        index = self._index_of(item_id)

        item = self._items[index].incremented()
        self._items[index] = item

        return await self._commit(ChangeKind.INCREMENTED, item, wait)

    async def decrement(self, item_id: str, wait: bool = True) -> MutationResult:
        """판매 수 -1

        count가 0이면 변경 없이 성공 (쓰기/알림 없음).

        Raises:
            NotFound: 아이템 없음
        """
        await self._ensure_loaded()
        index = self._index_of(item_id)
        current = self._items[index]

        if current.count == 0:
            return MutationResult(item=current, state=None, warnings=self._take_unreported())

        item = current.decremented()
        self._items[index] = item

        return await self._commit(ChangeKind.DECREMENTED, item, wait)

    async def remove(self, item_id: str, wait: bool = True) -> MutationResult:
        """아이템 삭제 (나머지 순서 유지)

        Raises:
            NotFound: 아이템 없음
        """
        await self._ensure_loaded()
        index = self._index_of(item_id)
        item = self._items.pop(index)

        logger.info("아이템 삭제", extra={"item_id": item_id})

        return await self._commit(ChangeKind.REMOVED, item, wait)

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def total_revenue(self) -> int:
        """총 매출 (현재 메모리 상태 기준, 매번 계산)"""
        return total_revenue(self._items)

    def snapshot(self) -> tuple[Item, ...]:
        """현재 아이템 시퀀스 복사본"""
        return tuple(self._items)

    def get(self, item_id: str) -> Item:
        """단일 아이템 조회

        Raises:
            NotFound: 아이템 없음
        """
        return self._items[self._index_of(item_id)]

    # -------------------------------------------------------------------------
    # 구독
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """변경 알림 구독

        Returns:
            구독 해제 함수
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # 종료
    # -------------------------------------------------------------------------

    async def flush(self) -> None:
        """등록된 모든 쓰기가 종료될 때까지 대기"""
        await self._writes.drain()

    async def close(self) -> None:
        """남은 쓰기 처리 후 쓰기 워커 종료"""
        await self._writes.close()

    async def __aenter__(self) -> "LedgerStore":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise NotFound(item_id)

    def _encode_current(self) -> bytes:
        self._serializing_revision = self._revision
        return encode_items(self._items)

    async def _commit(self, kind: ChangeKind, item: Item, wait: bool) -> MutationResult:
        """쓰기 등록 + 알림 (+ 쓰기 종료 대기)"""
        self._revision += 1
        ticket = self._writes.submit()
        self._notify(LedgerChange(kind=kind, item=item))

        if not wait:
            return MutationResult(item=item, state=ticket.state, warnings=self._take_unreported())

        self._awaited.add(ticket.seq)
        try:
            await ticket.wait()
        finally:
            self._awaited.discard(ticket.seq)

        return MutationResult(
            item=item,
            state=ticket.state,
            warnings=self._take_unreported(own=ticket.seq),
        )

    def _on_write_settled(self, ticket: WriteTicket) -> None:
        if ticket.error is not None:
            self._unreported[ticket.seq] = ticket.error
            self._last_write_error = ticket.error
        else:
            self._last_write_error = None
            self._persisted_revision = self._serializing_revision

    def _take_unreported(self, own: int | None = None) -> tuple[PersistenceWriteFailed, ...]:
        """보고되지 않은 실패 꺼내기

        다른 호출자가 기다리는 쓰기의 실패는 그 호출자 몫으로 남겨둠.
        """
        seqs = sorted(
            s for s in self._unreported
            if s == own or s not in self._awaited
        )
        return tuple(self._unreported.pop(s) for s in seqs)

    def _notify(self, change: LedgerChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.error(
                    "Ledger 구독자 호출 실패",
                    extra={"kind": change.kind.value},
                    exc_info=True,
                )
