"""
WriteQueue 단위 테스트

단일 writer, 실행 시점 직렬화, 1회 재시도 검증.
"""

import asyncio

import pytest

from adapters.mock.storage import MockStorage
from core.ledger.errors import PersistenceWriteFailed
from core.ledger.write_queue import WriteQueue, WriteTicket
from core.types import WriteState


class Counter:
    """직렬화 대상 상태"""

    def __init__(self) -> None:
        self.value = 0

    def serialize(self) -> bytes:
        return str(self.value).encode()


class TestWriteQueueSubmit:
    """submit() 테스트"""

    @pytest.mark.asyncio
    async def test_ticket_persisted(self) -> None:
        """쓰기 완료 시 PERSISTED"""
        storage = MockStorage()
        state = Counter()
        queue = WriteQueue(storage, serialize=state.serialize)

        ticket = queue.submit()
        assert ticket.state == WriteState.QUEUED

        await ticket.wait()

        assert ticket.state == WriteState.PERSISTED
        assert ticket.persisted is True
        assert ticket.settled is True
        assert ticket.attempts == 1
        assert storage.data == b"0"

        await queue.close()

    @pytest.mark.asyncio
    async def test_sequence_numbers(self) -> None:
        """등록 순번 증가"""
        queue = WriteQueue(MockStorage(), serialize=lambda: b"")

        first = queue.submit()
        second = queue.submit()

        assert (first.seq, second.seq) == (1, 2)

        await queue.close()

    @pytest.mark.asyncio
    async def test_submit_after_close_raises(self) -> None:
        """닫힌 큐에 등록 불가"""
        queue = WriteQueue(MockStorage(), serialize=lambda: b"")
        await queue.close()

        with pytest.raises(RuntimeError):
            queue.submit()

    def test_negative_retries_rejected(self) -> None:
        """max_retries 음수 거부"""
        with pytest.raises(ValueError):
            WriteQueue(MockStorage(), serialize=lambda: b"", max_retries=-1)


class TestWriteQueueOrdering:
    """단일 writer / 현재 상태 직렬화 테스트"""

    @pytest.mark.asyncio
    async def test_one_write_in_flight(self) -> None:
        """동시에 하나의 쓰기만 실행"""
        storage = MockStorage(write_delay=0.01)
        queue = WriteQueue(storage, serialize=lambda: b"x")

        tickets = [queue.submit() for _ in range(5)]
        await asyncio.gather(*(t.wait() for t in tickets))

        assert storage.max_in_flight == 1
        assert storage.write_count == 5

        await queue.close()

    @pytest.mark.asyncio
    async def test_serializes_state_at_execution_time(self) -> None:
        """등록 이후의 변경도 쓰기에 포함"""
        storage = MockStorage()
        storage.hold_writes()
        state = Counter()
        queue = WriteQueue(storage, serialize=state.serialize)

        state.value = 1
        first = queue.submit()
        await asyncio.sleep(0)  # 첫 쓰기가 WRITING 상태로 대기

        state.value = 2
        second = queue.submit()
        state.value = 3

        storage.release_writes()
        await asyncio.gather(first.wait(), second.wait())

        # 첫 쓰기는 실행 시점 값(1), 두 번째는 그 이후 최신 값(3)
        assert [w.data for w in storage.writes] == [b"1", b"3"]
        assert storage.data == b"3"

        await queue.close()

    @pytest.mark.asyncio
    async def test_drain_waits_for_all(self) -> None:
        """drain()은 모든 쓰기 종료까지 대기"""
        storage = MockStorage(write_delay=0.01)
        queue = WriteQueue(storage, serialize=lambda: b"x")

        for _ in range(3):
            queue.submit()
        assert queue.pending == 3

        await queue.drain()

        assert queue.pending == 0
        assert storage.succeeded_count == 3

        await queue.close()


class TestWriteQueueRetry:
    """재시도 테스트"""

    @pytest.mark.asyncio
    async def test_retry_once_then_persist(self) -> None:
        """1회 실패 후 재시도 성공"""
        storage = MockStorage()
        storage.fail_next_writes(1)
        queue = WriteQueue(storage, serialize=lambda: b"x")

        ticket = await queue.submit().wait()

        assert ticket.state == WriteState.PERSISTED
        assert ticket.attempts == 2
        assert ticket.error is None
        assert storage.write_count == 2

        await queue.close()

    @pytest.mark.asyncio
    async def test_final_failure(self) -> None:
        """재시도까지 실패 → FAILED + PersistenceWriteFailed"""
        storage = MockStorage()
        storage.fail_next_writes(2)
        queue = WriteQueue(storage, serialize=lambda: b"x")

        ticket = await queue.submit().wait()

        assert ticket.state == WriteState.FAILED
        assert isinstance(ticket.error, PersistenceWriteFailed)
        assert ticket.error.attempts == 2
        assert storage.write_count == 2

        await queue.close()

    @pytest.mark.asyncio
    async def test_failure_does_not_block_next_write(self) -> None:
        """최종 실패 후에도 다음 쓰기 진행"""
        storage = MockStorage()
        storage.fail_next_writes(2)
        queue = WriteQueue(storage, serialize=lambda: b"x")

        failed = queue.submit()
        following = queue.submit()
        await asyncio.gather(failed.wait(), following.wait())

        assert failed.state == WriteState.FAILED
        assert following.state == WriteState.PERSISTED
        assert storage.data == b"x"

        await queue.close()

    @pytest.mark.asyncio
    async def test_zero_retries(self) -> None:
        """max_retries=0이면 재시도 없음"""
        storage = MockStorage()
        storage.fail_next_writes(1)
        queue = WriteQueue(storage, serialize=lambda: b"x", max_retries=0)

        ticket = await queue.submit().wait()

        assert ticket.state == WriteState.FAILED
        assert storage.write_count == 1

        await queue.close()

    @pytest.mark.asyncio
    async def test_on_settled_called_before_waiters(self) -> None:
        """on_settled 콜백은 대기자보다 먼저 호출"""
        settled: list[WriteTicket] = []
        queue = WriteQueue(MockStorage(), serialize=lambda: b"x", on_settled=settled.append)

        ticket = queue.submit()
        await ticket.wait()

        assert settled == [ticket]

        await queue.close()
