"""
Ledger 에러 정의

어느 에러도 프로세스에 치명적이지 않음.
메모리 상태는 항상 유지되고, 영속성 보장만 약화됨.
"""


class LedgerError(Exception):
    """Ledger 에러 베이스"""
    pass


class ValidationError(LedgerError):
    """입력값 검증 실패

    상태 변경 전에 발생하며 재시도하지 않음.

    Attributes:
        field: 잘못된 필드 이름 (name / price)
    """

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        self.message = message or f"Invalid value for '{field}'"
        super().__init__(self.message)


class NotFound(LedgerError):
    """대상 아이템 없음"""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class PersistenceUnavailable(LedgerError):
    """초기 로드 실패

    Ledger는 빈 상태로 시작하고 degraded로 표시됨.
    이후 쓰기는 계속 시도.
    """
    pass


class PersistenceWriteFailed(LedgerError):
    """영속 쓰기 최종 실패 (재시도 소진)

    예외로 raise 하지 않고 MutationResult.warning으로 전달됨.
    """

    def __init__(self, attempts: int, cause: BaseException | None = None):
        self.attempts = attempts
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Durable write failed after {attempts} attempts{detail}")
