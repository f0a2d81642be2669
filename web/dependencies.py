"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
LedgerStore는 앱 lifespan에서 생성하여 app.state에 보관 (전역 변수 없음).
"""

from fastapi import HTTPException, Request

from core.ledger import LedgerStore


def get_ledger(request: Request) -> LedgerStore:
    """앱에 연결된 LedgerStore 반환

    Raises:
        HTTPException: lifespan 시작 전 (503)
    """
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        raise HTTPException(status_code=503, detail="Ledger not initialized")
    return ledger
