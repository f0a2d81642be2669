"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from fastapi import APIRouter, Depends

from core.constants import APP_VERSION
from core.ledger import LedgerStore
from web.dependencies import get_ledger
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    ledger: LedgerStore = Depends(get_ledger),
) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: degraded 여부, 아이템 수, 대기 중인 쓰기 수
    """
    return HealthResponse(
        status="degraded" if ledger.degraded else "ok",
        degraded=ledger.degraded,
        item_count=len(ledger),
        pending_writes=ledger.pending_writes,
        version=APP_VERSION,
    )
