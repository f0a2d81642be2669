"""
Item 라우트

아이템 목록/추가/수정/판매 수 증감/삭제 API.
Ledger 연산을 호출하고 결과만 렌더링 (Ledger 로직 없음).
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from core.ledger import LedgerStore, MutationResult, NotFound, ValidationError
from web.dependencies import get_ledger
from web.models.requests import ItemWriteRequest
from web.models.responses import (
    ItemListResponse,
    ItemResponse,
    MutationResponse,
    RevenueResponse,
)

router = APIRouter(prefix="/api", tags=["Items"])


def _not_found(e: NotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Item not found: {e.item_id}")


def _invalid(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"field": e.field, "message": e.message},
    )


def _render(result: MutationResult, ledger: LedgerStore) -> MutationResponse:
    return MutationResponse.from_result(result, ledger.total_revenue())


@router.get("/items", response_model=ItemListResponse)
async def list_items(
    ledger: LedgerStore = Depends(get_ledger),
) -> ItemListResponse:
    """아이템 목록 (등록 순) + 총 매출"""
    return ItemListResponse(
        items=[ItemResponse.from_item(item) for item in ledger.snapshot()],
        total_revenue=ledger.total_revenue(),
    )


@router.get("/items/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: str = Path(..., description="아이템 ID"),
    ledger: LedgerStore = Depends(get_ledger),
) -> ItemResponse:
    """아이템 조회"""
    try:
        item = ledger.get(item_id)
    except NotFound as e:
        raise _not_found(e)

    return ItemResponse.from_item(item)


@router.post("/items", response_model=MutationResponse, status_code=201)
async def add_item(
    request: ItemWriteRequest,
    ledger: LedgerStore = Depends(get_ledger),
) -> MutationResponse:
    """아이템 추가"""
    try:
        result = await ledger.add(request.name, request.price)
    except ValidationError as e:
        raise _invalid(e)

    return _render(result, ledger)


@router.put("/items/{item_id}", response_model=MutationResponse)
async def update_item(
    request: ItemWriteRequest,
    item_id: str = Path(..., description="아이템 ID"),
    ledger: LedgerStore = Depends(get_ledger),
) -> MutationResponse:
    """이름/가격 수정 (판매 수 유지)"""
    try:
        result = await ledger.update(item_id, request.name, request.price)
    except ValidationError as e:
        raise _invalid(e)
    except NotFound as e:
        raise _not_found(e)

    return _render(result, ledger)


@router.post("/items/{item_id}/increment", response_model=MutationResponse)
async def increment_item(
    item_id: str = Path(..., description="아이템 ID"),
    ledger: LedgerStore = Depends(get_ledger),
) -> MutationResponse:
    """판매 수 +1"""
    try:
        result = await ledger.increment(item_id)
    except NotFound as e:
        raise _not_found(e)

    return _render(result, ledger)


@router.post("/items/{item_id}/decrement", response_model=MutationResponse)
async def decrement_item(
    item_id: str = Path(..., description="아이템 ID"),
    ledger: LedgerStore = Depends(get_ledger),
) -> MutationResponse:
    """판매 수 -1 (0이면 변경 없음)"""
    try:
        result = await ledger.decrement(item_id)
    except NotFound as e:
        raise _not_found(e)

    return _render(result, ledger)


@router.delete("/items/{item_id}", response_model=MutationResponse)
async def delete_item(
    item_id: str = Path(..., description="아이템 ID"),
    ledger: LedgerStore = Depends(get_ledger),
) -> MutationResponse:
    """아이템 삭제"""
    try:
        result = await ledger.remove(item_id)
    except NotFound as e:
        raise _not_found(e)

    return _render(result, ledger)


@router.get("/revenue", response_model=RevenueResponse)
async def get_revenue(
    ledger: LedgerStore = Depends(get_ledger),
) -> RevenueResponse:
    """총 매출"""
    return RevenueResponse(
        total_revenue=ledger.total_revenue(),
        item_count=len(ledger),
    )
