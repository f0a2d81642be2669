"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from pydantic import BaseModel, Field

from core.ledger import Item, MutationResult


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    degraded: bool = Field(..., description="초기 로드 실패로 메모리 전용 동작 중")
    item_count: int = Field(..., description="아이템 수")
    pending_writes: int = Field(..., description="종료되지 않은 영속 쓰기 수")
    version: str = Field(..., description="앱 버전")


class ItemResponse(BaseModel):
    """아이템 응답"""

    id: str = Field(..., description="아이템 ID")
    name: str = Field(..., description="상품명")
    price: int = Field(..., description="단가")
    count: int = Field(..., description="판매 수")
    revenue: int = Field(..., description="매출 (단가 * 판매 수)")

    @classmethod
    def from_item(cls, item: Item) -> "ItemResponse":
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            count=item.count,
            revenue=item.revenue,
        )


class ItemListResponse(BaseModel):
    """아이템 목록 응답"""

    items: list[ItemResponse] = Field(default_factory=list, description="아이템 목록 (등록 순)")
    total_revenue: int = Field(..., description="총 매출")


class MutationResponse(BaseModel):
    """변경 연산 응답

    영속 쓰기 실패는 HTTP 에러가 아니라 warning으로 전달.
    """

    item: ItemResponse = Field(..., description="변경 후 아이템 (삭제 시 삭제된 아이템)")
    changed: bool = Field(..., description="상태 변경 여부 (0에서 감소는 false)")
    persisted: bool = Field(..., description="영속 쓰기 완료 여부")
    warning: str | None = Field(default=None, description="영속 쓰기 실패 경고")
    total_revenue: int = Field(..., description="변경 후 총 매출")

    @classmethod
    def from_result(cls, result: MutationResult, total_revenue: int) -> "MutationResponse":
        return cls(
            item=ItemResponse.from_item(result.item),
            changed=result.changed,
            persisted=result.persisted,
            warning=str(result.warning) if result.warning else None,
            total_revenue=total_revenue,
        )


class RevenueResponse(BaseModel):
    """총 매출 응답"""

    total_revenue: int = Field(..., description="총 매출")
    item_count: int = Field(..., description="아이템 수")
