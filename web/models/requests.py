"""
요청 스키마 (Pydantic)

Web API 요청 데이터
값 검증(빈 이름, 음수 가격 등)은 Ledger에서 수행하여 field 단위 에러로 반환.
"""

from pydantic import BaseModel, Field


class ItemWriteRequest(BaseModel):
    """아이템 추가/수정 요청

    price는 폼 입력 그대로 문자열도 허용.
    """

    name: str = Field(..., description="상품명")
    price: int | str = Field(..., description="단가 (0 이상 정수)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"name": "Book A", "price": 500},
                {"name": "Book B", "price": "300"},
            ]
        }
    }
