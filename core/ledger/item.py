"""
Item 값 타입

불변 dataclass. 변경은 새 값을 만들어 Ledger 시퀀스의 같은 위치를 교체.
금액은 통화 최소단위 없는 정수 (원 단위).
"""

import uuid
from dataclasses import dataclass, replace
from typing import Any, Iterable

from core.ledger.errors import ValidationError


@dataclass(frozen=True)
class Item:
    """판매 아이템

    Attributes:
        id: 생성 시 발급되는 고유 ID (변경 불가)
        name: 표시 이름 (공백 제거 후 비어 있지 않음)
        price: 단가 (0 이상 정수)
        count: 판매 수 (0 이상 정수)
    """

    id: str
    name: str
    price: int
    count: int = 0

    @property
    def revenue(self) -> int:
        """아이템 매출 (단가 * 판매 수)"""
        return self.price * self.count

    def with_details(self, name: str, price: int) -> "Item":
        """이름/가격만 교체 (id, count 유지)"""
        return replace(self, name=name, price=price)

    def incremented(self) -> "Item":
        """판매 수 +1"""
        return replace(self, count=self.count + 1)

    def decremented(self) -> "Item":
        """판매 수 -1 (0 미만으로 내려가지 않음)"""
        if self.count == 0:
            return self
        return replace(self, count=self.count - 1)

    def to_dict(self) -> dict[str, Any]:
        """직렬화용 딕셔너리"""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "count": self.count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """딕셔너리에서 생성

        count가 없으면 0으로 간주.

        Raises:
            ValueError: 필드 누락 또는 타입 불일치
        """
        item_id = data.get("id")
        if not isinstance(item_id, str) or not item_id:
            raise ValueError(f"Invalid item id: {item_id!r}")

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Invalid item name for {item_id}")

        price = data.get("price")
        if not _is_non_negative_int(price):
            raise ValueError(f"Invalid item price for {item_id}: {price!r}")

        count = data.get("count") or 0
        if not _is_non_negative_int(count):
            raise ValueError(f"Invalid item count for {item_id}: {count!r}")

        return cls(id=item_id, name=name, price=price, count=count)

    @classmethod
    def create(cls, name: str, price: int, existing_ids: Iterable[str] = ()) -> "Item":
        """새 아이템 생성 (새 ID, count=0)"""
        return cls(id=new_item_id(existing_ids), name=name, price=price, count=0)


def new_item_id(existing_ids: Iterable[str] = ()) -> str:
    """기존 ID와 겹치지 않는 새 ID 발급"""
    taken = set(existing_ids)
    while True:
        item_id = uuid.uuid4().hex
        if item_id not in taken:
            return item_id


def total_revenue(items: Iterable[Item]) -> int:
    """총 매출 = Σ(단가 * 판매 수)

    캐시하지 않고 매번 현재 상태로 계산.
    """
    return sum(item.revenue for item in items)


def _is_non_negative_int(value: Any) -> bool:
    # bool은 int의 하위 타입이므로 제외
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


# =========================================================================
# 입력값 검증
# =========================================================================

def validate_name(value: Any) -> str:
    """이름 검증

    Returns:
        앞뒤 공백을 제거한 이름

    Raises:
        ValidationError: 문자열이 아니거나 비어 있는 경우 (field="name")
    """
    if not isinstance(value, str):
        raise ValidationError("name", "Name must be a string")

    name = value.strip()
    if not name:
        raise ValidationError("name", "Name is required")

    return name


def validate_price(value: Any) -> int:
    """가격 검증

    정수 또는 ASCII 숫자만으로 된 문자열(폼 입력) 허용.
    부호, 밑줄 구분자, 비ASCII 숫자가 섞인 문자열은 거부.

    Returns:
        정수 가격

    Raises:
        ValidationError: 숫자가 아니거나 음수인 경우 (field="price")
    """
    if isinstance(value, bool):
        raise ValidationError("price", "Price must be a number")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError("price", "Price is required")
        if not (text.isascii() and text.isdigit()):
            raise ValidationError("price", "Price must be a number")
        value = int(text)

    if not isinstance(value, int):
        raise ValidationError("price", "Price must be a number")

    if value < 0:
        raise ValidationError("price", "Price must not be negative")

    return value
