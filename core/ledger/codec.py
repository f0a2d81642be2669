"""
Ledger 직렬화

아이템 시퀀스 전체를 하나의 JSON blob(UTF-8)으로 변환.
부분 쓰기 없음, 항상 전체 교체.
"""

import json

from core.ledger.item import Item


class LedgerDecodeError(ValueError):
    """저장된 blob 해석 실패"""
    pass


def encode_items(items: list[Item] | tuple[Item, ...]) -> bytes:
    """아이템 시퀀스 → bytes (순서 유지)"""
    payload = [item.to_dict() for item in items]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_items(data: bytes | str | None) -> list[Item]:
    """bytes → 아이템 시퀀스

    데이터가 없으면 빈 리스트.

    Raises:
        LedgerDecodeError: JSON 배열이 아니거나 레코드가 잘못된 경우, ID 중복
    """
    if not data:
        return []

    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        payload = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise LedgerDecodeError(f"Stored ledger is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise LedgerDecodeError("Stored ledger must be a JSON array")

    items: list[Item] = []
    seen: set[str] = set()

    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise LedgerDecodeError(f"Record #{index} is not an object")

        try:
            item = Item.from_dict(record)
        except ValueError as e:
            raise LedgerDecodeError(f"Record #{index}: {e}") from e

        if item.id in seen:
            raise LedgerDecodeError(f"Duplicate item id: {item.id}")

        seen.add(item.id)
        items.append(item)

    return items
