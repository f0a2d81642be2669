"""
아이템 Ledger

판매 아이템 컬렉션의 메모리 원본과 영속 쓰기 직렬화.
여러 변경이 이전 쓰기 완료 전에 연속으로 들어와도 어떤 변경도 유실되지 않음.

사용 예시:
```python
from core.ledger import LedgerStore

ledger = LedgerStore(storage)
await ledger.load()

book = (await ledger.add("Book A", 500)).item
await ledger.increment(book.id)

ledger.snapshot()       # (Item(...),)
ledger.total_revenue()  # 500
```
"""

from core.ledger.codec import LedgerDecodeError, decode_items, encode_items
from core.ledger.errors import (
    LedgerError,
    NotFound,
    PersistenceUnavailable,
    PersistenceWriteFailed,
    ValidationError,
)
from core.ledger.item import Item, total_revenue, validate_name, validate_price
from core.ledger.store import LedgerChange, LedgerStore, MutationResult
from core.ledger.write_queue import WriteQueue, WriteTicket

__all__ = [
    # Store
    "LedgerStore",
    "LedgerChange",
    "MutationResult",
    "WriteQueue",
    "WriteTicket",
    # Item
    "Item",
    "total_revenue",
    "validate_name",
    "validate_price",
    # Codec
    "encode_items",
    "decode_items",
    "LedgerDecodeError",
    # Errors
    "LedgerError",
    "ValidationError",
    "NotFound",
    "PersistenceUnavailable",
    "PersistenceWriteFailed",
]
