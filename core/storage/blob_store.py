"""
BlobStore - 키 단위 blob 저장소

blob_store 테이블에 고정 키 하나로 컬렉션 전체를 저장.
IStorageAdapter Protocol 준수 (LedgerStore의 영속 저장소).

쓰기는 항상 전체 교체 (UPSERT), 교체할 때마다 version 증가.
"""

import logging
from datetime import datetime, timezone

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults

logger = logging.getLogger(__name__)


class BlobStore:
    """blob 저장소

    Args:
        db: 연결된 SQLiteAdapter (init_schema 완료 상태)
        key: 저장 키

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        storage = BlobStore(db, key="items")

        await storage.write(b"[]")
        data = await storage.read()
    ```
    """

    def __init__(self, db: SQLiteAdapter, key: str = Defaults.STORAGE_KEY):
        if not key:
            raise ValueError("key는 비어 있을 수 없습니다")

        self.db = db
        self._key = key

    @property
    def key(self) -> str:
        """저장 키"""
        return self._key

    async def read(self) -> bytes | None:
        """저장된 blob 조회

        Returns:
            저장된 bytes 또는 None (키 없음)
        """
        row = await self.db.fetchone(
            """
            SELECT value
            FROM blob_store
            WHERE storage_key = ?
            """,
            (self._key,),
        )

        if row is None:
            return None

        value = row[0]
        # 외부에서 TEXT로 넣은 경우도 허용
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    async def write(self, data: bytes) -> None:
        """blob 전체 교체 (UPSERT)"""
        now = datetime.now(timezone.utc).isoformat()

        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO blob_store (storage_key, value, version, created_at, updated_at)
                VALUES (?, ?, 1, ?, ?)
                ON CONFLICT(storage_key) DO UPDATE SET
                    value = excluded.value,
                    version = blob_store.version + 1,
                    updated_at = excluded.updated_at
                """,
                (self._key, data, now, now),
            )

        logger.debug(f"Blob '{self._key}' written", extra={"bytes": len(data)})
