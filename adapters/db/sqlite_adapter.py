"""
SQLite 어댑터

Ledger blob을 담는 SQLite 파일 연결 관리 (aiosqlite, WAL 모드).
쓰기는 WriteQueue가 한 번에 하나씩만 실행하므로 연결 하나를 공유.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

# 스키마 변경 시 증가 (PRAGMA user_version에 기록)
SCHEMA_VERSION = 1

CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA busy_timeout=30000",  # 잠금 시 30초 대기
)


async def create_connection(db_path: Path | str) -> aiosqlite.Connection:
    """SQLite 연결 생성

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)

    Returns:
        aiosqlite 연결 객체
    """
    target = str(db_path)

    if target == MEMORY_DB:
        conn = await aiosqlite.connect(MEMORY_DB)
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(target)

    for pragma in CONNECTION_PRAGMAS:
        await conn.execute(pragma)

    logger.info("SQLite 연결 생성", extra={"db_path": target})
    return conn


class SQLiteAdapter:
    """SQLite 연결 래퍼

    BlobStore가 사용하는 최소 연산만 제공:
    execute / fetchone / commit / transaction.

    Args:
        db_path: DB 파일 경로 또는 ":memory:"

    사용 예시:
    ```python
    async with SQLiteAdapter(Paths.DB_FILE) as db:
        await init_schema(db)
        storage = BlobStore(db, key="items")
    ```
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def _require(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(f"SQLite not connected: {self.db_path}")
        return self._conn

    async def connect(self) -> None:
        """연결 생성 (이미 연결되어 있으면 무시)"""
        if self._conn is None:
            self._conn = await create_connection(self.db_path)

    async def close(self) -> None:
        if self._conn is None:
            return

        await self._conn.close()
        self._conn = None
        logger.info("SQLite 연결 종료", extra={"db_path": str(self.db_path)})

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> aiosqlite.Cursor:
        """SQL 실행 (커밋하지 않음)"""
        return await self._require().execute(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] = (),
    ) -> tuple[Any, ...] | None:
        """첫 행 조회"""
        async with self._require().execute(sql, parameters) as cursor:
            return await cursor.fetchone()

    async def commit(self) -> None:
        await self._require().commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """블록 성공 시 커밋, 예외 시 롤백 후 재발생"""
        conn = self._require()

        try:
            yield conn
        except Exception:
            await conn.rollback()
            raise
        else:
            await conn.commit()

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """blob_store 테이블 생성 + 스키마 버전 기록 (여러 번 호출해도 안전)

    blob_store: 저장 키 하나당 컬렉션 전체를 담은 blob 한 행.
    version은 교체될 때마다 증가.
    """
    async with adapter.transaction() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS blob_store (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                storage_key  TEXT NOT NULL UNIQUE,
                value        BLOB NOT NULL,
                version      INTEGER NOT NULL DEFAULT 1,
                created_at   TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at   TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    logger.info("blob_store 스키마 준비 완료", extra={"schema_version": SCHEMA_VERSION})
