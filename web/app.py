"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
LedgerStore 생성/로드/종료는 lifespan에서 관리.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.constants import APP_VERSION
from core.ledger import LedgerStore, PersistenceUnavailable
from core.storage.blob_store import BlobStore
from web.routes import health, items

logger = logging.getLogger(__name__)


async def _load_ledger(ledger: LedgerStore) -> None:
    """Ledger 로드 (실패해도 degraded 모드로 계속)"""
    try:
        await ledger.load()
    except PersistenceUnavailable as e:
        logger.warning(f"Web: Ledger 로드 실패, 메모리 전용으로 시작: {e}")


def create_app(ledger: LedgerStore | None = None) -> FastAPI:
    """FastAPI 앱 생성

    Args:
        ledger: 미리 만든 LedgerStore (None이면 settings의 SQLite DB 사용)

    Returns:
        FastAPI 앱
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """앱 생명주기 관리"""
        db: SQLiteAdapter | None = None

        if ledger is not None:
            app.state.ledger = ledger
        else:
            settings = get_settings()

            # 시작 시 - DB 스키마 자동 초기화
            db = SQLiteAdapter(settings.db_path)
            await db.connect()
            await init_schema(db)

            app.state.ledger = LedgerStore(
                BlobStore(db, key=settings.storage_key),
                write_retries=settings.write_retries,
                retry_delay=settings.retry_delay_sec,
            )

        await _load_ledger(app.state.ledger)
        logger.info("Web: Ledger 준비 완료", extra={"item_count": len(app.state.ledger)})

        yield

        # 종료 시 - 남은 쓰기 처리 후 리소스 정리
        await app.state.ledger.close()
        app.state.ledger = None

        if db is not None:
            await db.close()
            logger.info("Web: DB 연결 종료 완료")

    app = FastAPI(
        title="ItemLedger API",
        description="소규모 재고 판매 기록 API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 설정 (개발용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(items.router)

    return app
