# pims/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel/SQLAlchemy 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
- 개발 환경에서 테이블을 생성하는 함수를 포함합니다.

재고(inventory)와 할당(allocations) 테이블은 창고 기간계 시스템이 소유합니다.
이 모듈은 읽기 전용 조회를 위한 연결만 책임지며, 스키마 변경은 외부에서 관리합니다.
"""

import logging
from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from pims.core.config import settings

# 모든 SQLModel 테이블 클래스가 metadata에 등록되도록 임포트합니다.
from pims.domains.inv import models  # noqa: F401

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """
    엔진 생성 옵션을 구성합니다.
    SQLite(aiosqlite)는 큐 풀 옵션(pool_size, max_overflow)을 받지 않으므로 제외합니다.
    """
    options: Dict[str, Any] = {
        "echo": settings.DEBUG_MODE,  # 디버그 모드일 때만 SQL 쿼리 출력
        "future": True,
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_recycle=3600,  # 1시간마다 연결 재활용
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    return options


_database_url = settings.DATABASE_URL.get_secret_value()

engine: AsyncEngine = create_async_engine(_database_url, **_engine_options(_database_url))

# 비동기 세션을 생성하는 '세션 공장'입니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# =============================================================================
# 데이터베이스 초기화 (개발용)
# =============================================================================
async def create_db_and_tables() -> None:
    """
    테이블을 생성합니다. 개발/테스트 환경에서만 사용하며 기존 테이블은 건드리지 않습니다.
    """
    logger.info("Creating inventory tables (if missing)...")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Inventory tables are ready.")


# =============================================================================
# 비동기 데이터베이스 세션
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    요청 계층(외부 협력자)이 의존성으로 사용할 비동기 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 처리 후 세션을 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    CLI 스크립트 등 비동기 컨텍스트에서 사용할 독립적인 세션 컨텍스트 관리자입니다.
    조회 전용이므로 커밋하지 않고, 예외 시 롤백한 뒤 다시 전파합니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
