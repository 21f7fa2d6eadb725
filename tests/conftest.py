# tests/conftest.py

import os
from decimal import Decimal
from datetime import datetime
from typing import AsyncGenerator, Awaitable, Callable

# pims 를 임포트하기 전에 테스트용 DB URL 을 지정해야 합니다. (settings 가 임포트 시점에 로드됨)
TEST_DATABASE_URL = "sqlite+aiosqlite://"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

# --- 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하려면 모델이 한 번 이상 임포트되어야 합니다.
from pims.domains.inv import models as inv_models  # noqa: E402


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    테스트 함수마다 독립적인 인메모리 SQLite 데이터베이스를 만듭니다.
    StaticPool 로 하나의 연결을 공유해야 테이블이 유지됩니다.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트 함수에서 사용할 비동기 데이터베이스 세션을 제공합니다."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingSessionLocal() as session:
        yield session


# --- 데이터 팩토리 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def inventory_factory(db_session: AsyncSession) -> Callable[..., Awaitable[inv_models.Inventory]]:
    """
    기본값 위에 키워드 인자를 덮어써서 재고 품목을 생성하는 팩토리 함수를 반환합니다.
    """
    async def _create_inventory(pan_id: int, **kwargs) -> inv_models.Inventory:
        item_data = {
            "pan_id": pan_id,
            "pan_date": datetime(2024, 1, 15, 9, 30),
            "lot": 2250281,
            "polymer_code": "PE",
            "form_code": "PEL",
            "grade_code": "HD5502",
            "supplier_code": "SUP-A",
            "brand": "Marlex",
            "folder_code": "PSD",
            "warehouse_name": "Main",
            "location_group": "Row-1",
            "compartment": "A",
            "weight_left": Decimal("1000"),
            **kwargs,
        }
        item = inv_models.Inventory(**item_data)
        db_session.add(item)
        await db_session.commit()
        await db_session.refresh(item)
        return item
    return _create_inventory


@pytest_asyncio.fixture(scope="function")
def allocation_factory(db_session: AsyncSession) -> Callable[..., Awaitable[inv_models.Allocation]]:
    """
    할당 기록을 생성하는 팩토리 함수를 반환합니다. inventory_id 를 생략하면 팬 단위 할당입니다.
    """
    async def _create_allocation(pan_id: int, qty: str, inventory_id: int = None, **kwargs) -> inv_models.Allocation:
        record = inv_models.Allocation(pan_id=pan_id, inventory_id=inventory_id, qty=Decimal(qty), **kwargs)
        db_session.add(record)
        await db_session.commit()
        await db_session.refresh(record)
        return record
    return _create_allocation
