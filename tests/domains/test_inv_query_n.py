# tests/domains/test_inv_query_n.py

"""
필터 절 트리 -> SQL 조건 변환(query.py)에 대한 테스트 모듈입니다.
변환된 조건을 실제 (SQLite) 데이터베이스에 실행하여 애플리케이션 계층 평가와 같은 결과인지 확인합니다.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlmodel.ext.asyncio.session import AsyncSession

from pims.domains.inv import models as inv_models
from pims.domains.inv.filters import (
    AndClause,
    InListClause,
    NullClause,
    OrClause,
    RangeClause,
    TextClause,
    build_predicate,
)
from pims.domains.inv.query import to_sql
from pims.domains.inv.schemas import InventorySearchCriteria


async def _matching_ids(db: AsyncSession, where) -> set:
    result = await db.execute(select(inv_models.Inventory.inventory_id).where(where))
    return set(result.scalars().all())


# =================================================================================
# 1. 변환 규칙
# =================================================================================
def test_derived_fields_are_not_lowered():
    """(성공) 파생 필드(가용 수량, 스펙) 조건은 SQL 로 내리지 않음"""
    assert to_sql(RangeClause("available_qty", minimum=Decimal("1"))) is None
    assert to_sql(NullClause("melt_index")) is None
    assert to_sql(InListClause("lot_name", ("PSD-1",))) is None


def test_and_pushes_down_lowerable_children_only():
    clause = AndClause((InListClause("polymer_code", ("PE",)), RangeClause("available_qty", minimum=Decimal("1"))))

    lowered = to_sql(clause)

    assert lowered is not None
    assert "polymer_code" in str(lowered)
    assert "available_qty" not in str(lowered)


def test_or_requires_every_child():
    partial = OrClause((RangeClause("density", minimum=0.9), NullClause("density")))
    full = OrClause((NullClause("polymer_code"), InListClause("form_code", ("PEL",))))

    assert to_sql(partial) is None
    assert to_sql(full) is not None


def test_empty_predicate_is_not_lowered():
    assert to_sql(build_predicate(None)) is None


def test_non_ascii_text_is_not_lowered():
    assert to_sql(TextClause("폴리에틸렌")) is None


# =================================================================================
# 2. 실행 결과
# =================================================================================
@pytest.mark.asyncio
async def test_text_pushdown_matches_composites(db_session: AsyncSession, inventory_factory):
    """(성공) SQL 로 내린 텍스트 검색도 결합 코드('pepel', 'psd2250281')를 찾음"""
    pe = await inventory_factory(1, polymer_code="PE", form_code="PEL", folder_code="PSD", lot=2250281)
    pp = await inventory_factory(2, polymer_code="PP", form_code="RAF", folder_code="KRX", lot=77, grade_code="H030")
    await inventory_factory(3, polymer_code="PS", form_code=None, folder_code=None, lot=None, brand=None)

    assert await _matching_ids(db_session, to_sql(TextClause("pepel"))) == {pe.inventory_id}
    assert await _matching_ids(db_session, to_sql(TextClause("PSD-2250281"))) == {pe.inventory_id}
    assert await _matching_ids(db_session, to_sql(TextClause("krx77"))) == {pp.inventory_id}
    assert await _matching_ids(db_session, to_sql(TextClause("pph030"))) == {pp.inventory_id}


@pytest.mark.asyncio
async def test_text_pushdown_escapes_like_wildcards(db_session: AsyncSession, inventory_factory):
    await inventory_factory(1, brand="100%_virgin")
    await inventory_factory(2, brand="100 virgin")

    ids = await _matching_ids(db_session, to_sql(TextClause("100%_")))

    assert len(ids) == 1


@pytest.mark.asyncio
async def test_date_and_in_list_pushdown(db_session: AsyncSession, inventory_factory):
    early = await inventory_factory(1, pan_date=datetime(2024, 1, 1, 8, 0), warehouse_name="North")
    late = await inventory_factory(2, pan_date=datetime(2024, 1, 31, 23, 0), warehouse_name="North")
    await inventory_factory(3, pan_date=datetime(2024, 2, 1, 0, 0), warehouse_name="North")
    await inventory_factory(4, pan_date=datetime(2024, 1, 15), warehouse_name="South")

    where = to_sql(
        build_predicate(
            InventorySearchCriteria(
                warehouse_names=["North"],
                start_date=date(2024, 1, 1),
                end_date=date(2024, 1, 31),
            )
        )
    )

    assert await _matching_ids(db_session, where) == {early.inventory_id, late.inventory_id}
