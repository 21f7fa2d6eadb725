# tests/domains/test_inv_facets_n.py

"""
필터 패싯 수집(facets.py)과 캐시에 대한 통합 테스트 모듈입니다.
"""

import asyncio
from datetime import date, datetime

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from pims.domains.inv import facets as inv_facets
from pims.domains.inv.facets import FacetCache, collect_facets


# =================================================================================
# 1. 패싯 수집
# =================================================================================
@pytest.mark.asyncio
async def test_empty_inventory_uses_default_ranges(db_session: AsyncSession):
    """(성공) 데이터가 없으면 빈 목록과 기본 범위"""
    facets = await collect_facets(db_session)

    assert facets.suppliers == []
    assert facets.lots == []
    assert facets.ranges.mi_range == [0.0, 100.0]
    assert facets.ranges.density_range == [0.0, 2.0]
    assert facets.ranges.izod_range == [0.0, 20.0]
    assert facets.ranges.date_range == [date.today(), date.today()]


@pytest.mark.asyncio
async def test_distinct_values_are_sorted_and_non_blank(db_session: AsyncSession, inventory_factory):
    await inventory_factory(1, supplier_code="SUP-B", grade_code="HD5502", warehouse_name="North", folder_code="PSD", lot=2)
    await inventory_factory(2, supplier_code="SUP-A", grade_code="  ", warehouse_name="North", folder_code="PSD", lot=1)
    await inventory_factory(3, supplier_code=None, grade_code="LL1002", warehouse_name="South", folder_code=None, lot=None)
    await inventory_factory(4, supplier_code="SUP-B", grade_code="", location_group=None, folder_code="KRX", lot=None)
    await inventory_factory(5, folder_code=None, lot=123)

    facets = await collect_facets(db_session)

    assert facets.suppliers == ["SUP-A", "SUP-B"]
    assert facets.grades == ["HD5502", "LL1002"]
    assert facets.warehouses == ["Main", "North", "South"]
    assert facets.locations == ["Row-1"]
    assert facets.polymers == ["PE"]
    assert facets.forms == ["PEL"]
    assert facets.lots == ["PSD-1", "PSD-2"]


@pytest.mark.asyncio
async def test_spec_and_date_ranges(db_session: AsyncSession, inventory_factory, caplog):
    """(성공) 스펙 범위는 구획별로 해석한 값 기준, 해석 불가 값은 경고 후 제외"""
    await inventory_factory(
        1, compartment="B", melt_index_a="50", melt_index_b="0.8", density_b="0.941", pan_date=datetime(2023, 12, 1, 7, 0)
    )
    await inventory_factory(
        2, compartment="A", melt_index_a="12", density_a="bad", izod_a="4.5", pan_date=datetime(2024, 2, 3, 18, 0)
    )
    await inventory_factory(3, compartment="XX", melt_index_a=" ", pan_date=None)

    facets = await collect_facets(db_session)

    assert facets.ranges.mi_range == [0.8, 12.0]
    assert facets.ranges.density_range == [0.941, 0.941]
    assert facets.ranges.izod_range == [4.5, 4.5]
    assert facets.ranges.date_range == [date(2023, 12, 1), date(2024, 2, 3)]
    assert "density_a" in caplog.text


# =================================================================================
# 2. 캐시
# =================================================================================
@pytest.mark.asyncio
async def test_cache_memoizes_until_invalidated(db_session: AsyncSession, inventory_factory):
    cache = FacetCache(ttl_seconds=0)
    await inventory_factory(1, supplier_code="SUP-A")

    first = await cache.get(db_session)
    await inventory_factory(2, supplier_code="SUP-Z")
    second = await cache.get(db_session)

    assert second is first
    assert second.suppliers == ["SUP-A"]

    cache.invalidate()
    third = await cache.get(db_session)
    assert third.suppliers == ["SUP-A", "SUP-Z"]


@pytest.mark.asyncio
async def test_cache_expires_after_ttl(db_session: AsyncSession):
    cache = FacetCache(ttl_seconds=60)

    first = await cache.get(db_session)
    assert await cache.get(db_session) is first

    # 로드 시각을 TTL 이전으로 되돌립니다.
    cache._loaded_at -= 61
    assert await cache.get(db_session) is not first


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_load(db_session: AsyncSession, monkeypatch):
    """(성공) 동시에 요청해도 패싯은 한 번만 수집"""
    calls = []
    original = inv_facets.collect_facets

    async def counting_collect(db):
        calls.append(db)
        await asyncio.sleep(0)
        return await original(db)

    monkeypatch.setattr(inv_facets, "collect_facets", counting_collect)
    cache = FacetCache(ttl_seconds=0)

    results = await asyncio.gather(*(cache.get(db_session) for _ in range(5)))

    assert len(calls) == 1
    assert all(result is results[0] for result in results)
