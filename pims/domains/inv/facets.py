# pims/domains/inv/facets.py

"""
검색 화면의 필터 선택지(패싯)를 수집하는 모듈입니다.

- 범주형 값: 공급사, 등급, 형태, 폴리머, 창고, 위치 그룹, 로트명 (공백 제외, 중복 제거, 사전순)
- 범위: 구획별로 해석한 MI / 밀도 / IZOD 의 최소-최대, 팬 날짜의 최소-최대

패싯은 자주 바뀌지 않으므로 FacetCache 로 메모이즈합니다.
"""

import asyncio
import logging
import time
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from pims.core.config import settings
from pims.domains.inv import crud as inv_crud
from pims.domains.inv.exceptions import SpecValueError
from pims.domains.inv.models import compose_lot_name
from pims.domains.inv.schemas import FilterFacets, SpecRanges
from pims.domains.inv.specs import SpecKind, resolve_spec

logger = logging.getLogger(__name__)

# 패싯 이름 -> inventory 컬럼
CATEGORY_FIELDS: Dict[str, str] = {
    "suppliers": "supplier_code",
    "grades": "grade_code",
    "forms": "form_code",
    "polymers": "polymer_code",
    "warehouses": "warehouse_name",
    "locations": "location_group",
}

# 스펙 종류 -> SpecRanges 필드
RANGE_FIELDS: Dict[SpecKind, str] = {
    SpecKind.MELT_INDEX: "mi_range",
    SpecKind.DENSITY: "density_range",
    SpecKind.IZOD: "izod_range",
}


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


async def collect_spec_ranges(db: AsyncSession) -> SpecRanges:
    values: Dict[SpecKind, List[float]] = {kind: [] for kind in RANGE_FIELDS}
    for source in await inv_crud.inventory.get_spec_sources(db):
        for kind in RANGE_FIELDS:
            try:
                value = resolve_spec(source, kind)
            except SpecValueError as e:
                logger.warning("Skipping spec value of inventory %s: %s", source.inventory_id, e)
                continue
            if value is not None:
                values[kind].append(value)

    ranges = SpecRanges()
    for kind, target in RANGE_FIELDS.items():
        if values[kind]:
            setattr(ranges, target, [min(values[kind]), max(values[kind])])

    low, high = await inv_crud.inventory.get_pan_date_range(db)
    low, high = _as_date(low), _as_date(high)
    if low is not None and high is not None:
        ranges.date_range = [low, high]
    else:
        today = date.today()
        ranges.date_range = [today, today]
    return ranges


async def collect_facets(db: AsyncSession) -> FilterFacets:
    """재고 테이블 전체를 훑어 필터 선택지를 만듭니다."""
    facets: Dict[str, List[str]] = {}
    for name, column in CATEGORY_FIELDS.items():
        facets[name] = await inv_crud.inventory.get_distinct_values(db, field=column)

    lots = set()
    for folder_code, lot in await inv_crud.inventory.get_lot_keys(db):
        lot_name = compose_lot_name(folder_code, lot)
        if lot_name is not None:
            lots.add(lot_name)
    facets["lots"] = sorted(lots)

    return FilterFacets(**facets, ranges=await collect_spec_ranges(db))


class FacetCache:
    """
    collect_facets() 결과를 메모이즈합니다.

    ttl_seconds 가 0 이면 invalidate() 를 호출할 때까지 유지합니다.
    동시에 들어온 요청은 하나의 로드 결과를 공유합니다.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = settings.FACET_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._value: Optional[FilterFacets] = None
        self._loaded_at: Optional[float] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        if self._value is None:
            return False
        if self.ttl_seconds <= 0:
            return True
        return time.monotonic() - self._loaded_at < self.ttl_seconds

    async def get(self, db: AsyncSession) -> FilterFacets:
        if self._is_fresh():
            return self._value
        async with self._lock:
            if self._is_fresh():
                return self._value
            logger.info("Loading filter facets...")
            value = await collect_facets(db)
            self._value = value
            self._loaded_at = time.monotonic()
            return value

    def invalidate(self) -> None:
        self._value = None
        self._loaded_at = None


# 애플리케이션 전역에서 공유하는 기본 캐시
facet_cache = FacetCache()
