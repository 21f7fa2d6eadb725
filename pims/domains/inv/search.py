# pims/domains/inv/search.py

"""
재고 검색을 2단계로 실행하는 모듈입니다.

1단계 (경량):
    SQL 로 내릴 수 있는 조건으로 후보 품목을 고르고, 할당/잔량 합계를 그룹 집계로 읽어
    경량 투영(InventoryRow)을 만든 뒤 전체 필터를 평가하고 정렬, 카운트, 페이지 슬라이스를 합니다.
2단계 (하이드레이션):
    현재 페이지에 해당하는 키만 할당 기록까지 읽어 전체 파생 뷰(InventoryView)를 만들고,
    1단계의 키 순서대로 다시 정렬합니다.

두 단계는 같은 가용 수량 공식을 사용하므로 정렬 키(available_qty 등)와 결과 값이 일치합니다.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel.ext.asyncio.session import AsyncSession

from pims.core.config import settings
from pims.domains.inv import crud as inv_crud
from pims.domains.inv.filters import build_predicate
from pims.domains.inv.models import Allocation
from pims.domains.inv.query import to_sql
from pims.domains.inv.schemas import InventoryPage, InventoryRow, InventorySearchCriteria, InventoryView
from pims.domains.inv.views import AllocationTotals, build_row, build_view

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 정렬
# =============================================================================
@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


DEFAULT_SORT: Tuple[SortKey, ...] = (SortKey("pan_date", descending=True),)

# 화면에서 사용하던 이전 정렬 키
LEGACY_SORTS: Dict[str, Tuple[SortKey, ...]] = {
    "recent": (SortKey("pan_date", descending=True),),
    "quantity-high": (SortKey("available_qty", descending=True),),
    "quantity-low": (SortKey("available_qty"),),
    "supplier": (SortKey("supplier_code"),),
    "polymer": (SortKey("polymer_code"),),
    "lot": (SortKey("lot"),),
}

SORTABLE_FIELDS = frozenset(InventoryRow.model_fields.keys())

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _sort_field_name(name: str) -> str:
    """camelCase 필드명(예: 'availableQty')을 snake_case 로 바꿉니다."""
    if name in SORTABLE_FIELDS:
        return name
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def parse_sort(sort: Optional[str]) -> Tuple[SortKey, ...]:
    """
    정렬 키를 해석합니다.

    - 이전 키: 'recent', 'quantity-high', 'quantity-low', 'supplier', 'polymer', 'lot'
    - 명시적 키: 'field,direction' (예: 'available_qty,desc'). 방향을 생략하면 오름차순입니다.
      필드명은 camelCase(예: 'availableQty,desc')도 허용합니다.
    - 알 수 없는 키는 기본 정렬(pan_date 내림차순)로 대체합니다.
    """
    if sort is None or not sort.strip():
        return DEFAULT_SORT
    key = sort.strip()
    if key in LEGACY_SORTS:
        return LEGACY_SORTS[key]

    field_name, _, direction = key.partition(",")
    field_name = _sort_field_name(field_name.strip())
    direction = direction.strip().lower() or "asc"
    if field_name not in SORTABLE_FIELDS or direction not in ("asc", "desc"):
        logger.info("Unknown sort key %r; falling back to default order.", sort)
        return DEFAULT_SORT
    return (SortKey(field_name, descending=direction == "desc"),)


def sort_rows(rows: Sequence[InventoryRow], keys: Sequence[SortKey]) -> List[InventoryRow]:
    """
    여러 정렬 키로 안정 정렬합니다. NULL 값은 방향과 관계없이 항상 마지막에 옵니다.
    동점은 inventory_id 오름차순으로 결정되므로 페이지 간 결과가 겹치지 않습니다.
    """
    ordered = sorted(rows, key=lambda row: row.inventory_id)
    for key in reversed(keys):
        present = [row for row in ordered if getattr(row, key.field) is not None]
        missing = [row for row in ordered if getattr(row, key.field) is None]
        present.sort(key=lambda row: getattr(row, key.field), reverse=key.descending)
        ordered = present + missing
    return ordered


# =============================================================================
# 2. 1단계: 경량 투영
# =============================================================================
async def load_rows(db: AsyncSession, where: Optional[ColumnElement] = None) -> List[InventoryRow]:
    """
    후보 품목과 그룹 집계를 읽어 경량 투영 목록을 만듭니다.
    팬 잔량 합계는 후보가 아닌 품목까지 포함한 팬 전체를 기준으로 합니다.
    """
    items = await inv_crud.inventory.get_candidates(db, where=where)
    if not items:
        return []

    pan_weights = await inv_crud.inventory.get_pan_weight_totals(db, where=where)
    pan_totals = await inv_crud.allocation.get_pan_level_totals(db, where=where)
    item_totals = await inv_crud.allocation.get_item_level_totals(db, where=where)

    rows: List[InventoryRow] = []
    for item in items:
        pan_total = pan_totals.get(item.pan_id)
        item_total = item_totals.get(item.inventory_id)
        totals = AllocationTotals(
            pan_weight_left=pan_weights.get(item.pan_id),
            pan_allocated=pan_total.qty if pan_total else Decimal("0"),
            pan_allocation_count=pan_total.count if pan_total else 0,
            item_allocated=item_total.qty if item_total else Decimal("0"),
            item_allocation_count=item_total.count if item_total else 0,
        )
        rows.append(build_row(item, totals))
    return rows


# =============================================================================
# 3. 2단계: 하이드레이션
# =============================================================================
async def hydrate(db: AsyncSession, keys: Sequence[int]) -> List[InventoryView]:
    """
    주어진 키의 전체 파생 뷰를 키 순서대로 반환합니다.
    1단계 이후 사라진 키는 경고 로그를 남기고 건너뜁니다.
    """
    if not keys:
        return []

    items = await inv_crud.inventory.get_many(db, keys)
    by_id = {item.inventory_id: item for item in items}
    pan_ids = [item.pan_id for item in items]

    pan_weights = await inv_crud.inventory.get_pan_weight_totals_for(db, pan_ids)
    allocations_by_pan: Dict[int, List[Allocation]] = defaultdict(list)
    for record in await inv_crud.allocation.get_for_pans(db, pan_ids):
        allocations_by_pan[record.pan_id].append(record)
    allocations_by_item: Dict[int, List[Allocation]] = defaultdict(list)
    for record in await inv_crud.allocation.get_for_items(db, list(by_id)):
        allocations_by_item[record.inventory_id].append(record)

    views: List[InventoryView] = []
    for key in keys:
        item = by_id.get(key)
        if item is None:
            logger.warning("Inventory %s disappeared between search phases; skipping.", key)
            continue
        views.append(
            build_view(
                item,
                allocations_by_pan.get(item.pan_id, []),
                allocations_by_item.get(key, []),
                pan_weight_left=pan_weights.get(item.pan_id),
            )
        )
    return views


# =============================================================================
# 4. 검색 실행
# =============================================================================
async def search(
    db: AsyncSession,
    criteria: Optional[InventorySearchCriteria] = None,
    *,
    page: int = 0,
    size: Optional[int] = None,
    sort: Optional[str] = None,
) -> InventoryPage:
    """
    검색 조건을 만족하는 재고 품목의 한 페이지를 반환합니다.

    Args:
        criteria: 검색 조건. None 이면 전체 품목이 대상입니다.
        page: 0부터 시작하는 페이지 번호.
        size: 페이지 크기. None 이면 SEARCH_DEFAULT_PAGE_SIZE 를 사용합니다.
        sort: 정렬 키. parse_sort() 참고.

    Raises:
        ValueError: page 가 음수이거나 size 가 1보다 작은 경우.
    """
    if size is None:
        size = settings.SEARCH_DEFAULT_PAGE_SIZE
    if page < 0:
        raise ValueError(f"page must be >= 0, got {page}")
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    if size > settings.SEARCH_MAX_PAGE_SIZE:
        logger.info("Page size %s exceeds the limit; using %s.", size, settings.SEARCH_MAX_PAGE_SIZE)
        size = settings.SEARCH_MAX_PAGE_SIZE

    predicate = build_predicate(criteria)
    where = to_sql(predicate)

    # 1단계
    rows = await load_rows(db, where)
    matched = [row for row in rows if predicate.matches(row)]
    ordered = sort_rows(matched, parse_sort(sort))
    total = len(ordered)
    start = page * size
    keys = [row.inventory_id for row in ordered[start:start + size]]
    logger.debug("Search matched %s of %s candidate rows; page %s has %s keys.", total, len(rows), page, len(keys))

    # 2단계
    items = await hydrate(db, keys)
    return InventoryPage(items=items, total=total, page=page, size=size)
