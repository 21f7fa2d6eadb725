# pims/domains/inv/views.py

"""
재고 품목과 할당 정보로부터 파생 뷰를 조립하는 모듈입니다.

- build_row(): 집계 합계(AllocationTotals)만으로 경량 투영(InventoryRow)을 만듭니다. (검색 1단계)
- build_view(): 할당 기록 전체로 롤업까지 포함한 전체 뷰(InventoryView)를 만듭니다. (검색 2단계, 단건 조회)

두 함수 모두 같은 가용 수량 공식(allocation.compute_availability)과
같은 스펙 해석(specs.resolve_spec)을 사용합니다.
데이터 품질 이상은 로그로 남기고 안전한 기본값으로 계속 진행합니다.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from pims.domains.inv.allocation import (
    Availability,
    ZERO,
    compute_availability,
    item_level_records,
    pan_level_records,
    resolve_availability,
)
from pims.domains.inv.exceptions import SpecValueError
from pims.domains.inv.models import Allocation, Inventory
from pims.domains.inv.schemas import InventoryRow, InventoryView
from pims.domains.inv.specs import SpecKind, resolve_spec

logger = logging.getLogger(__name__)

# 재고 테이블에서 그대로 복사하는 필드
ITEM_FIELDS = (
    "inventory_id",
    "pan_id",
    "pan_date",
    "lot",
    "polymer_code",
    "form_code",
    "grade_code",
    "supplier_code",
    "brand",
    "descriptor",
    "folder_code",
    "container_num",
    "purchase_order",
    "warehouse_name",
    "location_group",
    "compartment",
    "packing",
    "comment",
)

# 스펙 종류 -> 뷰 필드 이름
SPEC_TARGETS = (
    (SpecKind.MELT_INDEX, "melt_index"),
    (SpecKind.DENSITY, "density"),
    (SpecKind.IZOD, "izod_impact"),
)


class AllocationTotals(NamedTuple):
    """검색 1단계에서 그룹 집계로 얻는 품목별 할당 합계."""
    pan_weight_left: Optional[Decimal] = None
    pan_allocated: Decimal = ZERO
    pan_allocation_count: int = 0
    item_allocated: Decimal = ZERO
    item_allocation_count: int = 0


def resolve_specs(item: Inventory, warnings: List[str]) -> Dict[str, Optional[float]]:
    resolved: Dict[str, Optional[float]] = {}
    for kind, target in SPEC_TARGETS:
        try:
            resolved[target] = resolve_spec(item, kind)
        except SpecValueError as e:
            logger.warning("Inventory %s: %s; using NULL.", item.inventory_id, e)
            warnings.append(str(e))
            resolved[target] = None
    return resolved


def _row_fields(item: Inventory, availability: Availability, warnings: List[str]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {name: getattr(item, name) for name in ITEM_FIELDS}
    fields["lot_name"] = item.lot_name

    if item.weight_left is None:
        warnings.append("weight_left is missing; treated as 0")
    fields["weight_left"] = item.weight_left if item.weight_left is not None else ZERO

    fields.update(
        available_qty=availability.available_qty,
        total_allocated=availability.total_allocated,
        pan_level_allocated=availability.pan_level_allocated,
        inventory_level_allocated=availability.inventory_level_allocated,
        allocation_count=availability.allocation_count,
        allocation_status=availability.status,
        over_allocated_by=availability.over_allocated_by,
    )
    fields.update(resolve_specs(item, warnings))
    return fields


def build_row(item: Inventory, totals: AllocationTotals) -> InventoryRow:
    """집계 합계로부터 경량 투영을 만듭니다."""
    availability = compute_availability(
        weight_left=item.weight_left,
        pan_weight_left=totals.pan_weight_left,
        pan_allocated=totals.pan_allocated,
        item_allocated=totals.item_allocated,
        allocation_count=totals.pan_allocation_count + totals.item_allocation_count,
    )
    return InventoryRow(**_row_fields(item, availability, warnings=[]))


def join_distinct(values: Iterable[Optional[str]]) -> Optional[str]:
    """비어 있지 않은 값의 중복을 제거하고 정렬하여 콤마로 연결합니다."""
    distinct = sorted({str(v).strip() for v in values if v is not None and str(v).strip()})
    return ", ".join(distinct) if distinct else None


def build_view(
    item: Inventory,
    allocations_for_pan: Iterable[Allocation],
    allocations_for_item: Iterable[Allocation],
    pan_weight_left: Optional[Decimal] = None,
) -> InventoryView:
    """할당 기록 전체로부터 롤업을 포함한 파생 뷰를 만듭니다."""
    pan_records = pan_level_records(item, allocations_for_pan)
    item_records = item_level_records(item, allocations_for_item)
    availability = resolve_availability(item, pan_records, item_records, pan_weight_left)

    warnings: List[str] = []
    fields = _row_fields(item, availability, warnings)
    records = pan_records + item_records

    fields.update(
        allocated_customer_codes=join_distinct(a.customer_code for a in records),
        pan_level_customer_codes=join_distinct(a.customer_code for a in pan_records),
        inventory_level_customer_codes=join_distinct(a.customer_code for a in item_records),
        allocated_pos=join_distinct(a.purchase_order for a in records),
        pan_level_pos=join_distinct(a.purchase_order for a in pan_records),
        inventory_level_pos=join_distinct(a.purchase_order for a in item_records),
        allocated_book_nums=join_distinct(a.book_num for a in records),
        allocated_container_nums=join_distinct(a.container_num for a in records),
        allocated_so_types=join_distinct(a.so_type for a in records),
        allocation_ids=", ".join(str(a.id) for a in sorted(records, key=lambda a: a.id or 0)) or None,
        data_warnings=warnings,
    )
    return InventoryView(**fields)
