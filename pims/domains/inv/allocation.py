# pims/domains/inv/allocation.py

"""
재고 품목 하나의 가용 수량과 할당 상태를 계산하는 모듈입니다.

할당은 두 가지 단위로 기록됩니다.
- 팬 단위 할당 (inventory_id 가 NULL): 팬 전체의 수량을 묶어서 할당합니다.
- 품목 단위 할당 (inventory_id 지정): 특정 재고 품목에만 할당합니다.

팬 단위 할당이 하나라도 있으면 팬 전체가 하나의 풀(pool)로 잠기므로,
가용 수량은 '팬 전체 잔량 - 팬 할당 - 품목 할당'으로 계산합니다.
팬 단위 할당이 없으면 '품목 잔량 - 할당 합계'입니다.

검색 1단계(집계 합계)와 2단계(할당 기록)가 같은 공식을 쓰도록
합계 기반 계산(compute_availability)을 별도로 노출합니다.
"""

import logging
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from pims.domains.inv.models import Allocation, Inventory
from pims.domains.inv.schemas import AllocationStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class Availability(NamedTuple):
    available_qty: Decimal
    total_allocated: Decimal
    allocation_count: int
    status: AllocationStatus
    over_allocated_by: Decimal
    pan_level_allocated: Decimal
    inventory_level_allocated: Decimal


def allocation_status(available_qty: Decimal, total_allocated: Decimal) -> AllocationStatus:
    if available_qty < 0:
        return AllocationStatus.OVER_ALLOCATED
    if total_allocated > 0:
        if available_qty == 0:
            return AllocationStatus.FULLY_ALLOCATED
        return AllocationStatus.PARTIALLY_ALLOCATED
    return AllocationStatus.AVAILABLE


def compute_availability(
    weight_left: Optional[Decimal],
    pan_weight_left: Optional[Decimal],
    pan_allocated: Optional[Decimal],
    item_allocated: Optional[Decimal],
    allocation_count: int = 0,
) -> Availability:
    """
    합계 값으로부터 가용 수량을 계산합니다.

    Args:
        weight_left: 품목 자체의 잔량. None 이면 0으로 봅니다.
        pan_weight_left: 같은 팬에 속한 모든 품목의 잔량 합계. None 이면 품목 잔량을 씁니다.
        pan_allocated: 팬 단위 할당 수량 합계.
        item_allocated: 품목 단위 할당 수량 합계.
        allocation_count: 두 합계에 기여한 할당 기록 수.
    """
    weight = weight_left if weight_left is not None else ZERO
    pan_weight = pan_weight_left if pan_weight_left is not None else weight
    batch = pan_allocated or ZERO
    item = item_allocated or ZERO

    if batch > 0:
        available = pan_weight - batch - item
    else:
        available = weight - (batch + item)

    total = batch + item
    status = allocation_status(available, total)
    over_by = -available if status is AllocationStatus.OVER_ALLOCATED else ZERO
    return Availability(
        available_qty=available,
        total_allocated=total,
        allocation_count=allocation_count,
        status=status,
        over_allocated_by=over_by,
        pan_level_allocated=batch,
        inventory_level_allocated=item,
    )


def pan_level_records(item: Inventory, allocations: Iterable[Allocation]) -> list[Allocation]:
    return [a for a in allocations if a.pan_id == item.pan_id and a.inventory_id is None]


def item_level_records(item: Inventory, allocations: Iterable[Allocation]) -> list[Allocation]:
    return [a for a in allocations if a.inventory_id is not None and a.inventory_id == item.inventory_id]


def resolve_availability(
    item: Inventory,
    allocations_for_pan: Iterable[Allocation],
    allocations_for_item: Iterable[Allocation],
    pan_weight_left: Optional[Decimal] = None,
) -> Availability:
    """
    할당 기록 목록으로부터 품목의 가용 수량과 할당 상태를 계산합니다.

    `allocations_for_pan` 에 품목 단위 기록이 섞여 있어도 팬 단위(inventory_id 가 NULL)
    기록만 합산합니다. `allocations_for_item` 역시 해당 품목의 기록만 사용합니다.
    """
    if item.weight_left is None:
        logger.warning("Inventory %s has no weight_left; treating it as 0.", item.inventory_id)

    batch_records = pan_level_records(item, allocations_for_pan)
    item_records = item_level_records(item, allocations_for_item)

    return compute_availability(
        weight_left=item.weight_left,
        pan_weight_left=pan_weight_left,
        pan_allocated=sum((a.qty for a in batch_records), ZERO),
        item_allocated=sum((a.qty for a in item_records), ZERO),
        allocation_count=len(batch_records) + len(item_records),
    )
