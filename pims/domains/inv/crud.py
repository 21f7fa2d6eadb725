# pims/domains/inv/crud.py

"""
'inv' 도메인의 조회 작업을 정의하는 모듈입니다.
SQLModel 과 SQLAlchemy 를 사용하여 데이터베이스와 상호작용합니다.

검색 1단계에서는 파생 필드 계산에 필요한 값을 행 단위 상관 서브쿼리 대신
그룹 집계(GROUP BY) 한 번씩으로 가져옵니다.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy import Select, distinct, func, select
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel.ext.asyncio.session import AsyncSession

from pims.core.crud_base import CRUDBase, chunked
from pims.domains.inv import models as inv_models
from pims.domains.inv.specs import COMPARTMENTS, SpecKind

logger = logging.getLogger(__name__)


class QuantityTotal(NamedTuple):
    qty: Decimal
    count: int


def _candidate_scope(column: ColumnElement, where: Optional[ColumnElement]) -> Optional[Select]:
    """
    후보 품목이 속한 키 집합을 서브쿼리로 만듭니다. 조건이 없으면 전체 테이블입니다.
    바깥 쿼리와 같은 테이블을 참조하므로 자동 상관(correlation)을 끕니다.
    """
    if where is None:
        return None
    return select(column).where(where).correlate(None)


class InventoryCRUD(CRUDBase[inv_models.Inventory]):
    """Inventory 모델에 특화된 조회 작업을 처리합니다."""

    async def get_candidates(
        self, db: AsyncSession, *, where: Optional[ColumnElement] = None
    ) -> List[inv_models.Inventory]:
        """SQL 로 내릴 수 있는 조건(where)을 만족하는 품목을 모두 조회합니다."""
        query = select(self.model)
        if where is not None:
            query = query.where(where)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_pan_weight_totals(
        self, db: AsyncSession, *, where: Optional[ColumnElement] = None
    ) -> Dict[int, Decimal]:
        """
        팬별 잔량 합계를 조회합니다.
        후보 조건(where)은 팬을 고르는 데만 사용하고, 합계는 팬에 속한 모든 품목을 대상으로 합니다.
        """
        query = select(self.model.pan_id, func.sum(self.model.weight_left)).group_by(self.model.pan_id)
        scope = _candidate_scope(self.model.pan_id, where)
        if scope is not None:
            query = query.where(self.model.pan_id.in_(scope))
        result = await db.execute(query)
        return {pan_id: total if total is not None else Decimal("0") for pan_id, total in result.all()}

    async def get_pan_weight_totals_for(
        self, db: AsyncSession, pan_ids: Sequence[int]
    ) -> Dict[int, Decimal]:
        totals: Dict[int, Decimal] = {}
        for chunk in chunked(dict.fromkeys(pan_ids)):
            result = await db.execute(
                select(self.model.pan_id, func.sum(self.model.weight_left))
                .where(self.model.pan_id.in_(chunk))
                .group_by(self.model.pan_id)
            )
            for pan_id, total in result.all():
                totals[pan_id] = total if total is not None else Decimal("0")
        return totals

    async def get_first_by_pan(self, db: AsyncSession, *, pan_id: int) -> Optional[inv_models.Inventory]:
        """팬 ID 로 첫 번째(가장 작은 inventory_id) 품목을 조회합니다."""
        return await self.get_first_filtered(db, filters={"pan_id": pan_id})

    async def get_first_match(
        self,
        db: AsyncSession,
        *,
        pan_id: int,
        polymer_code: str,
        form_code: str,
        folder_code: Optional[str] = None,
        lot_name: Optional[str] = None,
    ) -> Optional[inv_models.Inventory]:
        """
        팬 ID + 폴리머/형태/폴더/로트명이 모두 일치하는 첫 번째 품목을 조회합니다.
        로트명은 계산 필드이므로 후보를 가져온 뒤 비교합니다.
        """
        query = (
            select(self.model)
            .where(self.model.pan_id == pan_id)
            .where(self.model.polymer_code == polymer_code)
            .where(self.model.form_code == form_code)
            .where(self.model.folder_code.is_(None) if folder_code is None else self.model.folder_code == folder_code)
            .order_by(self.model.inventory_id)
        )
        result = await db.execute(query)
        for item in result.scalars().all():
            if item.lot_name == lot_name:
                return item
        return None

    async def get_distinct_values(self, db: AsyncSession, *, field: str) -> List[str]:
        """
        NULL/공백을 제외한 고유 값을 사전순으로 반환합니다.
        값은 저장된 그대로 돌려주므로 IN 필터에 그대로 사용할 수 있습니다.
        """
        column = getattr(self.model, field)
        result = await db.execute(select(distinct(column)).where(column.is_not(None)))
        values = {str(value) for value in result.scalars().all()}
        return sorted(value for value in values if value.strip())

    async def get_lot_keys(self, db: AsyncSession) -> List[Tuple[Optional[str], Optional[int]]]:
        """로트명 계산에 필요한 (folder_code, lot) 고유 조합을 반환합니다."""
        result = await db.execute(select(self.model.folder_code, self.model.lot).distinct())
        return [(folder_code, lot) for folder_code, lot in result.all()]

    async def get_spec_sources(self, db: AsyncSession) -> list:
        """스펙 범위 계산에 필요한 컬럼(inventory_id, 구획, 구획별 스펙)만 조회합니다."""
        columns = [self.model.inventory_id, self.model.compartment]
        for kind in SpecKind:
            for compartment in COMPARTMENTS:
                columns.append(getattr(self.model, f"{kind.value}_{compartment.lower()}"))
        result = await db.execute(select(*columns))
        return list(result.all())

    async def get_pan_date_range(self, db: AsyncSession) -> Tuple[Optional[datetime], Optional[datetime]]:
        result = await db.execute(select(func.min(self.model.pan_date), func.max(self.model.pan_date)))
        low, high = result.one()
        return low, high


class AllocationCRUD(CRUDBase[inv_models.Allocation]):
    """Allocation 모델에 특화된 조회 작업을 처리합니다."""

    async def get_pan_level_totals(
        self, db: AsyncSession, *, where: Optional[ColumnElement] = None
    ) -> Dict[int, QuantityTotal]:
        """팬 단위(inventory_id 가 NULL) 할당의 팬별 합계와 건수."""
        query = (
            select(self.model.pan_id, func.sum(self.model.qty), func.count(self.model.id))
            .where(self.model.inventory_id.is_(None))
            .group_by(self.model.pan_id)
        )
        scope = _candidate_scope(inv_models.Inventory.pan_id, where)
        if scope is not None:
            query = query.where(self.model.pan_id.in_(scope))
        result = await db.execute(query)
        return {pan_id: QuantityTotal(qty or Decimal("0"), count) for pan_id, qty, count in result.all()}

    async def get_item_level_totals(
        self, db: AsyncSession, *, where: Optional[ColumnElement] = None
    ) -> Dict[int, QuantityTotal]:
        """품목 단위 할당의 품목별 합계와 건수."""
        query = (
            select(self.model.inventory_id, func.sum(self.model.qty), func.count(self.model.id))
            .where(self.model.inventory_id.is_not(None))
            .group_by(self.model.inventory_id)
        )
        scope = _candidate_scope(inv_models.Inventory.inventory_id, where)
        if scope is not None:
            query = query.where(self.model.inventory_id.in_(scope))
        result = await db.execute(query)
        return {item_id: QuantityTotal(qty or Decimal("0"), count) for item_id, qty, count in result.all()}

    async def get_for_pans(self, db: AsyncSession, pan_ids: Sequence[int]) -> List[inv_models.Allocation]:
        """팬 단위 할당 기록을 조회합니다."""
        records: List[inv_models.Allocation] = []
        for chunk in chunked(dict.fromkeys(pan_ids)):
            result = await db.execute(
                select(self.model)
                .where(self.model.pan_id.in_(chunk))
                .where(self.model.inventory_id.is_(None))
            )
            records.extend(result.scalars().all())
        return records

    async def get_for_items(self, db: AsyncSession, inventory_ids: Sequence[int]) -> List[inv_models.Allocation]:
        """품목 단위 할당 기록을 조회합니다."""
        records: List[inv_models.Allocation] = []
        for chunk in chunked(dict.fromkeys(inventory_ids)):
            result = await db.execute(select(self.model).where(self.model.inventory_id.in_(chunk)))
            records.extend(result.scalars().all())
        return records


#  각 CRUD 클래스의 인스턴스 생성
inventory = InventoryCRUD(inv_models.Inventory, key="inventory_id")
allocation = AllocationCRUD(inv_models.Allocation)
