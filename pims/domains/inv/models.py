# pims/domains/inv/models.py

"""
'inv' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

두 테이블 모두 창고 기간계 시스템이 소유하며, 이 애플리케이션은 읽기만 합니다.
- inventory: 팬(pan, 배치) 안의 개별 재고 품목. 구획(compartment)별 기술 스펙을 텍스트로 보관합니다.
- allocations: 추가 전용(append-only) 할당 기록. inventory_id가 NULL이면 팬 단위 할당입니다.
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Numeric
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. inventory 테이블 모델
# =============================================================================
class InventoryBase(SQLModel):
    pan_id: int = Field(index=True, description="팬(배치) ID")
    pan_date: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP, index=True))
    lot: Optional[int] = Field(default=None, description="폴더 내 로트 번호")

    # --- 제품 정보 ---
    polymer_code: Optional[str] = Field(default=None, max_length=50, index=True)
    form_code: Optional[str] = Field(default=None, max_length=50)
    grade_code: Optional[str] = Field(default=None, max_length=100)
    supplier_code: Optional[str] = Field(default=None, max_length=50, index=True)
    brand: Optional[str] = Field(default=None, max_length=100)
    descriptor: Optional[str] = Field(default=None, max_length=100)

    # --- 물류 정보 ---
    folder_code: Optional[str] = Field(default=None, max_length=50)
    container_num: Optional[str] = Field(default=None, max_length=50)
    purchase_order: Optional[str] = Field(default=None, max_length=50)
    warehouse_name: Optional[str] = Field(default=None, max_length=100)
    location_group: Optional[str] = Field(default=None, max_length=100)
    compartment: Optional[str] = Field(default=None, max_length=10, description="'', 'A', 'B', 'CA', 'CB'")

    # --- 수량 ---
    weight_left: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(18, 2)))
    packing: Optional[str] = Field(default=None, max_length=50)
    comment: Optional[str] = Field(default=None)

    # --- 구획별 기술 스펙 (실험실 입력값, 텍스트) ---
    melt_index_a: Optional[str] = Field(default=None, max_length=30)
    melt_index_b: Optional[str] = Field(default=None, max_length=30)
    melt_index_ca: Optional[str] = Field(default=None, max_length=30)
    melt_index_cb: Optional[str] = Field(default=None, max_length=30)
    density_a: Optional[str] = Field(default=None, max_length=30)
    density_b: Optional[str] = Field(default=None, max_length=30)
    density_ca: Optional[str] = Field(default=None, max_length=30)
    density_cb: Optional[str] = Field(default=None, max_length=30)
    izod_a: Optional[str] = Field(default=None, max_length=30)
    izod_b: Optional[str] = Field(default=None, max_length=30)
    izod_ca: Optional[str] = Field(default=None, max_length=30)
    izod_cb: Optional[str] = Field(default=None, max_length=30)


class Inventory(InventoryBase, table=True):
    __tablename__ = "inventory"

    inventory_id: Optional[int] = Field(default=None, primary_key=True)

    @property
    def lot_name(self) -> Optional[str]:
        """폴더 코드와 로트 번호를 결합한 표시용 로트명 (예: 'PSD-2250281')."""
        return compose_lot_name(self.folder_code, self.lot)


def compose_lot_name(folder_code: Optional[str], lot: Optional[int]) -> Optional[str]:
    # 폴더 코드나 로트 번호 중 하나라도 없으면 로트명도 없습니다.
    if folder_code is None or lot is None:
        return None
    return f"{folder_code}-{lot}"


# =============================================================================
# 2. allocations 테이블 모델
# =============================================================================
class AllocationBase(SQLModel):
    pan_id: int = Field(index=True, description="할당 대상 팬 ID")
    # NULL 이면 팬 단위(batch-level) 할당입니다.
    inventory_id: Optional[int] = Field(default=None, index=True, description="할당 대상 재고 ID")
    qty: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    # --- 표시용 부가 정보 (롤업에만 사용) ---
    customer_code: Optional[str] = Field(default=None, max_length=50)
    purchase_order: Optional[str] = Field(default=None, max_length=50)
    container_num: Optional[str] = Field(default=None, max_length=50)
    book_num: Optional[str] = Field(default=None, max_length=50)
    so_type: Optional[str] = Field(default=None, max_length=20)


class Allocation(AllocationBase, table=True):
    __tablename__ = "allocations"

    id: Optional[int] = Field(default=None, primary_key=True)
