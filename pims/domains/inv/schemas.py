# pims/domains/inv/schemas.py

"""
'inv' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.

- 검색 조건(InventorySearchCriteria)
- 경량 투영(InventoryRow)과 전체 파생 뷰(InventoryView)
- 검색 결과 페이지(InventoryPage)
- 필터 패싯(FilterFacets, SpecRanges)
"""

import enum
from typing import List, Optional, Union
from datetime import date, datetime
from decimal import Decimal

from pydantic import Field
from sqlmodel import SQLModel


class AllocationStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    PARTIALLY_ALLOCATED = "PARTIALLY_ALLOCATED"
    FULLY_ALLOCATED = "FULLY_ALLOCATED"
    OVER_ALLOCATED = "OVER_ALLOCATED"


# =============================================================================
# 1. 검색 조건
# =============================================================================
class InventorySearchCriteria(SQLModel):
    """
    검색 요청 계층이 전달하는 구조화된 검색 조건입니다.
    값이 없는 항목은 어떤 행도 제외하지 않습니다.
    """
    search_text: Optional[str] = Field(None, description="코드/등급/브랜드/로트 등에 대한 자유 텍스트 검색")

    # --- 다중 선택 필터 ---
    polymer_codes: Optional[List[str]] = None
    form_codes: Optional[List[str]] = None
    grade_codes: Optional[List[str]] = None
    suppliers: Optional[List[str]] = None
    warehouse_names: Optional[List[str]] = None
    location_groups: Optional[List[str]] = None
    lots: Optional[List[str]] = Field(None, description="로트명(folder-lot) 목록")

    # --- 범위 필터 ---
    min_mi: Optional[float] = None
    max_mi: Optional[float] = None
    qc_mi: bool = Field(False, description="MI 값이 없는 행만 조회")
    include_na_mi: bool = Field(False, description="범위와 함께 MI 값이 없는 행도 포함")

    min_density: Optional[float] = None
    max_density: Optional[float] = None
    qc_density: bool = False
    include_na_density: bool = False

    min_izod: Optional[float] = None
    max_izod: Optional[float] = None
    qc_izod: bool = False
    include_na_izod: bool = False

    # --- 수량 필터 ---
    # 요청 계층에서 문자열 그대로 넘어오는 경우가 있어 느슨하게 받습니다.
    min_qty: Optional[Union[float, str]] = None
    max_qty: Optional[Union[float, str]] = None
    only_available: bool = False

    # --- 날짜 필터 ---
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# =============================================================================
# 2. 파생 뷰
# =============================================================================
class InventoryRow(SQLModel):
    """
    검색 1단계(필터/정렬/카운트)에 사용하는 경량 투영입니다.
    할당 기록의 문자열 롤업 없이, 집계 합계만으로 계산 가능한 파생 필드를 포함합니다.
    """
    inventory_id: int
    pan_id: int
    pan_date: Optional[datetime] = None
    lot: Optional[int] = None
    lot_name: Optional[str] = None

    polymer_code: Optional[str] = None
    form_code: Optional[str] = None
    grade_code: Optional[str] = None
    supplier_code: Optional[str] = None
    brand: Optional[str] = None
    descriptor: Optional[str] = None

    folder_code: Optional[str] = None
    container_num: Optional[str] = None
    purchase_order: Optional[str] = None
    warehouse_name: Optional[str] = None
    location_group: Optional[str] = None
    compartment: Optional[str] = None
    packing: Optional[str] = None
    comment: Optional[str] = None

    weight_left: Decimal = Decimal("0")
    available_qty: Decimal = Decimal("0")
    total_allocated: Decimal = Decimal("0")
    pan_level_allocated: Decimal = Decimal("0")
    inventory_level_allocated: Decimal = Decimal("0")
    allocation_count: int = 0
    allocation_status: AllocationStatus = AllocationStatus.AVAILABLE
    over_allocated_by: Decimal = Decimal("0")

    melt_index: Optional[float] = None
    density: Optional[float] = None
    izod_impact: Optional[float] = None


class InventoryView(InventoryRow):
    """
    한 재고 품목에 대한 전체 파생 뷰입니다. 저장되지 않으며 조회 시점마다 다시 계산됩니다.
    할당 부가 정보는 중복을 제거한 뒤 콤마로 연결합니다.
    """
    allocated_customer_codes: Optional[str] = None
    pan_level_customer_codes: Optional[str] = None
    inventory_level_customer_codes: Optional[str] = None
    allocated_pos: Optional[str] = None
    pan_level_pos: Optional[str] = None
    inventory_level_pos: Optional[str] = None
    allocated_book_nums: Optional[str] = None
    allocated_container_nums: Optional[str] = None
    allocated_so_types: Optional[str] = None
    allocation_ids: Optional[str] = None

    data_warnings: List[str] = Field(default_factory=list, description="계산 중 발견된 데이터 품질 이상")


class InventoryPage(SQLModel):
    items: List[InventoryView] = Field(default_factory=list)
    total: int = Field(0, description="필터를 만족하는 전체 행 수")
    page: int = 0
    size: int = 0


# =============================================================================
# 3. 필터 패싯
# =============================================================================
class SpecRanges(SQLModel):
    mi_range: List[float] = Field(default_factory=lambda: [0.0, 100.0])
    density_range: List[float] = Field(default_factory=lambda: [0.0, 2.0])
    izod_range: List[float] = Field(default_factory=lambda: [0.0, 20.0])
    date_range: List[date] = Field(default_factory=list)


class FilterFacets(SQLModel):
    suppliers: List[str] = Field(default_factory=list)
    grades: List[str] = Field(default_factory=list)
    forms: List[str] = Field(default_factory=list)
    polymers: List[str] = Field(default_factory=list)
    warehouses: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    lots: List[str] = Field(default_factory=list)
    ranges: SpecRanges = Field(default_factory=SpecRanges)
