# pims/domains/inv/filters.py

"""
검색 조건(InventorySearchCriteria)을 조합 가능한 필터 절(clause) 트리로 변환하는 모듈입니다.

필터는 저장소와 무관한 데이터 구조로 표현됩니다.
- 각 절은 `matches(row)` 로 애플리케이션 계층에서 직접 평가할 수 있고,
- `pims.domains.inv.query.to_sql()` 이 같은 트리를 SQL 조건으로 변환(푸시다운)합니다.

카테고리 간에는 AND, 카테고리 안에서는 OR 로 결합합니다.
값이 없는 조건은 어떤 행도 제외하지 않습니다.
"""

import logging
import string
from dataclasses import dataclass, field as dataclass_field
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from pims.domains.inv.schemas import InventorySearchCriteria

logger = logging.getLogger(__name__)

# 텍스트 정규화: ASCII 대문자만 소문자로 바꾸고 '-', '/', '.', ' ' 는 제거
_STRIP_TABLE = str.maketrans(string.ascii_uppercase, string.ascii_lowercase, "-/. ")

# 단일 컬럼 텍스트 검색 대상
TEXT_FIELDS: Tuple[str, ...] = (
    "polymer_code",
    "grade_code",
    "brand",
    "supplier_code",
    "lot_name",
    "purchase_order",
    "container_num",
)

# 사용자가 두 컬럼에 걸친 코드(예: 'PEPEL', 'PSD-2250281')를 입력하는 경우를 위한 결합 대상
TEXT_COMPOSITES: Tuple[Tuple[str, str], ...] = (
    ("polymer_code", "form_code"),
    ("folder_code", "lot_name"),
    ("folder_code", "lot"),
    ("polymer_code", "lot_name"),
    ("polymer_code", "grade_code"),
)

TEXT_SEPARATORS: Tuple[str, ...] = ("", "-", " ")


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).translate(_STRIP_TABLE)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


# =============================================================================
# 1. 필터 절(clause) 정의
# =============================================================================
class Clause:
    """모든 필터 절의 기본 클래스입니다."""

    def matches(self, row: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class AndClause(Clause):
    clauses: Tuple[Clause, ...] = ()

    def matches(self, row: Any) -> bool:
        return all(clause.matches(row) for clause in self.clauses)


@dataclass(frozen=True)
class OrClause(Clause):
    clauses: Tuple[Clause, ...] = ()

    def matches(self, row: Any) -> bool:
        return any(clause.matches(row) for clause in self.clauses)


@dataclass(frozen=True)
class NullClause(Clause):
    field: str

    def matches(self, row: Any) -> bool:
        return getattr(row, self.field) is None


@dataclass(frozen=True)
class InListClause(Clause):
    field: str
    values: Tuple[Any, ...]

    def matches(self, row: Any) -> bool:
        return getattr(row, self.field) in self.values


@dataclass(frozen=True)
class RangeClause(Clause):
    """
    `minimum` / `maximum` 중 주어진 경계만 적용합니다.
    값이 NULL 인 행은 범위를 만족하지 않습니다.
    """
    field: str
    minimum: Any = None
    maximum: Any = None
    min_inclusive: bool = True
    max_inclusive: bool = True

    def matches(self, row: Any) -> bool:
        value = getattr(row, self.field)
        if value is None:
            return False
        if self.minimum is not None:
            if value < self.minimum or (not self.min_inclusive and value == self.minimum):
                return False
        if self.maximum is not None:
            if value > self.maximum or (not self.max_inclusive and value == self.maximum):
                return False
        return True


@dataclass(frozen=True)
class TextClause(Clause):
    """
    정규화된 검색어가 후보 문자열(단일 컬럼 및 결합 컬럼) 중 하나의 부분 문자열이면 일치합니다.
    """
    query: str
    fields: Tuple[str, ...] = TEXT_FIELDS
    composites: Tuple[Tuple[str, str], ...] = TEXT_COMPOSITES
    separators: Tuple[str, ...] = TEXT_SEPARATORS
    normalized: str = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "normalized", normalize_text(self.query))

    def candidates(self, row: Any) -> Iterator[str]:
        for name in self.fields:
            yield _as_text(getattr(row, name))
        for first, second in self.composites:
            left = _as_text(getattr(row, first))
            right = _as_text(getattr(row, second))
            for separator in self.separators:
                yield f"{left}{separator}{right}"

    def matches(self, row: Any) -> bool:
        return any(self.normalized in normalize_text(candidate) for candidate in self.candidates(row))


# =============================================================================
# 2. 검색 조건 -> 절 트리
# =============================================================================
def _has_items(values: Optional[Sequence[str]]) -> bool:
    return values is not None and len(values) > 0


def parse_quantity_bound(value: Any, name: str) -> Optional[Decimal]:
    """
    느슨한 타입의 수량 경계값을 Decimal 로 변환합니다.
    해석할 수 없으면 해당 조건만 건너뛰도록 None 을 반환합니다.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        bound = Decimal(str(value))
    except (InvalidOperation, ValueError):
        logger.info("Ignoring unparsable quantity bound %s=%r", name, value)
        return None
    if not bound.is_finite():
        logger.info("Ignoring non-finite quantity bound %s=%r", name, value)
        return None
    return bound


def spec_range_clause(
    field_name: str,
    minimum: Optional[float],
    maximum: Optional[float],
    qc_only: bool,
    include_na: bool,
) -> Optional[Clause]:
    """
    스펙 범위 필터를 만듭니다.

    - qc_only: 값이 없는 행만 (min/max 무시)
    - include_na: 경계가 하나라도 있으면 '범위 OR 값 없음'
    """
    if qc_only:
        return NullClause(field_name)
    if minimum is None and maximum is None:
        return None
    range_clause = RangeClause(field_name, minimum=minimum, maximum=maximum)
    if include_na:
        return OrClause((range_clause, NullClause(field_name)))
    return range_clause


def build_predicate(criteria: Optional[InventorySearchCriteria]) -> AndClause:
    """검색 조건을 AND 로 결합된 절 트리로 변환합니다."""
    if criteria is None:
        return AndClause(())

    clauses: List[Clause] = []

    # 1. 텍스트 검색
    if criteria.search_text and normalize_text(criteria.search_text):
        clauses.append(TextClause(criteria.search_text))

    # 2. 다중 선택 필터 (IN)
    for field_name, values in (
        ("polymer_code", criteria.polymer_codes),
        ("form_code", criteria.form_codes),
        ("grade_code", criteria.grade_codes),
        ("supplier_code", criteria.suppliers),
        ("warehouse_name", criteria.warehouse_names),
        ("location_group", criteria.location_groups),
        ("lot_name", criteria.lots),
    ):
        if _has_items(values):
            clauses.append(InListClause(field_name, tuple(values)))

    # 3. 스펙 범위 필터
    for spec_clause in (
        spec_range_clause("melt_index", criteria.min_mi, criteria.max_mi, criteria.qc_mi, criteria.include_na_mi),
        spec_range_clause("density", criteria.min_density, criteria.max_density, criteria.qc_density, criteria.include_na_density),
        spec_range_clause("izod_impact", criteria.min_izod, criteria.max_izod, criteria.qc_izod, criteria.include_na_izod),
    ):
        if spec_clause is not None:
            clauses.append(spec_clause)

    # 4. 수량 필터
    min_qty = parse_quantity_bound(criteria.min_qty, "min_qty")
    max_qty = parse_quantity_bound(criteria.max_qty, "max_qty")
    if min_qty is not None or max_qty is not None:
        clauses.append(RangeClause("available_qty", minimum=min_qty, maximum=max_qty))
    if criteria.only_available:
        clauses.append(RangeClause("available_qty", minimum=Decimal("0"), min_inclusive=False))

    # 5. 날짜 필터 (종료일은 당일 전체를 포함)
    if criteria.start_date is not None or criteria.end_date is not None:
        start = datetime.combine(criteria.start_date, time.min) if criteria.start_date else None
        end = None
        # date.max 의 다음 날은 표현할 수 없으므로 상한 없이 처리합니다.
        if criteria.end_date is not None and criteria.end_date < date.max:
            end = datetime.combine(criteria.end_date + timedelta(days=1), time.min)
        clauses.append(RangeClause("pan_date", minimum=start, maximum=end, max_inclusive=False))

    return AndClause(tuple(clauses))
