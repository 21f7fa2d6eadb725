# pims/domains/inv/query.py

"""
필터 절 트리를 SQLAlchemy 조건식으로 변환(lowering)하는 모듈입니다.

파생 필드(가용 수량, 구획별 스펙 등)는 애플리케이션 계층에서 계산되므로 SQL 로 내릴 수 없습니다.
따라서 변환은 '후보 축소'를 위한 푸시다운으로만 사용합니다.

- AndClause: 변환 가능한 자식만 모아서 AND (결과는 원래 조건의 상위 집합)
- OrClause: 모든 자식이 변환 가능할 때만 OR
- 변환 불가능한 절은 None 을 반환합니다.

검색 실행기는 SQL 로 후보를 줄인 뒤 항상 전체 절 트리를 다시 평가합니다.
"""

from typing import List, Optional

from sqlalchemy import String, and_, cast, func, literal, or_
from sqlalchemy.sql.elements import ColumnElement

from pims.domains.inv.filters import (
    AndClause,
    Clause,
    InListClause,
    NullClause,
    OrClause,
    RangeClause,
    TextClause,
)
from pims.domains.inv.models import Inventory

# inventory 테이블에 실제로 존재하는 컬럼만 직접 비교할 수 있습니다.
BASE_COLUMNS = frozenset(Inventory.__table__.columns.keys())

_STRIPPED_CHARS = ("-", "/", ".", " ")


def column_for(field: str) -> Optional[ColumnElement]:
    if field in BASE_COLUMNS:
        return Inventory.__table__.c[field]
    return None


def _text_expression(field: str) -> Optional[ColumnElement]:
    """텍스트 검색용 문자열 표현식. NULL 은 빈 문자열로 취급합니다."""
    if field == "lot_name":
        # 두 부분 중 하나라도 NULL 이면 결합 결과가 NULL 이 되어 빈 문자열로 바뀝니다.
        return func.coalesce(
            Inventory.__table__.c.folder_code
            + literal("-", String)
            + cast(Inventory.__table__.c.lot, String),
            "",
            type_=String,
        )
    column = column_for(field)
    if column is None:
        return None
    if not isinstance(column.type, String):
        column = cast(column, String)
    return func.coalesce(column, "", type_=String)


def _normalized(expression: ColumnElement) -> ColumnElement:
    for char in _STRIPPED_CHARS:
        expression = func.replace(expression, char, "", type_=String)
    return func.lower(expression, type_=String)


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _lower_text(clause: TextClause) -> Optional[ColumnElement]:
    # SQL 의 lower() 는 백엔드에 따라 ASCII 만 처리하므로 ASCII 검색어만 내립니다.
    if not clause.normalized or not clause.normalized.isascii():
        return None

    candidates: List[ColumnElement] = []
    for field in clause.fields:
        expression = _text_expression(field)
        if expression is None:
            return None
        candidates.append(expression)
    for first, second in clause.composites:
        left = _text_expression(first)
        right = _text_expression(second)
        if left is None or right is None:
            return None
        for separator in clause.separators:
            candidates.append(left + literal(separator, String) + right)

    pattern = _like_pattern(clause.normalized)
    return or_(*(_normalized(candidate).like(pattern, escape="\\") for candidate in candidates))


def _lower_range(clause: RangeClause) -> Optional[ColumnElement]:
    column = column_for(clause.field)
    if column is None:
        return None
    conditions = []
    if clause.minimum is not None:
        conditions.append(column >= clause.minimum if clause.min_inclusive else column > clause.minimum)
    if clause.maximum is not None:
        conditions.append(column <= clause.maximum if clause.max_inclusive else column < clause.maximum)
    if not conditions:
        return column.is_not(None)
    return and_(*conditions)


def to_sql(clause: Clause) -> Optional[ColumnElement]:
    """
    절 트리를 SQL 조건식으로 변환합니다. 변환할 수 없으면 None 을 반환합니다.
    """
    if isinstance(clause, AndClause):
        lowered = [expr for expr in (to_sql(child) for child in clause.clauses) if expr is not None]
        if not lowered:
            return None
        return and_(*lowered)

    if isinstance(clause, OrClause):
        lowered = [to_sql(child) for child in clause.clauses]
        if not lowered or any(expr is None for expr in lowered):
            return None
        return or_(*lowered)

    if isinstance(clause, NullClause):
        column = column_for(clause.field)
        return column.is_(None) if column is not None else None

    if isinstance(clause, InListClause):
        column = column_for(clause.field)
        return column.in_(clause.values) if column is not None else None

    if isinstance(clause, RangeClause):
        return _lower_range(clause)

    if isinstance(clause, TextClause):
        return _lower_text(clause)

    return None
