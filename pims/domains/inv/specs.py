# pims/domains/inv/specs.py

"""
보관 구획(compartment)에 따라 올바른 기술 스펙 값을 선택하는 모듈입니다.

실험실 값은 구획별 텍스트 컬럼(예: melt_index_a, melt_index_cb)에 저장되어 있습니다.
구획 코드는 대소문자를 구분하여 고정된 목록과 비교하며, 그 외 값(빈 문자열, NULL,
알 수 없는 코드)은 모두 'A' 구획으로 처리합니다.
"""

import enum
import math
from typing import Any, Optional

from pims.domains.inv.exceptions import SpecValueError


class SpecKind(str, enum.Enum):
    MELT_INDEX = "melt_index"
    DENSITY = "density"
    IZOD = "izod"


COMPARTMENTS = ("A", "B", "CA", "CB")
DEFAULT_COMPARTMENT = "A"


def resolve_compartment(compartment: Optional[str]) -> str:
    if compartment in COMPARTMENTS:
        return compartment
    return DEFAULT_COMPARTMENT


def spec_field(kind: SpecKind, compartment: Optional[str]) -> str:
    """스펙 종류와 구획으로 읽어야 할 컬럼 이름을 반환합니다. (예: 'density_cb')"""
    return f"{SpecKind(kind).value}_{resolve_compartment(compartment).lower()}"


def parse_spec_value(field: str, raw: Any) -> Optional[float]:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        raise SpecValueError(field, text) from None
    if not math.isfinite(value):
        raise SpecValueError(field, text)
    return value


def resolve_spec(item: Any, kind: SpecKind) -> Optional[float]:
    """
    품목의 구획에 해당하는 스펙 값을 숫자로 반환합니다.

    Raises:
        SpecValueError: 값이 비어 있지 않지만 숫자로 해석할 수 없는 경우.
    """
    field = spec_field(kind, getattr(item, "compartment", None))
    return parse_spec_value(field, getattr(item, field, None))
