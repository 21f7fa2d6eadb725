# tests/domains/test_inv_specs_n.py

"""
보관 구획별 스펙 해석(specs.py)과 파생 뷰 조립(views.py)에 대한 단위 테스트 모듈입니다.
"""

from decimal import Decimal

import pytest

from pims.domains.inv import models as inv_models
from pims.domains.inv.exceptions import SpecValueError
from pims.domains.inv.specs import SpecKind, resolve_compartment, resolve_spec, spec_field
from pims.domains.inv.views import build_view, join_distinct


def _item(compartment, **specs) -> inv_models.Inventory:
    return inv_models.Inventory(inventory_id=1, pan_id=1, compartment=compartment, weight_left=Decimal("10"), **specs)


# =================================================================================
# 1. 구획 선택
# =================================================================================
@pytest.mark.parametrize(
    "compartment, expected",
    [("A", "A"), ("B", "B"), ("CA", "CA"), ("CB", "CB"), ("", "A"), (None, "A"), ("b", "A"), ("cb", "A"), ("XYZ", "A")],
)
def test_resolve_compartment(compartment, expected):
    """(성공) 정확히 일치하는 구획만 선택되고 나머지는 'A'"""
    assert resolve_compartment(compartment) == expected


def test_spec_field_names():
    assert spec_field(SpecKind.DENSITY, "CB") == "density_cb"
    assert spec_field(SpecKind.MELT_INDEX, None) == "melt_index_a"
    assert spec_field(SpecKind.IZOD, "B") == "izod_b"


def test_resolve_spec_reads_compartment_column():
    """(성공) 구획에 해당하는 컬럼만 읽음"""
    item = _item("CA", density_a="0.910", density_ca=" 0.955 ")

    assert resolve_spec(item, SpecKind.DENSITY) == pytest.approx(0.955)


def test_unknown_compartment_falls_back_to_a():
    """(성공) 알 수 없는 구획 코드는 A 구획 값을 사용"""
    item = _item("ZZ", melt_index_a="2.5", melt_index_b="9.9")

    assert resolve_spec(item, SpecKind.MELT_INDEX) == pytest.approx(2.5)


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_blank_spec_is_none(raw):
    assert resolve_spec(_item("A", izod_a=raw), SpecKind.IZOD) is None


@pytest.mark.parametrize("raw", ["n/a", "1.2.3", "nan", "inf"])
def test_unparsable_spec_raises(raw):
    """(실패) 숫자로 해석할 수 없는 값은 SpecValueError"""
    with pytest.raises(SpecValueError) as exc_info:
        resolve_spec(_item("A", izod_a=raw), SpecKind.IZOD)
    assert exc_info.value.field == "izod_a"


# =================================================================================
# 2. 파생 뷰 조립
# =================================================================================
def test_build_view_records_spec_warning(caplog):
    """(성공) 스펙 해석 실패는 경고로 남기고 NULL 로 계속 진행"""
    item = _item("B", melt_index_b="bad", density_b="0.95")

    view = build_view(item, [], [])

    assert view.melt_index is None
    assert view.density == pytest.approx(0.95)
    assert len(view.data_warnings) == 1
    assert "melt_index_b" in view.data_warnings[0]
    assert "Unparsable spec value" in caplog.text


def test_build_view_rollups_split_by_level():
    """(성공) 할당 부가 정보는 중복 제거 후 정렬되어 콤마로 연결"""
    item = inv_models.Inventory(inventory_id=7, pan_id=3, weight_left=Decimal("1000"), folder_code="PSD", lot=11)
    pan_records = [
        inv_models.Allocation(id=1, pan_id=3, qty=Decimal("100"), customer_code="CUST-B", purchase_order="PO-1"),
        inv_models.Allocation(id=2, pan_id=3, qty=Decimal("100"), customer_code="CUST-A", purchase_order="PO-1"),
    ]
    item_records = [
        inv_models.Allocation(id=3, pan_id=3, inventory_id=7, qty=Decimal("50"), customer_code="CUST-A", so_type="EXP"),
    ]

    view = build_view(item, pan_records, item_records, pan_weight_left=Decimal("1500"))

    assert view.lot_name == "PSD-11"
    assert view.available_qty == Decimal("1250")
    assert view.allocated_customer_codes == "CUST-A, CUST-B"
    assert view.pan_level_customer_codes == "CUST-A, CUST-B"
    assert view.inventory_level_customer_codes == "CUST-A"
    assert view.allocated_pos == "PO-1"
    assert view.inventory_level_pos is None
    assert view.allocated_so_types == "EXP"
    assert view.allocation_ids == "1, 2, 3"
    assert view.data_warnings == []


def test_join_distinct_skips_blank_values():
    assert join_distinct(["b", None, " ", "a", "b"]) == "a, b"
    assert join_distinct([None, ""]) is None
