from decimal import Decimal

import pytest

from quote2xlsx.errors import InvalidExportOptions
from quote2xlsx.normalizer import (
    coerce_items,
    dimension_label,
    normalize_item,
    unparsable_fields,
)
from quote2xlsx.types import ExportConfig, LineItem


def _norm(**kw):
    kw.setdefault("product_code", "A")
    kw.setdefault("quantity", 2)
    return normalize_item(LineItem(**kw), 0, ExportConfig())


def test_volume_from_linear_dimensions():
    n = _norm(length="10", width="10", height="10", pcs_per_carton="5")
    assert n.unit_volume == Decimal("0.001")
    assert n.cartons == Decimal("0.4")
    assert n.total_volume == Decimal("0.0004")


def test_linear_dimensions_win_over_unit_volume():
    n = _norm(length="10", width="20", height="50", unit_volume="3.5")
    assert n.unit_volume == Decimal("0.01")


def test_unit_volume_fallback():
    n = _norm(unit_volume="0.25", length="10")
    assert n.unit_volume == Decimal("0.25")


def test_unknown_metrics_stay_none():
    n = _norm()
    assert n.unit_volume is None
    assert n.cartons is None
    assert n.total_volume is None
    assert n.net_weight is None
    assert n.dimension_label == "-"


def test_unparsable_numbers_count_as_absent():
    n = _norm(length="abc", width="10", height="10", unit_volume="n/a", pcs_per_carton="0", unit_weight="-1")
    assert n.unit_volume is None
    assert n.cartons is None
    assert n.net_weight is None
    assert unparsable_fields(n.item) == ["length", "unit_volume"]


def test_net_weight_and_comma_decimal():
    n = _norm(quantity=3, unit_weight="1,5")
    assert n.net_weight == Decimal("4.5")


def test_fractional_pcs_per_carton():
    n = _norm(quantity=3, pcs_per_carton="1.5")
    assert n.cartons == Decimal("2")


def test_dimension_label_fallbacks():
    assert dimension_label(LineItem("A", length="1", width="2", height="3")) == "1×2×3"
    assert dimension_label(LineItem("A", length="1", note="boxed")) == "boxed"
    assert dimension_label(LineItem("A")) == "-"


def test_coerce_camel_case_mapping():
    items = coerce_items([
        {"productCode": "A", "productName": " Lamp ", "quantity": "2", "unitPrice": 1000, "pcsPerCarton": 5},
    ])
    it = items[0]
    assert it.product_name == "Lamp"
    assert it.quantity == 2
    assert it.unit_price_minor == 1000
    # subtotal derived when the client left it out
    assert it.subtotal_minor == 2000
    assert it.pcs_per_carton == "5"


def test_coerce_does_not_touch_caller_items():
    original = LineItem("  A  ", quantity="2", note="  ")
    out = coerce_items([original])[0]
    assert original.product_code == "  A  "
    assert original.quantity == "2"
    assert out.product_code == "A"
    assert out.quantity == 2
    assert out.note is None


@pytest.mark.parametrize("raw", [None, "items", {"productCode": "A"}, 42])
def test_coerce_rejects_non_list(raw):
    with pytest.raises(InvalidExportOptions):
        coerce_items(raw)


def test_coerce_rejects_bad_entries():
    with pytest.raises(InvalidExportOptions, match="#2"):
        coerce_items([{"productCode": "A"}, {"productName": "no code"}])
    with pytest.raises(InvalidExportOptions, match="quantity"):
        coerce_items([{"productCode": "A", "quantity": "many"}])
    with pytest.raises(InvalidExportOptions):
        coerce_items([["A", 1]])
