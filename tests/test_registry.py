import pytest

from quote2xlsx.layouts import bootstrap
from quote2xlsx.layouts.registry import all_layouts, get


def test_bootstrap():
    bootstrap()
    ls = all_layouts()
    assert [l.layout_key for l in ls] == ["proforma", "quotation"]
    assert get("proforma").layout_key == "proforma"


def test_unknown_layout():
    bootstrap()
    with pytest.raises(KeyError):
        get("invoice-v1")
