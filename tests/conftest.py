from io import BytesIO

import pytest
from openpyxl import load_workbook
from PIL import Image


def _image_bytes(w=40, h=30, fmt="PNG", color=(200, 30, 30)):
    buf = BytesIO()
    Image.new("RGB", (w, h), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    return _image_bytes


@pytest.fixture
def png_bytes():
    return _image_bytes()


@pytest.fixture
def open_sheet():
    def _open(content: bytes):
        wb = load_workbook(BytesIO(content))
        assert len(wb.sheetnames) == 1
        return wb.active
    return _open


def header_row_of(ws) -> int:
    for r in range(1, ws.max_row + 1):
        if ws.cell(r, 1).value == "No.":
            return r
    raise AssertionError("no table header found")


def row_of(ws, label: str) -> int:
    for r in range(1, ws.max_row + 1):
        if ws.cell(r, 1).value == label:
            return r
    raise AssertionError(f"no row labelled {label!r}")


@pytest.fixture
def locate():
    class _Locate:
        header = staticmethod(header_row_of)
        row = staticmethod(row_of)
    return _Locate
