from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from typing import Any, List, Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, OneCellAnchor
from openpyxl.drawing.xdr import XDRPositiveSize2D
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.units import pixels_to_EMU
from PIL import Image as PILImage

log = logging.getLogger(__name__)

DEFAULT_ROW_HEIGHT = 15.0


@dataclass(frozen=True)
class CellStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    size: Optional[float] = None
    color: Optional[str] = None
    fill: Optional[str] = None
    horizontal: Optional[str] = None
    vertical: str = "center"
    wrap: bool = False
    border: bool = False
    number_format: Optional[str] = None


@dataclass
class PlacedImage:
    row: int
    col: int
    width: int
    height: int
    x_offset: int
    y_offset: int
    format: str


class GridBuilder(ABC):
    """
    Minimal grid interface the document layouts draw on.
    Rows and columns are 1-based, ranges inclusive.
    """

    @abstractmethod
    def set_column_widths(self, widths: Sequence[float]) -> None:
        ...

    @abstractmethod
    def set_row_height(self, row: int, height: float) -> None:
        ...

    @abstractmethod
    def write(self, row: int, col: int, value: Any, style: Optional[CellStyle] = None) -> None:
        ...

    @abstractmethod
    def merge(self, row1: int, col1: int, row2: int, col2: int) -> None:
        ...

    @abstractmethod
    def outline(self, row1: int, col1: int, row2: int, col2: int, inner: str = "thin", outer: str = "thin") -> None:
        ...

    @abstractmethod
    def place_image(self, row: int, col: int, data: bytes, fmt: str, inset_px: int = 4) -> PlacedImage:
        ...

    @abstractmethod
    def to_bytes(self) -> bytes:
        ...


def column_width_to_pixels(width: float) -> int:
    # Calibri 11: 7px per character plus padding
    return int(width * 7 + 5)


def row_height_to_pixels(height: float) -> int:
    return int(round(height * 96 / 72))


def fit_into_box(img_w: int, img_h: int, box_w: int, box_h: int, inset: int) -> tuple:
    """Scale (img_w, img_h) to fit the box minus a symmetric inset, centred. -> (w, h, x_off, y_off)"""
    avail_w = max(1, box_w - 2 * inset)
    avail_h = max(1, box_h - 2 * inset)
    scale = min(avail_w / max(1, img_w), avail_h / max(1, img_h))
    w = max(1, int(img_w * scale))
    h = max(1, int(img_h * scale))
    return w, h, (box_w - w) // 2, (box_h - h) // 2


def _reencode(data: bytes, fmt: str) -> bytes:
    out = BytesIO()
    with PILImage.open(BytesIO(data)) as img:
        if fmt == "jpeg" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        img.save(out, format=fmt.upper())
    return out.getvalue()


class OpenpyxlGrid(GridBuilder):
    def __init__(self, title: str = "Sheet1") -> None:
        self.wb = Workbook()
        self.ws = self.wb.active
        # sheet titles are capped at 31 chars
        self.ws.title = title[:31]
        self.widths: List[float] = []

    def set_column_widths(self, widths: Sequence[float]) -> None:
        self.widths = list(widths)
        for idx, w in enumerate(self.widths, start=1):
            self.ws.column_dimensions[get_column_letter(idx)].width = w

    def set_row_height(self, row: int, height: float) -> None:
        self.ws.row_dimensions[row].height = height

    def _apply(self, cell, style: CellStyle) -> None:
        cell.font = Font(
            bold=style.bold,
            italic=style.italic,
            underline="single" if style.underline else None,
            size=style.size,
            color=style.color,
        )
        cell.alignment = Alignment(horizontal=style.horizontal, vertical=style.vertical, wrap_text=style.wrap)
        if style.fill:
            cell.fill = PatternFill(start_color=style.fill, end_color=style.fill, fill_type="solid")
        if style.border:
            thin = Side(style="thin")
            cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
        if style.number_format:
            cell.number_format = style.number_format

    def write(self, row: int, col: int, value: Any, style: Optional[CellStyle] = None) -> None:
        cell = self.ws.cell(row=row, column=col)
        cell.value = value
        if style is not None:
            self._apply(cell, style)

    def merge(self, row1: int, col1: int, row2: int, col2: int) -> None:
        if (row1, col1) == (row2, col2):
            return
        self.ws.merge_cells(start_row=row1, start_column=col1, end_row=row2, end_column=col2)

    def outline(self, row1: int, col1: int, row2: int, col2: int, inner: str = "thin", outer: str = "thin") -> None:
        for r in range(row1, row2 + 1):
            for c in range(col1, col2 + 1):
                self.ws.cell(row=r, column=c).border = Border(
                    left=Side(style=outer if c == col1 else inner),
                    right=Side(style=outer if c == col2 else inner),
                    top=Side(style=outer if r == row1 else inner),
                    bottom=Side(style=outer if r == row2 else inner),
                )

    def cell_size_px(self, row: int, col: int) -> tuple:
        width = self.widths[col - 1] if col <= len(self.widths) else 8.43
        height = self.ws.row_dimensions[row].height or DEFAULT_ROW_HEIGHT
        return column_width_to_pixels(width), row_height_to_pixels(height)

    def place_image(self, row: int, col: int, data: bytes, fmt: str, inset_px: int = 4) -> PlacedImage:
        pic = XLImage(BytesIO(data))
        if pic.format != fmt:
            # bytes go into the package as-is, so they must match the declared type
            log.debug("Re-encoding %s image as %s", pic.format, fmt)
            pic = XLImage(BytesIO(_reencode(data, fmt)))
        pic.format = fmt

        box_w, box_h = self.cell_size_px(row, col)
        w, h, x_off, y_off = fit_into_box(pic.width, pic.height, box_w, box_h, inset_px)
        pic.width, pic.height = w, h
        marker = AnchorMarker(col=col - 1, colOff=pixels_to_EMU(x_off), row=row - 1, rowOff=pixels_to_EMU(y_off))
        pic.anchor = OneCellAnchor(_from=marker, ext=XDRPositiveSize2D(pixels_to_EMU(w), pixels_to_EMU(h)))
        self.ws.add_image(pic)

        return PlacedImage(row=row, col=col, width=w, height=h, x_offset=x_off, y_offset=y_off, format=fmt)

    def to_bytes(self) -> bytes:
        buf = BytesIO()
        self.wb.save(buf)
        return buf.getvalue()
