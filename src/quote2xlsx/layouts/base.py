from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..errors import LayoutError
from ..grid import CellStyle, GridBuilder
from ..types import CompanyInfo, Currency, ExportConfig, NormalizedItem, ResolvedImage
from ..utils import round_display

log = logging.getLogger(__name__)

COL_NO, COL_CODE, COL_NAME, COL_IMAGE, COL_QTY, COL_PRICE, COL_AMOUNT = range(1, 8)
COL_SIZE, COL_UNIT_VOLUME, COL_PCS, COL_CTN, COL_CBM, COL_NW, COL_NOTE = range(8, 15)

DATA_ROW_HEIGHT = 80
HEADER_ROW_HEIGHT = 31.5

MONEY_FMT = "#,##0.00"

HEADER_STYLE = CellStyle(bold=True, horizontal="center", fill="E0E0E0", wrap=True, border=True)
CELL_STYLE = CellStyle(horizontal="center", wrap=True, border=True)
MONEY_STYLE = CellStyle(horizontal="center", border=True, number_format=MONEY_FMT)
TOTAL_LABEL_STYLE = CellStyle(bold=True, horizontal="right", border=True)
TOTAL_STYLE = CellStyle(bold=True, horizontal="center", border=True, number_format=MONEY_FMT)


@dataclass(frozen=True)
class Column:
    header: str
    width: float


def columns_for(include_dimensions: bool, symbol: str) -> List[Column]:
    """Column set of the product table. Depends on the flag only, never on the items."""
    cols = [
        Column("No.", 8.93),
        Column("Item No.", 15.53),
        Column("Description", 22),
        Column("Image", 15),
        Column("QTY", 10),
        Column(f"Unit Price({symbol})", 15.73),
        Column(f"Amount({symbol})", 17),
    ]
    if include_dimensions:
        cols += [
            Column("Size(cm)", 16),
            Column("m³/pc", 10),
            Column("PCS/CTN", 10),
            Column("CTN", 9),
            Column("CBM(m³)", 11),
            Column("N.W.(kg)", 10),
            Column("Note", 18),
        ]
    return cols


def convert_minor(minor: int, rate: Decimal, places: int = 2) -> Decimal:
    return round_display(Decimal(minor) / 100 / rate, places)


@dataclass
class DocumentContext:
    items: List[NormalizedItem]
    images: List[ResolvedImage]
    currency: Currency
    rate: Decimal
    include_dimensions: bool
    config: ExportConfig
    home_currency: Currency
    company: CompanyInfo = field(default_factory=CompanyInfo)
    customer_name: str = ""
    customer_address: str = ""
    remark: str = ""
    issue_date: date = field(default_factory=date.today)
    document_number: str = ""

    @property
    def columns(self) -> List[Column]:
        return columns_for(self.include_dimensions, self.currency.symbol)

    @property
    def last_col(self) -> int:
        return len(self.columns)


@dataclass
class RowValues:
    unit_price: Decimal
    amount: Decimal
    unit_volume: Optional[Decimal] = None
    cartons: Optional[Decimal] = None
    total_volume: Optional[Decimal] = None
    net_weight: Optional[Decimal] = None


@dataclass
class LayoutSummary:
    header_row: int
    first_data_row: int
    last_data_row: int
    totals_row: int
    last_row: int
    total_amount: Decimal
    total_volume: Optional[Decimal]
    rows: List[RowValues] = field(default_factory=list)
    images_placed: int = 0


class DocumentLayout(ABC):
    layout_key: str
    display_name: str

    @abstractmethod
    def render(self, grid: GridBuilder, ctx: DocumentContext) -> LayoutSummary:
        ...

    # shared product table

    def check(self, ctx: DocumentContext) -> None:
        if len(ctx.images) != len(ctx.items):
            raise LayoutError(f"{len(ctx.items)} items but {len(ctx.images)} image outcomes")
        for pos, (n, img) in enumerate(zip(ctx.items, ctx.images)):
            if n.index != pos or img.index != pos:
                raise LayoutError(f"Row {pos + 1} is out of order (item {n.index}, image {img.index})")

    def level_label(self, ctx: DocumentContext, level: Optional[str]) -> str:
        if not level:
            return ""
        return ctx.config.customer_levels.get(level, level)

    def write_column_header(self, grid: GridBuilder, row: int, ctx: DocumentContext) -> None:
        cols = ctx.columns
        grid.set_column_widths([c.width for c in cols])
        for idx, col in enumerate(cols, start=1):
            grid.write(row, idx, col.header, HEADER_STYLE)
        grid.set_row_height(row, HEADER_ROW_HEIGHT)

    def row_values(self, n: NormalizedItem, ctx: DocumentContext) -> RowValues:
        # every figure is rounded here, once, and the same value goes to the cell and the totals
        cfg = ctx.config
        it = n.item
        vals = RowValues(
            unit_price=convert_minor(it.unit_price_minor, ctx.rate, cfg.money_places),
            amount=convert_minor(it.subtotal_minor, ctx.rate, cfg.money_places),
        )
        if ctx.include_dimensions:
            if n.unit_volume is not None:
                vals.unit_volume = round_display(n.unit_volume, cfg.volume_places)
            if n.cartons is not None:
                vals.cartons = round_display(n.cartons, cfg.carton_places)
            if n.total_volume is not None:
                vals.total_volume = round_display(n.total_volume, cfg.volume_places)
            if n.net_weight is not None:
                vals.net_weight = round_display(n.net_weight, cfg.weight_places)
        return vals

    def write_data_rows(self, grid: GridBuilder, start_row: int, ctx: DocumentContext) -> List[RowValues]:
        vol_fmt = "0." + "0" * ctx.config.volume_places
        out: List[RowValues] = []
        for pos, n in enumerate(ctx.items):
            r = start_row + pos
            it = n.item
            vals = self.row_values(n, ctx)
            out.append(vals)

            name = it.product_name
            level = self.level_label(ctx, it.customer_level)
            if level:
                name = f"{name}\n[{level}]" if name else f"[{level}]"

            grid.write(r, COL_NO, pos + 1, CELL_STYLE)
            grid.write(r, COL_CODE, it.product_code, CELL_STYLE)
            grid.write(r, COL_NAME, name, CELL_STYLE)
            grid.write(r, COL_IMAGE, None, CELL_STYLE)
            grid.write(r, COL_QTY, it.quantity, CELL_STYLE)
            grid.write(r, COL_PRICE, vals.unit_price, MONEY_STYLE)
            grid.write(r, COL_AMOUNT, vals.amount, MONEY_STYLE)

            if ctx.include_dimensions:
                grid.write(r, COL_SIZE, n.dimension_label, CELL_STYLE)
                grid.write(r, COL_UNIT_VOLUME, vals.unit_volume, CellStyle(horizontal="center", border=True, number_format=vol_fmt))
                grid.write(r, COL_PCS, n.pcs_per_carton, CELL_STYLE)
                grid.write(r, COL_CTN, vals.cartons, CELL_STYLE)
                grid.write(r, COL_CBM, vals.total_volume, CellStyle(horizontal="center", border=True, number_format=vol_fmt))
                grid.write(r, COL_NW, vals.net_weight, CELL_STYLE)
                grid.write(r, COL_NOTE, it.note, CELL_STYLE)

            grid.set_row_height(r, DATA_ROW_HEIGHT)
        return out

    def overlay_images(self, grid: GridBuilder, start_row: int, ctx: DocumentContext) -> int:
        placed = 0
        for img in ctx.images:
            if not img.ok:
                continue
            try:
                grid.place_image(start_row + img.index, COL_IMAGE, img.data, img.format, ctx.config.image_inset_px)
            except (OSError, ValueError) as e:
                # the cell stays empty, same as a failed fetch
                log.warning("Could not embed image for row %s: %s", img.index + 1, e)
                continue
            placed += 1
        return placed

    def write_totals_row(self, grid: GridBuilder, row: int, ctx: DocumentContext, rows: List[RowValues]) -> tuple:
        total_amount = sum((v.amount for v in rows), Decimal("0.00"))
        total_volume: Optional[Decimal] = None

        grid.write(row, COL_NO, "TOTAL", TOTAL_LABEL_STYLE)
        grid.merge(row, COL_NO, row, COL_PRICE)
        grid.write(row, COL_AMOUNT, total_amount, TOTAL_STYLE)

        if ctx.include_dimensions:
            total_volume = sum((v.total_volume for v in rows if v.total_volume is not None), Decimal(0))
            vol_fmt = "0." + "0" * ctx.config.volume_places
            for c in range(COL_SIZE, ctx.last_col + 1):
                grid.write(row, c, None, CELL_STYLE)
            grid.write(row, COL_CBM, total_volume, CellStyle(bold=True, horizontal="center", border=True, number_format=vol_fmt))
        grid.set_row_height(row, 30)
        return total_amount, total_volume
