from __future__ import annotations
import logging
from typing import List

from ..grid import CellStyle, GridBuilder
from ..utils import amount_in_words
from .base import COL_QTY, DocumentContext, DocumentLayout, LayoutSummary

log = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Company Name"
PLACEHOLDER_ADDRESS = "Company Address"
PLACEHOLDER_CONTACT = "-"
PLACEHOLDER_BANK = "Please contact us for bank details."

TITLE = "PROFORMA INVOICE"

COMPANY_STYLE = CellStyle(bold=True, size=16, color="0000FF", horizontal="center")
CENTER = CellStyle(horizontal="center")
TITLE_STYLE = CellStyle(bold=True, size=14, horizontal="center")
LEFT = CellStyle(horizontal="left", wrap=True)
LEFT_BOLD = CellStyle(bold=True, horizontal="left", wrap=True)
DATE_STYLE = CellStyle(underline=True, horizontal="left")


class ProformaLayout(DocumentLayout):
    """
    Proforma invoice:

        company header / title / date
        To + Address         | Currency + Exchange rate
        Notify, Shipped VIA  | Shipping marks, Tax ID
        product table, one row per item, images over the Image column
        TOTAL / SAY / Remark / 3 terms / bank info / signatures
    """

    layout_key = "proforma"
    display_name = "Proforma invoice"

    # left block spans No.-Image, right block QTY-last column
    split_col = COL_QTY

    def _line(self, grid: GridBuilder, row: int, ctx: DocumentContext, text: str, style: CellStyle, height: float = 20.3) -> None:
        grid.write(row, 1, text, style)
        grid.merge(row, 1, row, ctx.last_col)
        grid.set_row_height(row, height)

    def _pair(self, grid: GridBuilder, row: int, ctx: DocumentContext, left: str, right: str) -> None:
        grid.write(row, 1, left, LEFT)
        grid.merge(row, 1, row, self.split_col - 1)
        grid.write(row, self.split_col, right, LEFT)
        grid.merge(row, self.split_col, row, ctx.last_col)
        grid.set_row_height(row, 20.3)

    def header(self, grid: GridBuilder, row: int, ctx: DocumentContext) -> int:
        c = ctx.company
        contact = f"Tel: {c.phone or PLACEHOLDER_CONTACT}    Email: {c.email or PLACEHOLDER_CONTACT}"
        if c.website:
            contact += f"    Web: {c.website}"
        self._line(grid, row, ctx, c.company_name or PLACEHOLDER_NAME, COMPANY_STYLE, 26.6)
        self._line(grid, row + 1, ctx, c.address or PLACEHOLDER_ADDRESS, CENTER)
        self._line(grid, row + 2, ctx, contact, CENTER)
        self._line(grid, row + 3, ctx, TITLE, TITLE_STYLE, 27.6)
        grid.write(row + 4, 1, f"Date: {ctx.issue_date.isoformat()}", DATE_STYLE)
        grid.merge(row + 4, 1, row + 4, self.split_col - 1)
        grid.write(row + 4, self.split_col, f"PI No.: {ctx.document_number}", LEFT)
        grid.merge(row + 4, self.split_col, row + 4, ctx.last_col)
        grid.set_row_height(row + 4, 23.1)
        return row + 5

    def customer_block(self, grid: GridBuilder, row: int, ctx: DocumentContext) -> int:
        cur = ctx.currency
        if cur.code == ctx.home_currency.code:
            rate_text = "Exchange rate: -"
        else:
            rate_text = f"Exchange rate: 1 {cur.code} = {ctx.rate} {ctx.home_currency.code}"
        self._pair(grid, row, ctx, f"To: {ctx.customer_name}", f"Currency: {cur.code} ({cur.symbol})")
        self._pair(grid, row + 1, ctx, f"Address: {ctx.customer_address}", rate_text)
        return row + 2

    def terms_block(self, grid: GridBuilder, row: int, ctx: DocumentContext) -> int:
        self._pair(grid, row, ctx, "Notify:", "Shipping Marks: N/M")
        self._pair(grid, row + 1, ctx, "Shipped VIA:", f"Tax ID: {ctx.company.tax_id or ''}")
        # spacer
        return row + 3

    def footer(self, grid: GridBuilder, row: int, ctx: DocumentContext, total) -> int:
        self._line(grid, row, ctx, amount_in_words(total, ctx.currency.name), LEFT_BOLD, 24)
        row += 1
        self._line(grid, row, ctx, f"Remark: {ctx.remark}", LEFT, 30)
        row += 1

        terms: List[str] = (list(ctx.config.terms) + ["", "", ""])[:3]
        for i, term in enumerate(terms, start=1):
            self._line(grid, row, ctx, f"{i}. {term}" if term else f"{i}.", LEFT)
            row += 1

        bank = ctx.company.bank_account or PLACEHOLDER_BANK
        self._line(grid, row, ctx, f"Bank information: {bank}", LEFT, 45)
        row += 1

        seller = ctx.company.company_name or PLACEHOLDER_NAME
        grid.write(row, 1, "Buyer (signature & stamp):", LEFT_BOLD)
        grid.merge(row, 1, row, self.split_col - 1)
        grid.write(row, self.split_col, f"For and on behalf of {seller}", LEFT_BOLD)
        grid.merge(row, self.split_col, row, ctx.last_col)
        grid.set_row_height(row, 40)
        return row

    def render(self, grid: GridBuilder, ctx: DocumentContext) -> LayoutSummary:
        self.check(ctx)

        row = self.header(grid, 1, ctx)
        row = self.customer_block(grid, row, ctx)
        row = self.terms_block(grid, row, ctx)

        header_row = row
        self.write_column_header(grid, header_row, ctx)

        first = header_row + 1
        values = self.write_data_rows(grid, first, ctx)
        last = first + len(values) - 1
        placed = self.overlay_images(grid, first, ctx)

        totals_row = last + 1
        total_amount, total_volume = self.write_totals_row(grid, totals_row, ctx, values)

        last_row = self.footer(grid, totals_row + 1, ctx, total_amount)

        grid.outline(header_row, 1, totals_row, ctx.last_col, inner="thin", outer="medium")
        grid.outline(totals_row + 1, 1, last_row, ctx.last_col, inner="thin", outer="medium")
        log.debug("Proforma layout: table rows %s-%s, footer ends at %s", first, last, last_row)

        return LayoutSummary(
            header_row=header_row,
            first_data_row=first,
            last_data_row=last,
            totals_row=totals_row,
            last_row=last_row,
            total_amount=total_amount,
            total_volume=total_volume,
            rows=values,
            images_placed=placed,
        )


def create() -> ProformaLayout:
    return ProformaLayout()
