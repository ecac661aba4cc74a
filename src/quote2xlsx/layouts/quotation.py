from __future__ import annotations
from ..grid import CellStyle, GridBuilder
from .base import COL_AMOUNT, DocumentContext, DocumentLayout, LayoutSummary
from .proforma import COMPANY_STYLE, DATE_STYLE, PLACEHOLDER_NAME, TITLE_STYLE

LEFT = CellStyle(horizontal="left")


class QuotationLayout(DocumentLayout):
    """Short quotation: company name, title, date, To/Notify block and the product table."""

    layout_key = "quotation"
    display_name = "Quotation (short form)"

    def _banner(self, grid: GridBuilder, row: int, text: str, style: CellStyle, height: float) -> None:
        grid.write(row, 1, text, style)
        grid.merge(row, 1, row, COL_AMOUNT)
        grid.set_row_height(row, height)

    def render(self, grid: GridBuilder, ctx: DocumentContext) -> LayoutSummary:
        self.check(ctx)

        self._banner(grid, 1, ctx.company.company_name or PLACEHOLDER_NAME, COMPANY_STYLE, 26.6)
        self._banner(grid, 2, "QUOTATION", TITLE_STYLE, 27.6)
        self._banner(grid, 3, f"Date: {ctx.issue_date.isoformat()}", DATE_STYLE, 23.1)

        grid.write(4, 1, f"To: {ctx.customer_name}", LEFT)
        grid.merge(4, 1, 4, 4)
        grid.write(4, 5, "Notify:", LEFT)
        grid.write(5, 1, f"Address: {ctx.customer_address}", LEFT)
        grid.merge(5, 1, 5, 4)
        grid.write(5, 5, "Shipping Marks:", LEFT)
        grid.write(6, 5, "Shipped VIA:", LEFT)
        for r in range(4, 8):
            grid.set_row_height(r, 20.3)

        header_row = 8
        self.write_column_header(grid, header_row, ctx)
        first = header_row + 1
        values = self.write_data_rows(grid, first, ctx)
        last = first + len(values) - 1
        placed = self.overlay_images(grid, first, ctx)

        totals_row = last + 1
        total_amount, total_volume = self.write_totals_row(grid, totals_row, ctx, values)
        grid.outline(header_row, 1, totals_row, ctx.last_col)

        return LayoutSummary(
            header_row=header_row,
            first_data_row=first,
            last_data_row=last,
            totals_row=totals_row,
            last_row=totals_row,
            total_amount=total_amount,
            total_volume=total_volume,
            rows=values,
            images_placed=placed,
        )


def create() -> QuotationLayout:
    return QuotationLayout()
