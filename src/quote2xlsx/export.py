from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

import httpx

from .errors import ExportError, InvalidExportOptions
from .grid import OpenpyxlGrid
from .images import resolve_images
from .layouts import bootstrap
from .layouts.base import DocumentContext, DocumentLayout
from .layouts.registry import get as get_layout
from .normalizer import coerce_items, normalize_items, unparsable_fields
from .types import CompanyInfo, Currency, ExportConfig, ExportOptions, ExportResult, LineItem, FAILED
from .utils import normalize_ws, parse_decimal

log = logging.getLogger(__name__)


@dataclass
class ValidatedOptions:
    items: List[LineItem]
    currency: Currency
    home_currency: Currency
    rate: Decimal
    layout: DocumentLayout


def build_filename(label: str, day: date) -> str:
    return f"{label}_{day.isoformat()}.xlsx"


def validate_options(options: ExportOptions, config: ExportConfig) -> ValidatedOptions:
    """Everything that can make the export fail is checked here, before any layout work."""
    if config.home_currency not in config.currencies:
        raise InvalidExportOptions(f"Home currency {config.home_currency} is not configured")
    home = config.currencies[config.home_currency]

    code = normalize_ws(options.currency or "").upper()
    if code not in config.currencies:
        raise InvalidExportOptions(f"Unsupported currency: {options.currency!r}. Available: {list(config.currencies)}")
    currency = config.currencies[code]

    if code == home.code:
        rate = Decimal(1)
    else:
        rate = parse_decimal(options.exchange_rate)
        if rate is None or rate <= 0:
            raise InvalidExportOptions(
                f"Exchange rate for {code} must be a positive number, got {options.exchange_rate!r}"
            )

    items = coerce_items(options.items)

    bootstrap()
    key = options.layout or config.layout
    try:
        layout = get_layout(key)
    except KeyError as e:
        raise InvalidExportOptions(str(e.args[0])) from e

    return ValidatedOptions(items=items, currency=currency, home_currency=home, rate=rate, layout=layout)


async def export_quotation(
    options: ExportOptions,
    config: Optional[ExportConfig] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> ExportResult:
    config = config or ExportConfig()
    v = validate_options(options, config)
    log.info(
        "Exporting %s items (%s, rate %s, dimensions=%s, layout=%s)",
        len(v.items), v.currency.code, v.rate, options.include_dimensions, v.layout.layout_key,
    )

    warnings: List[str] = []
    normalized = normalize_items(v.items, config)
    if options.include_dimensions:
        for n in normalized:
            for name in unparsable_fields(n.item):
                warnings.append(f"Item #{n.index + 1} ({n.item.product_code}): {name} is not a number, left empty")

    images = await resolve_images(
        v.items,
        options.image_resolver,
        client=client,
        concurrency=config.image_concurrency,
        timeout=config.image_timeout,
    )
    for img in images:
        if img.status == FAILED:
            code = v.items[img.index].product_code
            warnings.append(f"Item #{img.index + 1} ({code}): image not embedded ({img.reason})")

    issue_date = options.issue_date or date.today()
    ctx = DocumentContext(
        items=normalized,
        images=images,
        currency=v.currency,
        rate=v.rate,
        include_dimensions=options.include_dimensions,
        config=config,
        home_currency=v.home_currency,
        company=options.company_info or CompanyInfo(),
        customer_name=options.customer_name or "",
        customer_address=options.customer_address or "",
        remark=options.remark or "",
        issue_date=issue_date,
        document_number=options.document_number or "",
    )

    grid = OpenpyxlGrid(title=config.document_label)
    try:
        summary = v.layout.render(grid, ctx)
        content = grid.to_bytes()
    except ExportError:
        raise
    except Exception as e:
        log.exception("Layout failed")
        raise ExportError(f"Could not build the spreadsheet: {e}") from e

    filename = build_filename(config.document_label, issue_date)
    log.info(
        "Export done: %s (%s bytes, %s images placed, %s warnings)",
        filename, len(content), summary.images_placed, len(warnings),
    )
    return ExportResult(
        content=content,
        filename=filename,
        currency=v.currency.code,
        item_count=len(v.items),
        total_amount=summary.total_amount,
        total_volume=summary.total_volume,
        images=images,
        warnings=warnings,
    )


def export_quotation_sync(options: ExportOptions, config: Optional[ExportConfig] = None) -> ExportResult:
    return asyncio.run(export_quotation(options, config))
