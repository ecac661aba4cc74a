from __future__ import annotations
import argparse
import json
import os
import sys
from typing import Any, Dict, Optional

from .logging_config import setup_logging
from .types import CompanyInfo, ExportConfig, ExportOptions
from .export import export_quotation_sync
from .errors import InvalidExportOptions
from .layouts import bootstrap
from .layouts.registry import all_layouts

COMPANY_KEYS = {
    "companyName": "company_name",
    "taxId": "tax_id",
    "bankAccount": "bank_account",
}


def load_company(raw: Optional[Dict[str, Any]]) -> Optional[CompanyInfo]:
    if not raw:
        return None
    known = CompanyInfo.__dataclass_fields__
    data = {}
    for k, v in raw.items():
        attr = COMPANY_KEYS.get(k, k)
        if attr in known:
            data[attr] = v
    return CompanyInfo(**data)


def main(argv: Optional[list] = None) -> int:
    bootstrap()
    p = argparse.ArgumentParser(description="Quotation → XLSX exporter")
    p.add_argument("--items", required=True, help="JSON file: list of items, or object with items/company/customer")
    p.add_argument("--out", default=".", help="Output XLSX path or directory")
    p.add_argument("--currency", default="CNY", help="Currency code (e.g. CNY, USD)")
    p.add_argument("--rate", default=None, help="Exchange rate for a foreign currency")
    p.add_argument("--dimensions", action="store_true", help="Include the size/carton/volume/weight columns")
    p.add_argument("--layout", default=None, choices=[l.layout_key for l in all_layouts()])
    p.add_argument("--concurrency", type=int, default=1, help="Parallel image fetches")
    p.add_argument("--record", action="store_true", help="Print the export-history record as JSON")
    p.add_argument("--log", default="INFO", help="Log level")
    args = p.parse_args(argv)

    setup_logging(args.log)

    with open(args.items, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, list):
        payload = {"items": payload}

    config = ExportConfig(image_concurrency=args.concurrency)
    rate = args.rate
    if rate is None and args.currency.upper() != config.home_currency:
        rate = config.default_exchange_rate

    customer = payload.get("customer") or {}
    options = ExportOptions(
        items=payload.get("items"),
        currency=args.currency,
        exchange_rate=rate,
        include_dimensions=args.dimensions,
        customer_name=customer.get("name"),
        customer_address=customer.get("address"),
        company_info=load_company(payload.get("company")),
        remark=payload.get("remark"),
        document_number=payload.get("documentNumber"),
        layout=args.layout,
    )
    try:
        res = export_quotation_sync(options, config)
    except InvalidExportOptions as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    out = args.out
    if os.path.isdir(out):
        out = os.path.join(out, res.filename)
    with open(out, "wb") as f:
        f.write(res.content)
    print(f"Saved: {out}")

    if res.warnings:
        print("\nWARNINGS:")
        for w in res.warnings:
            print("-", w)
    if args.record:
        print(json.dumps(res.to_record(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
