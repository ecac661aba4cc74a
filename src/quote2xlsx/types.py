from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
import json

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Resolver may answer with a data URI, bare base64, raw bytes, a
# {"success", "data", "contentType"} record, or None.
ImageResolver = Callable[[str], Awaitable[Any]]


@dataclass
class CompanyInfo:
    company_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None
    bank_account: Optional[str] = None


@dataclass
class LineItem:
    product_code: str
    product_name: str = ""
    quantity: int = 0
    unit_price_minor: int = 0
    subtotal_minor: int = 0
    image_reference: Optional[str] = None
    customer_level: Optional[str] = None
    length: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    pcs_per_carton: Optional[str] = None
    unit_weight: Optional[str] = None
    unit_volume: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


def _default_currencies() -> Dict[str, Currency]:
    return {
        "CNY": Currency("CNY", "¥", "Chinese Yuan"),
        "USD": Currency("USD", "$", "US Dollar"),
    }


def _default_levels() -> Dict[str, str]:
    return {
        "retail": "Retail",
        "smallB": "Small B",
        "largeB": "Large B",
        "bulk": "Wholesale",
        "cheap": "Clearance",
    }


def _default_terms() -> List[str]:
    return [
        "Payment: 30% deposit by T/T, balance before shipment.",
        "Delivery: within 30 days after deposit received.",
        "Validity: this offer is valid for 30 days.",
    ]


@dataclass
class ExportConfig:
    """Lookup tables and layout constants, passed explicitly into each export."""
    home_currency: str = "CNY"
    currencies: Dict[str, Currency] = field(default_factory=_default_currencies)
    customer_levels: Dict[str, str] = field(default_factory=_default_levels)
    default_exchange_rate: Decimal = Decimal("7.2")
    # cm³ -> m³
    volume_divisor: Decimal = Decimal(1_000_000)
    money_places: int = 2
    weight_places: int = 2
    carton_places: int = 2
    volume_places: int = 4
    image_concurrency: int = 1
    image_timeout: float = 10.0
    image_inset_px: int = 4
    document_label: str = "Quotation"
    layout: str = "proforma"
    terms: List[str] = field(default_factory=_default_terms)


@dataclass
class ExportOptions:
    items: List[Any]
    currency: str = "CNY"
    exchange_rate: Union[Decimal, float, int, str, None] = None
    include_dimensions: bool = False
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    company_info: Optional[CompanyInfo] = None
    image_resolver: Optional[ImageResolver] = None
    remark: Optional[str] = None
    issue_date: Optional[date] = None
    document_number: Optional[str] = None
    layout: Optional[str] = None


RESOLVED = "resolved"
ABSENT = "absent"
FAILED = "failed"


@dataclass
class ResolvedImage:
    index: int
    status: str
    data: Optional[bytes] = None
    format: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == RESOLVED


@dataclass
class NormalizedItem:
    index: int
    item: LineItem
    unit_volume: Optional[Decimal] = None
    cartons: Optional[Decimal] = None
    total_volume: Optional[Decimal] = None
    net_weight: Optional[Decimal] = None
    pcs_per_carton: Optional[Decimal] = None
    dimension_label: str = "-"


@dataclass
class ExportResult:
    content: bytes
    filename: str
    currency: str
    item_count: int
    total_amount: Decimal
    total_volume: Optional[Decimal] = None
    images: List[ResolvedImage] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    mime_type: str = XLSX_MIME

    @property
    def missing_images(self) -> List[int]:
        return [img.index for img in self.images if img.status == FAILED]

    def to_record(self) -> Dict[str, str]:
        # Shape expected by the export-history log of the web app.
        summary = {"items": self.item_count, "total": float(self.total_amount), "currency": self.currency}
        return {"fileName": self.filename, "exportData": json.dumps(summary)}
