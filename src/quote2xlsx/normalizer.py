from __future__ import annotations
from dataclasses import fields, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from .errors import InvalidExportOptions
from .types import ExportConfig, LineItem, NormalizedItem
from .utils import normalize_ws, parse_decimal, parse_positive

log = logging.getLogger(__name__)

EMPTY_MARK = "-"

# incoming key (web client camelCase or snake_case) : attribute on LineItem
FIELD_ALIASES: Dict[str, str] = {
    "productCode": "product_code",
    "code": "product_code",
    "productName": "product_name",
    "name": "product_name",
    "imageReference": "image_reference",
    "imageUrl": "image_reference",
    "qty": "quantity",
    "unitPriceMinorUnits": "unit_price_minor",
    "unitPrice": "unit_price_minor",
    "subtotalMinorUnits": "subtotal_minor",
    "subtotal": "subtotal_minor",
    "customerLevel": "customer_level",
    "pcsPerCarton": "pcs_per_carton",
    "unitWeight": "unit_weight",
    "unitVolume": "unit_volume",
}

_ITEM_FIELDS = {f.name for f in fields(LineItem)}
_TEXT_FIELDS = (
    "image_reference", "customer_level", "length", "width", "height",
    "pcs_per_carton", "unit_weight", "unit_volume", "note",
)


def _to_int(value: Any, what: str, index: int) -> int:
    d = parse_decimal(value)
    if d is None:
        raise InvalidExportOptions(f"Item #{index + 1}: {what} is not a number: {value!r}")
    return int(d.to_integral_value(rounding=ROUND_HALF_UP))


def _opt_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = normalize_ws(str(value))
    return s or None


def _from_mapping(raw: Mapping[str, Any], index: int) -> LineItem:
    data: Dict[str, Any] = {}
    for key, value in raw.items():
        attr = FIELD_ALIASES.get(key, key)
        if attr in _ITEM_FIELDS:
            data[attr] = value
    if "product_code" not in data:
        raise InvalidExportOptions(f"Item #{index + 1}: missing product code")
    if "subtotal_minor" not in data and "unit_price_minor" in data and "quantity" in data:
        # web client sends unit price and quantity only
        data["subtotal_minor"] = _to_int(data["unit_price_minor"], "unit price", index) * _to_int(
            data["quantity"], "quantity", index
        )
    return LineItem(**data)


def coerce_item(raw: Any, index: int) -> LineItem:
    if isinstance(raw, LineItem):
        item = raw
    elif isinstance(raw, Mapping):
        item = _from_mapping(raw, index)
    else:
        raise InvalidExportOptions(f"Item #{index + 1}: expected a mapping or LineItem, got {type(raw).__name__}")

    code = normalize_ws(str(item.product_code or ""))
    if not code:
        raise InvalidExportOptions(f"Item #{index + 1}: product code is empty")

    changes: Dict[str, Any] = {
        "product_code": code,
        "product_name": normalize_ws(str(item.product_name or "")),
        "quantity": _to_int(item.quantity, "quantity", index),
        "unit_price_minor": _to_int(item.unit_price_minor, "unit price", index),
        "subtotal_minor": _to_int(item.subtotal_minor, "subtotal", index),
    }
    for name in _TEXT_FIELDS:
        changes[name] = _opt_text(getattr(item, name))
    # always a copy, the caller's objects stay untouched
    return replace(item, **changes)


def coerce_items(raw_items: Any) -> List[LineItem]:
    if raw_items is None or isinstance(raw_items, (str, bytes, Mapping)) or not isinstance(raw_items, Sequence):
        raise InvalidExportOptions(f"Items must be a list, got {type(raw_items).__name__}")
    return [coerce_item(raw, i) for i, raw in enumerate(raw_items)]


def dimension_label(item: LineItem) -> str:
    if item.length and item.width and item.height:
        return f"{item.length}×{item.width}×{item.height}"
    if item.note:
        return item.note
    return EMPTY_MARK


def unit_volume(item: LineItem, divisor: Decimal) -> Optional[Decimal]:
    # Linear dimensions win over the stored unit volume.
    l, w, h = parse_positive(item.length), parse_positive(item.width), parse_positive(item.height)
    if l is not None and w is not None and h is not None:
        return l * w * h / divisor
    return parse_positive(item.unit_volume)


def normalize_item(item: LineItem, index: int, config: ExportConfig) -> NormalizedItem:
    qty = Decimal(item.quantity)
    volume = unit_volume(item, config.volume_divisor)

    pcs = parse_positive(item.pcs_per_carton)
    cartons = qty / pcs if pcs is not None else None

    total_volume = volume * cartons if volume is not None and cartons is not None else None

    weight = parse_positive(item.unit_weight)
    net_weight = qty * weight if weight is not None else None

    return NormalizedItem(
        index=index,
        item=item,
        unit_volume=volume,
        cartons=cartons,
        total_volume=total_volume,
        net_weight=net_weight,
        pcs_per_carton=pcs,
        dimension_label=dimension_label(item),
    )


def normalize_items(items: Sequence[LineItem], config: ExportConfig) -> List[NormalizedItem]:
    out = [normalize_item(it, i, config) for i, it in enumerate(items)]
    unknown = sum(1 for n in out if n.unit_volume is None)
    log.debug("Normalized %s items (%s without volume)", len(out), unknown)
    return out


_NUMERIC_FIELDS = ("length", "width", "height", "pcs_per_carton", "unit_weight", "unit_volume")


def unparsable_fields(item: LineItem) -> List[str]:
    """Numeric fields that carry text but no usable number; they count as absent."""
    return [
        name for name in _NUMERIC_FIELDS
        if getattr(item, name) and parse_decimal(getattr(item, name)) is None
    ]
