from __future__ import annotations
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional


def normalize_ws(s: str) -> str:
    return re.sub(r"\s+", " ", s or "").strip()


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Tolerant number parsing for user-entered fields.
    Returns None for anything that is not a finite number ("", "n/a", None...).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    else:
        s = normalize_ws(str(value)).replace(" ", "")
        # "1,5" -> "1.5"
        if s.count(",") == 1 and s.count(".") == 0:
            s = s.replace(",", ".")
        # "1,234.5" -> "1234.5", commas are thousands separators once a dot is present
        elif s.count(".") == 1 and s.count(",") >= 1:
            s = s.replace(",", "")
        try:
            d = Decimal(s)
        except InvalidOperation:
            return None
    if not d.is_finite():
        return None
    return d


def parse_positive(value: Any) -> Optional[Decimal]:
    d = parse_decimal(value)
    if d is None or d <= 0:
        return None
    return d


def round_display(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


_ONES = [
    "ZERO", "ONE", "TWO", "THREE", "FOUR", "FIVE", "SIX", "SEVEN", "EIGHT", "NINE",
    "TEN", "ELEVEN", "TWELVE", "THIRTEEN", "FOURTEEN", "FIFTEEN", "SIXTEEN",
    "SEVENTEEN", "EIGHTEEN", "NINETEEN",
]
_TENS = ["", "", "TWENTY", "THIRTY", "FORTY", "FIFTY", "SIXTY", "SEVENTY", "EIGHTY", "NINETY"]
_SCALES = [(10 ** 12, "TRILLION"), (10 ** 9, "BILLION"), (10 ** 6, "MILLION"), (10 ** 3, "THOUSAND")]


def _below_thousand(n: int) -> List[str]:
    words: List[str] = []
    if n >= 100:
        words += [_ONES[n // 100], "HUNDRED"]
        n %= 100
        if n:
            words.append("AND")
    if n >= 20:
        words.append(_TENS[n // 10] + ("-" + _ONES[n % 10] if n % 10 else ""))
    elif n or not words:
        words.append(_ONES[n])
    return words


def int_to_words(n: int) -> str:
    if n < 0:
        return "MINUS " + int_to_words(-n)
    if n < 1000:
        return " ".join(_below_thousand(n))
    words: List[str] = []
    for scale, name in _SCALES:
        if n >= scale:
            words += [int_to_words(n // scale), name]
            n %= scale
    if n:
        words += _below_thousand(n)
    return " ".join(words)


def amount_in_words(amount: Decimal, currency_name: str) -> str:
    """25.50, "US Dollar" -> "SAY US DOLLAR TWENTY-FIVE AND CENTS FIFTY ONLY"."""
    amount = round_display(amount, 2)
    sign = "MINUS " if amount < 0 else ""
    amount = abs(amount)
    whole = int(amount)
    cents = int((amount - whole) * 100)
    text = f"SAY {currency_name.upper()} {sign}{int_to_words(whole)}"
    if cents:
        text += f" AND CENTS {int_to_words(cents)}"
    return text + " ONLY"
