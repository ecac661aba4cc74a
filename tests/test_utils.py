from decimal import Decimal

from quote2xlsx.utils import amount_in_words, int_to_words, parse_decimal, parse_positive, round_display


def test_parse_decimal():
    assert parse_decimal(" 12.50 ") == Decimal("12.50")
    assert parse_decimal("1,5") == Decimal("1.5")
    assert parse_decimal(3) == Decimal(3)
    assert parse_decimal("") is None
    assert parse_decimal("abc") is None
    assert parse_decimal("nan") is None
    assert parse_decimal(True) is None


def test_parse_positive():
    assert parse_positive("0") is None
    assert parse_positive("-2") is None
    assert parse_positive("0.5") == Decimal("0.5")


def test_round_display_half_up():
    assert round_display(Decimal("2.345"), 2) == Decimal("2.35")
    assert round_display(Decimal("0.00005"), 4) == Decimal("0.0001")


def test_int_to_words():
    assert int_to_words(0) == "ZERO"
    assert int_to_words(25) == "TWENTY-FIVE"
    assert int_to_words(105) == "ONE HUNDRED AND FIVE"
    assert int_to_words(12000) == "TWELVE THOUSAND"
    assert int_to_words(1_002_030) == "ONE MILLION TWO THOUSAND THIRTY"


def test_amount_in_words():
    assert amount_in_words(Decimal("25.00"), "US Dollar") == "SAY US DOLLAR TWENTY-FIVE ONLY"
    assert amount_in_words(Decimal("25.5"), "US Dollar") == "SAY US DOLLAR TWENTY-FIVE AND CENTS FIFTY ONLY"


def test_parse_decimal_thousands_separator():
    assert parse_decimal("1,234.5") == Decimal("1234.5")
    assert parse_decimal("1,234,567.25") == Decimal("1234567.25")


def test_int_to_words_large_amounts():
    assert int_to_words(1_000_000_000_000) == "ONE TRILLION"
    assert int_to_words(10 ** 13) == "TEN TRILLION"
    assert int_to_words(2 * 10 ** 15) == "TWO THOUSAND TRILLION"
    assert amount_in_words(Decimal("10000000000000.00"), "Chinese Yuan") == "SAY CHINESE YUAN TEN TRILLION ONLY"


def test_amount_in_words_negative():
    assert amount_in_words(Decimal("-2.50"), "US Dollar") == "SAY US DOLLAR MINUS TWO AND CENTS FIFTY ONLY"
