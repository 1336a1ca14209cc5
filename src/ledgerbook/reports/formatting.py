"""Indian number formatting for amounts shown to people."""

from decimal import Decimal

_CRORE = Decimal("10000000")
_LAKH = Decimal("100000")
_THOUSAND = Decimal("1000")


def format_indian_currency(amount: Decimal) -> str:
    """Compact rupee amount, e.g. ``₹1.50Cr``, ``-₹2.35L``, ``₹4.20K``."""
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if value >= _CRORE:
        return f"{sign}₹{value / _CRORE:.2f}Cr"
    if value >= _LAKH:
        return f"{sign}₹{value / _LAKH:.2f}L"
    if value >= _THOUSAND:
        return f"{sign}₹{value / _THOUSAND:.2f}K"
    return f"{sign}₹{value:.2f}"


def format_indian_number(amount: Decimal) -> str:
    """Rupee amount grouped the Indian way: ``₹12,34,567.89``."""
    sign = "-" if amount < 0 else ""
    int_part, dec_part = f"{abs(amount):.2f}".split(".")

    last_three = int_part[-3:]
    rest = int_part[:-3]
    groups: list[str] = []
    while len(rest) > 2:
        groups.insert(0, rest[-2:])
        rest = rest[:-2]
    if rest:
        groups.insert(0, rest)
    grouped = ",".join(groups + [last_three])
    return f"{sign}₹{grouped}.{dec_part}"
