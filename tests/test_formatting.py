"""Tests for Indian number formatting."""

from decimal import Decimal

import pytest

from ledgerbook.reports.formatting import format_indian_currency, format_indian_number


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        ("15000000", "₹1.50Cr"),
        ("10000000", "₹1.00Cr"),
        ("235000", "₹2.35L"),
        ("-235000", "-₹2.35L"),
        ("4200", "₹4.20K"),
        ("999.5", "₹999.50"),
        ("0", "₹0.00"),
    ],
)
def test_format_indian_currency(amount, expected):
    assert format_indian_currency(Decimal(amount)) == expected


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        ("1234567.891", "₹12,34,567.89"),
        ("100", "₹100.00"),
        ("12345", "₹12,345.00"),
        ("123456789", "₹12,34,56,789.00"),
        ("-1000000", "-₹10,00,000.00"),
    ],
)
def test_format_indian_number(amount, expected):
    assert format_indian_number(Decimal(amount)) == expected
