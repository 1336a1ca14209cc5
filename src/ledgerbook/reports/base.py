"""Building blocks shared by the report derivers."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from ledgerbook.store.base import ZERO, ClientProfile

# One paisa.
TOLERANCE = Decimal("0.01")

UNKNOWN_CLIENT = "Unknown Client"


class LineSource(str, Enum):
    """Where a statement line comes from."""

    LEDGER = "ledger"  # a real account in the books
    DERIVED = "derived"  # computed by the report, never posted


@dataclass(frozen=True)
class StatementLine:
    code: str
    name: str
    amount: Decimal
    source: LineSource = LineSource.LEDGER

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "amount": str(self.amount),
            "source": self.source.value,
        }


@dataclass(frozen=True)
class StatementSection:
    lines: tuple[StatementLine, ...] = ()
    total: Decimal = ZERO

    @classmethod
    def of(cls, lines: Iterable[StatementLine]) -> StatementSection:
        items = tuple(lines)
        return cls(lines=items, total=sum_amounts(line.amount for line in items))

    def to_dict(self) -> dict[str, Any]:
        return {
            "accounts": [line.to_dict() for line in self.lines],
            "total": str(self.total),
        }


def sum_amounts(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def is_balanced(difference: Decimal) -> bool:
    return difference < TOLERANCE


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return ``part / whole * 100``, or 0 when ``whole`` is not positive."""
    if whole <= 0:
        return ZERO
    return part / whole * 100


def client_display_name(profile: ClientProfile | None) -> str:
    if profile is None or not profile.name:
        return UNKNOWN_CLIENT
    return profile.name


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def utc_now() -> datetime:
    return datetime.now(UTC)
