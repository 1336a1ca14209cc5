"""Tests for the trial balance builder."""

from datetime import date
from decimal import Decimal

import pytest
from helpers import FakeLedgerStore, tb

from ledgerbook.accounts import AccountType
from ledgerbook.reports.trial_balance import (
    export_trial_balance_to_csv,
    generate_trial_balance,
    get_trial_balance_grouped,
    group_by_account_type,
    validate_trial_balance,
)
from ledgerbook.store import LedgerStoreError

AS_OF = date(2025, 3, 31)


class TestGenerateTrialBalance:
    """Tests for generate_trial_balance."""

    @pytest.mark.asyncio
    async def test_totals_and_balances(self, store):
        report = await generate_trial_balance(store, "c-1", AS_OF)

        assert report.client_name == "Acme Traders"
        assert report.as_of_date == AS_OF
        assert report.summary.total_debits == Decimal("125000")
        assert report.summary.total_credits == Decimal("125000")
        assert report.summary.difference == Decimal("0")
        assert report.summary.is_balanced is True
        assert report.summary.row_count == 10

        loan = next(row for row in report.rows if row.account_code == "2500")
        assert loan.balance == Decimal("-20000")

    @pytest.mark.asyncio
    async def test_keeps_store_order(self, store):
        report = await generate_trial_balance(store, "c-1", AS_OF)

        assert [row.account_code for row in report.rows] == [
            entry.account_code for entry in store.trial_balance
        ]

    @pytest.mark.asyncio
    async def test_half_paisa_difference_is_balanced(self):
        store = FakeLedgerStore(
            trial_balance=[
                tb("1100", "Cash", AccountType.ASSET, debit="50000.005"),
                tb("3100", "Share Capital", AccountType.EQUITY, credit="50000"),
            ]
        )

        report = await generate_trial_balance(store, "c-1", AS_OF)

        assert report.summary.difference == Decimal("0.005")
        assert report.summary.is_balanced is True

    @pytest.mark.asyncio
    async def test_two_paise_difference_is_unbalanced(self):
        store = FakeLedgerStore(
            trial_balance=[
                tb("1100", "Cash", AccountType.ASSET, debit="50000.02"),
                tb("3100", "Share Capital", AccountType.EQUITY, credit="50000"),
            ]
        )

        report = await generate_trial_balance(store, "c-1", AS_OF)

        assert report.summary.difference == Decimal("0.02")
        assert report.summary.is_balanced is False

    @pytest.mark.asyncio
    async def test_empty_ledger(self):
        report = await generate_trial_balance(FakeLedgerStore(), "c-1", AS_OF)

        assert report.rows == ()
        assert report.summary.total_debits == 0
        assert report.summary.total_credits == 0
        assert report.summary.row_count == 0
        assert report.summary.is_balanced is True

    @pytest.mark.asyncio
    async def test_unknown_client_name(self, balanced_trial_balance):
        store = FakeLedgerStore(client=None, trial_balance=balanced_trial_balance)

        report = await generate_trial_balance(store, "missing", AS_OF)

        assert report.client_name == "Unknown Client"
        assert report.summary.row_count == 10

    @pytest.mark.asyncio
    async def test_defaults_to_today(self, store):
        report = await generate_trial_balance(store, "c-1")

        assert report.as_of_date == date.today()
        assert ("fetch_aggregated_trial_balance", date.today()) in store.calls

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, store):
        store.fail_when = lambda method, _: method == "fetch_aggregated_trial_balance"

        with pytest.raises(LedgerStoreError):
            await generate_trial_balance(store, "c-1", AS_OF)

    @pytest.mark.asyncio
    async def test_repeat_runs_are_equal(self, store):
        first = await generate_trial_balance(store, "c-1", AS_OF)
        second = await generate_trial_balance(store, "c-1", AS_OF)

        assert first == second


class TestGrouping:
    """Tests for grouping rows by account type."""

    @pytest.mark.asyncio
    async def test_grouped_has_every_type(self, store):
        groups = await get_trial_balance_grouped(store, "c-1", AS_OF)

        assert set(groups) == set(AccountType)
        assert [row.account_code for row in groups[AccountType.ASSET]] == [
            "1100",
            "1140",
            "1499",
            "1500",
            "1050",
        ]
        assert len(groups[AccountType.INCOME]) == 1

    def test_empty_groups(self):
        groups = group_by_account_type([])

        assert all(rows == [] for rows in groups.values())
        assert len(groups) == 5


class TestValidation:
    """Tests for validate_trial_balance."""

    @pytest.mark.asyncio
    async def test_balanced(self, store):
        result = await validate_trial_balance(store, "c-1", AS_OF)

        assert result.is_valid is True
        assert result.error_message is None

    @pytest.mark.asyncio
    async def test_unbalanced_message(self):
        store = FakeLedgerStore(
            trial_balance=[
                tb("1100", "Cash", AccountType.ASSET, debit="1000.50"),
                tb("3100", "Share Capital", AccountType.EQUITY, credit="1000"),
            ]
        )

        result = await validate_trial_balance(store, "c-1", AS_OF)

        assert result.is_valid is False
        assert result.difference == Decimal("0.50")
        assert result.error_message == "Trial balance is not balanced. Difference: ₹0.50"


@pytest.mark.asyncio
async def test_export_to_csv(store):
    output = await export_trial_balance_to_csv(store, "c-1", AS_OF)

    assert output.splitlines()[0] == "Trial Balance,,,,,"
    assert output.splitlines()[-1] == ",TOTAL,,125000.00,125000.00,0.00"
