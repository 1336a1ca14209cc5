"""Financial reports derived from the ledger store."""

from ledgerbook.reports.balance_sheet import (
    BalanceSheetReport,
    ComparativeBalanceSheet,
    FinancialRatios,
    calculate_financial_ratios,
    derive_balance_sheet,
    export_balance_sheet_to_csv,
    generate_balance_sheet,
    generate_comparative_balance_sheet,
)
from ledgerbook.reports.cash_flow import (
    CashFlowReport,
    export_cash_flow_to_csv,
    generate_cash_flow,
    get_cash_balance,
)
from ledgerbook.reports.errors import (
    InvalidTaxIdError,
    MissingTaxIdError,
    ReportError,
    ReportPeriodError,
)
from ledgerbook.reports.gst import (
    GstLiability,
    Gstr1Report,
    Gstr3bReport,
    calculate_gst_liability,
    export_gstr1_to_csv,
    export_gstr1_to_json,
    export_gstr3b_to_csv,
    generate_gstr1,
    generate_gstr3b,
    is_valid_gstin,
)
from ledgerbook.reports.profit_loss import (
    ComparativeProfitLoss,
    MonthlyProfitLoss,
    ProfitLossMetrics,
    ProfitLossReport,
    calculate_profit_loss_metrics,
    export_profit_loss_to_csv,
    generate_comparative_profit_loss,
    generate_profit_loss,
    get_monthly_profit_loss_summary,
)
from ledgerbook.reports.trial_balance import (
    TrialBalanceReport,
    TrialBalanceValidation,
    export_trial_balance_to_csv,
    generate_trial_balance,
    get_trial_balance_grouped,
    group_by_account_type,
    validate_trial_balance,
)

__all__ = [
    # Errors
    "ReportError",
    "MissingTaxIdError",
    "InvalidTaxIdError",
    "ReportPeriodError",
    # Trial balance
    "TrialBalanceReport",
    "TrialBalanceValidation",
    "generate_trial_balance",
    "get_trial_balance_grouped",
    "group_by_account_type",
    "validate_trial_balance",
    "export_trial_balance_to_csv",
    # Balance sheet
    "BalanceSheetReport",
    "ComparativeBalanceSheet",
    "FinancialRatios",
    "derive_balance_sheet",
    "generate_balance_sheet",
    "generate_comparative_balance_sheet",
    "calculate_financial_ratios",
    "export_balance_sheet_to_csv",
    # Profit & loss
    "ProfitLossReport",
    "ComparativeProfitLoss",
    "MonthlyProfitLoss",
    "ProfitLossMetrics",
    "generate_profit_loss",
    "generate_comparative_profit_loss",
    "get_monthly_profit_loss_summary",
    "calculate_profit_loss_metrics",
    "export_profit_loss_to_csv",
    # Cash flow
    "CashFlowReport",
    "generate_cash_flow",
    "get_cash_balance",
    "export_cash_flow_to_csv",
    # GST
    "Gstr1Report",
    "Gstr3bReport",
    "GstLiability",
    "generate_gstr1",
    "generate_gstr3b",
    "is_valid_gstin",
    "calculate_gst_liability",
    "export_gstr1_to_json",
    "export_gstr1_to_csv",
    "export_gstr3b_to_csv",
]
