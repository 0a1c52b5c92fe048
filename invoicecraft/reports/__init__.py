"""Reporting package."""

from invoicecraft.reports.aggregator import (
    DashboardSummary,
    MonthlyBucket,
    dashboard_summary,
    effective_invoices,
    monthly_rollup,
    recent_invoices,
    search_invoices,
    trailing_months,
)

__all__ = [
    "DashboardSummary",
    "MonthlyBucket",
    "dashboard_summary",
    "effective_invoices",
    "monthly_rollup",
    "recent_invoices",
    "search_invoices",
    "trailing_months",
]
