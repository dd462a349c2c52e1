from .reports import (
    GROUP_BY_CHOICES,
    ReportNotFound,
    counterparty_report,
    dashboard_summary,
    inventory_report,
    transaction_report,
)

__all__ = [
    "GROUP_BY_CHOICES",
    "ReportNotFound",
    "dashboard_summary",
    "inventory_report",
    "transaction_report",
    "counterparty_report",
]
