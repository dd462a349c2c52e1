# reports/views/__init__.py

from .reports import (
    CustomerReportView,
    DashboardReportView,
    InventoryReportView,
    TransactionReportView,
    VendorReportView,
)

__all__ = [
    "DashboardReportView",
    "InventoryReportView",
    "TransactionReportView",
    "CustomerReportView",
    "VendorReportView",
]
