# reports/urls.py

from django.urls import path

from reports.views import (
    CustomerReportView,
    DashboardReportView,
    InventoryReportView,
    TransactionReportView,
    VendorReportView,
)

app_name = "reports"

urlpatterns = [
    path("dashboard/", DashboardReportView.as_view(), name="dashboard"),
    path("inventory/", InventoryReportView.as_view(), name="inventory"),
    path("transactions/", TransactionReportView.as_view(), name="transactions"),
    path("customers/<uuid:contact_id>/", CustomerReportView.as_view(), name="customer"),
    path("vendors/<uuid:contact_id>/", VendorReportView.as_view(), name="vendor"),
]
