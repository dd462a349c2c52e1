# transactions/urls.py

from django.urls import path

from transactions.views import (
    PurchasesListView,
    SalesListView,
    TransactionDetailView,
    TransactionListCreateView,
    TransactionStatusView,
    TransactionSummaryView,
)

app_name = "transactions"

urlpatterns = [
    path("", TransactionListCreateView.as_view(), name="list-create"),
    path("summary/", TransactionSummaryView.as_view(), name="summary"),
    path("sales/", SalesListView.as_view(), name="sales"),
    path("purchases/", PurchasesListView.as_view(), name="purchases"),
    path("<uuid:transaction_id>/", TransactionDetailView.as_view(), name="detail"),
    path("<uuid:transaction_id>/status/", TransactionStatusView.as_view(), name="status"),
]
