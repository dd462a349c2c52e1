# transactions/apps.py

from django.apps import AppConfig


class TransactionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "transactions"
    verbose_name = "Transactions (ledger)"

    def ready(self):
        # registers post-commit receivers
        from transactions import receivers  # noqa: F401
