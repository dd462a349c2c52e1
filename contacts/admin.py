# contacts/admin.py

from django.contrib import admin

from contacts.models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "business", "phone", "email", "current_balance", "is_active")
    list_filter = ("type", "is_active", "business")
    search_fields = ("name", "phone", "email")
    ordering = ("business", "name")
    readonly_fields = ("current_balance", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            fields.append("type")
        return fields
