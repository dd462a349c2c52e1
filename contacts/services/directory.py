# contacts/services/directory.py

from __future__ import annotations

import uuid
from typing import Optional

from contacts.models import Contact


def _as_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def find_active_contact(
    business,
    contact_id,
    expected_type: Optional[str] = None,
    *,
    for_update: bool = False,
) -> Optional[Contact]:
    """
    Return the active contact `contact_id` of `business`, or None.

    expected_type ("customer" / "vendor") narrows the match; pass None to
    resolve regardless of type (the posting engine does this to tell a
    missing counterparty apart from one of the wrong type).

    for_update=True locks the row; call inside transaction.atomic().
    """
    pk = _as_uuid(contact_id)
    if pk is None or business is None:
        return None

    qs = Contact.objects.filter(pk=pk, business=business, is_active=True)
    if expected_type:
        qs = qs.filter(type=expected_type)
    if for_update:
        qs = qs.select_for_update()

    return qs.first()
