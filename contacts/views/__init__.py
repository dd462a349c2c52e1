# contacts/views/__init__.py

from .contact import ContactViewSet

__all__ = [
    "ContactViewSet",
]
