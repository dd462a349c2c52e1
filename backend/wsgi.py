# backend/wsgi.py
"""
WSGI entrypoint.
Defaults to dev settings unless DJANGO_SETTINGS_MODULE is set externally;
production deployments must set DJANGO_SETTINGS_MODULE=backend.settings.prod.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_wsgi_application()
