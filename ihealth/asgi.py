"""
ASGI entry point for the iHealth backend.

The API is plain HTTP, so this only wraps Django's ASGI handler for
servers such as uvicorn or daphne.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ihealth.settings")

application = get_asgi_application()
