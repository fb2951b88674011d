"""
WSGI entry point for the iHealth backend.

Exposes the WSGI callable as a module-level variable named ``application``
for gunicorn/uwsgi style servers.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ihealth.settings')

application = get_wsgi_application()
