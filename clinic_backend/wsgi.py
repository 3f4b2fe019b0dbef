"""
WSGI config for the clinic backend.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinic_backend.settings_prod')

application = get_wsgi_application()
