# config/wsgi.py

import os
from django.core.wsgi import get_wsgi_application

# WSGI serves the JSON API only; WebSockets need config.asgi
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.production')

application = get_wsgi_application()
