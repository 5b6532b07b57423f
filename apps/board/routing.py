# apps/board/routing.py

from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # Calendar events of the connected user
    re_path(r'ws/events/$', consumers.EventsConsumer.as_asgi()),
]
