# apps/board/consumers.py

import json
import logging
from urllib.parse import parse_qs

from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

# Close code sent when the socket carries no identity
CLOSE_UNAUTHENTICATED = 4401


class EventsConsumer(AsyncWebsocketConsumer):
    """
    Calendar event stream for one user

    Every subscriber joins the group named after the events topic; only the
    events whose key equals the caller identity are forwarded.
    Identity comes from the X-User-Id header, or `?user_id=` for clients
    that cannot set headers on the handshake.
    """

    async def connect(self):
        self.owner_id = self.get_owner_id()
        self.group_name = settings.BOARDFLOW_EVENTS_TOPIC

        if not self.owner_id:
            logger.warning("❌ Events WebSocket rejected - missing user id")
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        await self.channel_layer.group_add(
            self.group_name,
            self.channel_name
        )
        await self.accept()

        logger.info(f"✅ Events WebSocket connected for {self.owner_id}")

    async def disconnect(self, close_code):
        if self.owner_id:
            await self.channel_layer.group_discard(
                self.group_name,
                self.channel_name
            )
            logger.info(f"🔌 Events WebSocket disconnected for {self.owner_id}")

    async def receive(self, text_data=None, bytes_data=None):
        """Only heartbeats are accepted from the client"""
        try:
            data = json.loads(text_data or '{}')
        except json.JSONDecodeError:
            logger.error(f"❌ Invalid JSON received via WebSocket from {self.owner_id}")
            return

        if data.get('type') == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': timezone.now().isoformat()
            }))

    # === Handlers ===

    async def board_event(self, event):
        """Group message of type 'board.event'"""
        if event.get('key') != self.owner_id:
            return

        await self.send(text_data=json.dumps({
            'type': 'board_event',
            'payload': event['payload']
        }))

    # === Helpers ===

    def get_owner_id(self):
        headers = dict(self.scope.get('headers', []))
        owner_id = headers.get(b'x-user-id', b'').decode('latin-1').strip()
        if owner_id:
            return owner_id

        query = parse_qs(self.scope.get('query_string', b'').decode())
        values = query.get('user_id') or ['']
        return values[0].strip() or None
