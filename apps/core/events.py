# apps/core/events.py

"""
Calendar event publishing over the Channels layer

publish() sends one message to the group named after the topic and waits
at most `timeout` seconds. dispatch() runs publish() on a detached daemon
thread: the request path never waits for it, failures are only logged and
nothing is retried (at-most-once delivery).
"""

import asyncio
import logging
import threading

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

logger = logging.getLogger(__name__)

EVENT_MESSAGE_TYPE = 'board.event'


def calendar_event(task, owner_id, event_type='create'):
    """Payload announcing a task that should show up in the owner's calendar"""
    return {
        'event_type': event_type,
        'title': task.title,
        'description': task.description,
        'deadline': task.deadline.isoformat(),
        'user_id': owner_id,
    }


class EventPublisher:
    """Publishes (topic, key, payload) messages to a channel layer group"""

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        return self._channel_layer or get_channel_layer()

    def publish(self, topic, key, payload, timeout):
        """Send one event and block until the layer accepted it or timeout expires"""
        layer = self.channel_layer
        if layer is None:
            raise RuntimeError("No channel layer configured (CHANNEL_LAYERS)")

        message = {
            'type': EVENT_MESSAGE_TYPE,
            'key': key,
            'payload': payload,
        }
        async_to_sync(self._send)(layer, topic, message, timeout)

    async def _send(self, layer, topic, message, timeout):
        await asyncio.wait_for(layer.group_send(topic, message), timeout)

    def dispatch(self, topic, key, payload, timeout=None):
        """
        Fire-and-forget publish on a background thread

        Returns the started thread; callers on the request path must not join it.
        """
        if timeout is None:
            timeout = settings.BOARDFLOW_EVENTS_TIMEOUT

        thread = threading.Thread(
            target=self._publish_logged,
            args=(topic, key, payload, timeout),
            name=f'event-publisher-{topic}',
            daemon=True
        )
        thread.start()
        return thread

    def _publish_logged(self, topic, key, payload, timeout):
        try:
            self.publish(topic, key, payload, timeout)
            logger.debug(f"📨 Event published on {topic} for {key}")
        except Exception as e:
            logger.error(f"❌ Failed to publish event on {topic} for {key}: {e!r}")


event_publisher = EventPublisher()
