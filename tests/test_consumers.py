"""
Events WebSocket tests (in-memory channel layer)
"""

import pytest
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator

from apps.board.consumers import CLOSE_UNAUTHENTICATED, EventsConsumer


def event(key, title='Demo'):
    return {
        'type': 'board.event',
        'key': key,
        'payload': {'event_type': 'create', 'title': title, 'user_id': key},
    }


@pytest.mark.asyncio
async def test_events_for_the_connected_user_are_forwarded():
    communicator = WebsocketCommunicator(
        EventsConsumer.as_asgi(), '/ws/events/', headers=[(b'x-user-id', b'alice')]
    )
    connected, _ = await communicator.connect()
    assert connected

    await get_channel_layer().group_send('board.event', event('alice'))

    message = await communicator.receive_json_from(timeout=1)
    assert message == {'type': 'board_event', 'payload': event('alice')['payload']}
    await communicator.disconnect()


@pytest.mark.asyncio
async def test_events_of_other_users_are_filtered_out():
    communicator = WebsocketCommunicator(EventsConsumer.as_asgi(), '/ws/events/?user_id=alice')
    connected, _ = await communicator.connect()
    assert connected

    await get_channel_layer().group_send('board.event', event('bob'))

    assert await communicator.receive_nothing(timeout=0.2)
    await communicator.disconnect()


@pytest.mark.asyncio
async def test_connection_without_identity_is_refused():
    communicator = WebsocketCommunicator(EventsConsumer.as_asgi(), '/ws/events/')
    connected, code = await communicator.connect()

    assert not connected
    assert code == CLOSE_UNAUTHENTICATED


@pytest.mark.asyncio
async def test_ping():
    communicator = WebsocketCommunicator(
        EventsConsumer.as_asgi(), '/ws/events/', headers=[(b'x-user-id', b'alice')]
    )
    await communicator.connect()

    await communicator.send_json_to({'type': 'ping'})

    response = await communicator.receive_json_from(timeout=1)
    assert response['type'] == 'pong'
    await communicator.disconnect()
