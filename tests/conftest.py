"""
Shared fixtures: a hierarchy service wired to its own store facade and a
recording event publisher, plus a few prebuilt boards.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.hierarchy_service import HierarchyService
from apps.core.storage import Storage


class RecordingPublisher:
    """Stands in for EventPublisher: remembers dispatches, sends nothing"""

    def __init__(self):
        self.dispatched = []

    def dispatch(self, topic, key, payload, timeout=None):
        self.dispatched.append((topic, key, payload))


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def service(publisher):
    return HierarchyService(storage=Storage(), publisher=publisher)


@pytest.fixture
def future():
    return timezone.now() + timedelta(days=7)


@pytest.fixture
def kanban(service):
    """Kanban board of alice: To Do / In Progress / Done"""
    return service.create_board(
        title='Sprint 1',
        description='First sprint',
        methodology='kanban',
        category='work',
        owner_id='alice',
    )


@pytest.fixture
def make_task(service, future):
    def _make_task(column, title='Write tests', **kwargs):
        kwargs.setdefault('description', 'pytest-django')
        kwargs.setdefault('deadline', future)
        return service.create_task(title=title, column_id=column.id, **kwargs)

    return _make_task
