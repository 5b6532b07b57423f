"""
Model tests: serialisation and the database-level uniqueness rules
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.models import Board, Column, Task


def make_board(**overrides):
    values = dict(
        title='Launch', description='Q3 launch', category='marketing',
        methodology='simple', owner_id='alice',
    )
    values.update(overrides)
    return Board.objects.create(**values)


@pytest.mark.django_db
class TestConstraints:

    def test_board_title_unique_per_owner_ignoring_case(self):
        make_board(title='Launch')
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                make_board(title='LAUNCH')

        make_board(title='LAUNCH', owner_id='bob')
        assert Board.objects.count() == 2

    def test_column_name_unique_per_board_ignoring_case(self):
        board = make_board()
        Column.objects.create(board=board, name='Doing', ordinal=1)
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Column.objects.create(board=board, name='doing', ordinal=2)

    def test_ordinals_are_not_unique_at_database_level(self):
        board = make_board()
        Column.objects.create(board=board, name='a', ordinal=1)
        Column.objects.create(board=board, name='b', ordinal=1)
        assert board.columns.count() == 2


class TestTask:

    def test_is_overdue(self):
        task = Task(title='t', description='d', deadline=timezone.now() - timedelta(seconds=1))
        assert task.is_overdue()
        task.deadline = timezone.now() + timedelta(hours=1)
        assert not task.is_overdue()


@pytest.mark.django_db
def test_to_dict_shapes():
    board = make_board(column_count=1)
    column = Column.objects.create(board=board, name='Tasks', ordinal=1)
    task = Task.objects.create(
        title='t', description='d', deadline=timezone.now() + timedelta(days=1), column=column,
    )

    assert set(board.to_dict()) == {
        'id', 'title', 'description', 'category', 'methodology', 'progress',
        'favorite', 'column_count', 'owner_id', 'created_at', 'updated_at',
    }
    assert column.to_dict() == {
        'id': str(column.id), 'name': 'Tasks', 'ordinal': 1, 'board_id': str(board.id),
    }
    assert task.to_dict()['column_id'] == str(column.id)
