"""
check_hierarchy management command tests
"""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.core.models import Board, Column

pytestmark = pytest.mark.django_db


def run(**options):
    out = StringIO()
    call_command('check_hierarchy', stdout=out, **options)
    return out.getvalue()


@pytest.fixture
def drifted(kanban):
    """Counter and ordinals out of sync, as after a partial column delete"""
    board_id = kanban.board.id
    Column.objects.filter(pk=kanban.columns[0].column.id).delete()
    Board.objects.filter(pk=board_id).update(column_count=5)
    return kanban


def test_consistent_hierarchy(kanban):
    output = run()
    assert '1 boards checked, hierarchy consistent' in output


def test_drift_is_reported(drifted):
    with pytest.raises(CommandError, match='1 of 1 boards'):
        run()

    # Report only: nothing repaired
    assert Board.objects.get(pk=drifted.board.id).column_count == 5


def test_fix_renumbers_and_resets_counter(drifted):
    output = run(fix=True)

    assert 'column_count is 5, board has 2 columns' in output
    assert 'repaired' in output
    columns = Column.objects.filter(board_id=drifted.board.id).order_by('ordinal')
    assert [(c.name, c.ordinal) for c in columns] == [('In Progress', 1), ('Done', 2)]
    assert Board.objects.get(pk=drifted.board.id).column_count == 2

    assert 'hierarchy consistent' in run()


def test_single_board_option(service, drifted):
    healthy = service.create_board('Healthy', 'd', 'simple', 'c', 'alice')
    output = run(board_id=str(healthy.board.id))
    assert '1 boards checked' in output
