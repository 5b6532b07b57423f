"""
Hierarchy service tests

Presets, column_count bookkeeping, dense ordinals, uniqueness rules,
cascading deletes and the calendar side effect.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.exceptions import (
    InvalidInput, StorageFailure, CascadeFailure,
    BoardNotFound, ColumnNotFound, DestinationColumnNotFound, TaskNotFound,
    BoardExists, ColumnExists,
)
from apps.core.models import Board, Column, Task

pytestmark = pytest.mark.django_db


def live_columns(board_id):
    return list(Column.objects.filter(board_id=board_id).order_by('ordinal'))


def column_count(board_id):
    return Board.objects.get(pk=board_id).column_count


# =============================================================================
# BOARDS
# =============================================================================

class TestCreateBoard:

    def test_kanban_board_gets_three_preset_columns(self, kanban):
        board = kanban.board
        assert [view.column.name for view in kanban.columns] == ['To Do', 'In Progress', 'Done']
        assert [view.column.ordinal for view in kanban.columns] == [1, 2, 3]
        assert board.column_count == 3
        assert board.progress == 0
        assert board.favorite is False
        assert board.created_at == board.updated_at

    def test_preset_columns_are_persisted_with_the_board(self, kanban):
        names = [column.name for column in live_columns(kanban.board.id)]
        assert names == ['To Do', 'In Progress', 'Done']
        assert column_count(kanban.board.id) == 3

    def test_simple_board_gets_single_column(self, service):
        view = service.create_board('Groceries', 'Weekly list', 'simple', 'home', 'alice')
        assert [(v.column.name, v.column.ordinal) for v in view.columns] == [('Tasks', 1)]
        assert column_count(view.board.id) == 1

    def test_presets_follow_settings(self, service, settings):
        settings.BOARDFLOW_PRESET_COLUMNS = {'kanban': ['Backlog', 'Doing'], 'simple': ['Items']}
        view = service.create_board('Custom', 'd', 'kanban', 'c', 'alice')
        assert [v.column.name for v in view.columns] == ['Backlog', 'Doing']
        assert view.board.column_count == 2

    def test_unknown_methodology_is_rejected(self, service):
        with pytest.raises(InvalidInput, match='methodology must be kanban or simple'):
            service.create_board('Board', 'd', 'scrum', 'c', 'alice')
        assert not Board.objects.exists()

    @pytest.mark.parametrize('field', ['title', 'description', 'category', 'owner_id'])
    def test_blank_fields_are_rejected(self, service, field):
        values = dict(title='Board', description='d', methodology='kanban', category='c', owner_id='alice')
        values[field] = '   '
        with pytest.raises(InvalidInput):
            service.create_board(**values)

    def test_title_is_unique_per_owner_ignoring_case(self, service, kanban):
        with pytest.raises(BoardExists):
            service.create_board('sprint 1', 'again', 'simple', 'c', 'alice')
        assert Board.objects.filter(owner_id='alice').count() == 1

    def test_same_title_allowed_for_other_owner(self, service, kanban):
        view = service.create_board('Sprint 1', 'mine', 'simple', 'c', 'bob')
        assert view.board.owner_id == 'bob'


class TestListAndGetBoards:

    def test_list_boards_only_returns_owned_boards(self, service, kanban):
        service.create_board('Other', 'd', 'simple', 'c', 'bob')
        boards = service.list_boards('alice')
        assert [board.id for board in boards] == [kanban.board.id]

    def test_list_boards_of_unknown_owner_is_empty(self, service):
        assert service.list_boards('nobody') == []

    def test_get_board_info_of_missing_board(self, service):
        with pytest.raises(BoardNotFound):
            service.get_board_info('2b7e1f0e-6f6c-4d55-9a8e-000000000000')

    def test_malformed_board_id(self, service):
        with pytest.raises(InvalidInput, match='invalid board ID'):
            service.get_board_info('not-a-uuid')


class TestUpdateBoard:

    def test_requires_at_least_one_field(self, service, kanban):
        with pytest.raises(InvalidInput, match='at least one field is required'):
            service.update_board(kanban.board.id)

    def test_only_supplied_fields_change(self, service, kanban):
        before = kanban.board
        board = service.update_board(before.id, progress=40, favorite=True)
        assert board.progress == 40
        assert board.favorite is True
        assert board.title == before.title
        assert board.description == before.description
        assert board.updated_at > before.updated_at

    def test_title_collision_with_another_board(self, service, kanban):
        other = service.create_board('Sprint 2', 'd', 'simple', 'c', 'alice')
        with pytest.raises(BoardExists):
            service.update_board(other.board.id, title='SPRINT 1')

    def test_renaming_a_board_to_its_own_title(self, service, kanban):
        board = service.update_board(kanban.board.id, title='SPRINT 1')
        assert board.title == 'SPRINT 1'

    def test_progress_out_of_range(self, service, kanban):
        with pytest.raises(InvalidInput):
            service.update_board(kanban.board.id, progress=101)

    def test_blank_title(self, service, kanban):
        with pytest.raises(InvalidInput, match='title cannot be empty'):
            service.update_board(kanban.board.id, title='  ')

    def test_missing_board(self, service):
        with pytest.raises(BoardNotFound):
            service.update_board('2b7e1f0e-6f6c-4d55-9a8e-000000000000', favorite=True)


class TestDeleteBoard:

    def test_cascades_to_columns_and_tasks(self, service, kanban, make_task):
        for view in kanban.columns:
            make_task(view.column)

        service.delete_board(kanban.board.id)

        assert not Board.objects.filter(pk=kanban.board.id).exists()
        assert not Column.objects.exists()
        assert not Task.objects.exists()

    def test_failure_rolls_everything_back(self, service, kanban, make_task, monkeypatch):
        for view in kanban.columns:
            make_task(view.column)

        real_delete = service.storage.tasks.delete_by_columns
        calls = []

        def flaky_delete(column_ids):
            calls.append(column_ids)
            if len(calls) == 2:
                raise StorageFailure('connection reset')
            return real_delete(column_ids)

        monkeypatch.setattr(service.storage.tasks, 'delete_by_columns', flaky_delete)

        with pytest.raises(CascadeFailure) as excinfo:
            service.delete_board(kanban.board.id)

        assert excinfo.value.partial is False
        assert excinfo.value.step.startswith('delete_tasks:')
        assert isinstance(excinfo.value.__cause__, StorageFailure)
        assert Board.objects.filter(pk=kanban.board.id).exists()
        assert Column.objects.count() == 3
        assert Task.objects.count() == 3

    def test_missing_board(self, service):
        with pytest.raises(BoardNotFound):
            service.delete_board('2b7e1f0e-6f6c-4d55-9a8e-000000000000')


# =============================================================================
# COLUMNS
# =============================================================================

class TestCreateColumn:

    def test_new_column_is_appended(self, service, kanban):
        column = service.create_column(kanban.board.id, 'Review')
        assert column.ordinal == 4
        assert column_count(kanban.board.id) == 4

    def test_duplicate_name_ignoring_case_leaves_count_unchanged(self, service, kanban):
        service.create_column(kanban.board.id, 'Review')

        with pytest.raises(ColumnExists):
            service.create_column(kanban.board.id, 'review')

        assert column_count(kanban.board.id) == 4
        assert len(live_columns(kanban.board.id)) == 4

    def test_same_name_on_another_board(self, service, kanban):
        other = service.create_board('Sprint 2', 'd', 'kanban', 'c', 'alice')
        column = service.create_column(other.board.id, 'Review')
        assert column.ordinal == 4

    def test_failed_insert_rolls_back_the_counter(self, service, kanban, monkeypatch):
        def failing_insert(column):
            raise StorageFailure('disk full')

        monkeypatch.setattr(service.storage.columns, 'insert', failing_insert)

        with pytest.raises(StorageFailure):
            service.create_column(kanban.board.id, 'Review')

        assert column_count(kanban.board.id) == 3

    def test_missing_board(self, service):
        with pytest.raises(BoardNotFound):
            service.create_column('2b7e1f0e-6f6c-4d55-9a8e-000000000000', 'Review')

    def test_blank_name(self, service, kanban):
        with pytest.raises(InvalidInput, match='name cannot be empty'):
            service.create_column(kanban.board.id, '')

    def test_ordinals_stay_dense_after_many_operations(self, service, kanban):
        review = service.create_column(kanban.board.id, 'Review')
        service.create_column(kanban.board.id, 'Blocked')
        service.delete_column(kanban.columns[0].column.id)
        service.delete_column(review.id)
        service.create_column(kanban.board.id, 'Shipped')

        columns = live_columns(kanban.board.id)
        assert [c.ordinal for c in columns] == list(range(1, len(columns) + 1))
        assert [c.name for c in columns] == ['In Progress', 'Done', 'Blocked', 'Shipped']
        assert column_count(kanban.board.id) == len(columns)


class TestUpdateColumn:

    def test_rename(self, service, kanban):
        column = service.update_column(kanban.columns[0].column.id, name='Backlog')
        assert column.name == 'Backlog'
        assert column.ordinal == 1

    def test_rename_to_sibling_name(self, service, kanban):
        with pytest.raises(ColumnExists):
            service.update_column(kanban.columns[0].column.id, name='DONE')

    def test_no_change_returns_column(self, service, kanban):
        column = service.update_column(kanban.columns[1].column.id)
        assert column.name == 'In Progress'

    def test_missing_column(self, service):
        with pytest.raises(ColumnNotFound):
            service.update_column('2b7e1f0e-6f6c-4d55-9a8e-000000000000', name='x')


class TestDeleteColumn:

    def test_closes_ordinal_gap(self, service, kanban):
        service.delete_column(kanban.columns[1].column.id)

        columns = live_columns(kanban.board.id)
        assert [(c.name, c.ordinal) for c in columns] == [('To Do', 1), ('Done', 2)]
        assert column_count(kanban.board.id) == 2

    def test_removes_the_column_tasks_only(self, service, kanban, make_task):
        doomed = make_task(kanban.columns[1].column)
        kept = make_task(kanban.columns[2].column)

        service.delete_column(kanban.columns[1].column.id)

        assert not Task.objects.filter(pk=doomed.id).exists()
        assert Task.objects.filter(pk=kept.id).exists()

    def test_failed_renumbering_is_reported_as_partial(self, service, kanban, monkeypatch):
        def failing_shift(board_id, ordinal):
            raise StorageFailure('timeout')

        monkeypatch.setattr(service.storage.columns, 'shift_ordinals_after', failing_shift)

        with pytest.raises(CascadeFailure) as excinfo:
            service.delete_column(kanban.columns[0].column.id)

        assert excinfo.value.partial is True
        assert excinfo.value.step == 'shift_ordinals'
        assert not Column.objects.filter(pk=kanban.columns[0].column.id).exists()

    def test_failed_counter_decrement_is_reported_as_partial(self, service, kanban, monkeypatch):
        def failing_decrement(board_id):
            raise StorageFailure('timeout')

        monkeypatch.setattr(service.storage.boards, 'decrement_column_count', failing_decrement)

        with pytest.raises(CascadeFailure) as excinfo:
            service.delete_column(kanban.columns[2].column.id)

        assert excinfo.value.partial is True
        assert excinfo.value.step == 'decrement_column_count'

    def test_missing_column(self, service):
        with pytest.raises(ColumnNotFound):
            service.delete_column('2b7e1f0e-6f6c-4d55-9a8e-000000000000')


# =============================================================================
# TASKS
# =============================================================================

class TestCreateTask:

    def test_creates_task_in_column(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)
        assert task.column_id == kanban.columns[0].column.id
        assert task.in_calendar is False

    def test_deadline_in_the_past(self, service, kanban):
        with pytest.raises(InvalidInput, match='deadline must be in the future'):
            service.create_task(
                title='Late', description='d',
                deadline=timezone.now() - timedelta(minutes=1),
                column_id=kanban.columns[0].column.id,
            )
        assert not Task.objects.exists()

    def test_iso_deadline_string(self, service, kanban):
        task = service.create_task(
            title='ISO', description='d', deadline='2999-01-01T10:00:00+00:00',
            column_id=kanban.columns[0].column.id,
        )
        assert task.deadline.year == 2999

    def test_malformed_deadline(self, service, kanban):
        with pytest.raises(InvalidInput, match='invalid deadline format'):
            service.create_task(
                title='Bad', description='d', deadline='next friday',
                column_id=kanban.columns[0].column.id,
            )

    def test_missing_column(self, service, future):
        with pytest.raises(ColumnNotFound):
            service.create_task('t', 'd', future, '2b7e1f0e-6f6c-4d55-9a8e-000000000000')

    def test_calendar_task_requires_owner(self, service, kanban, make_task):
        with pytest.raises(InvalidInput):
            make_task(kanban.columns[0].column, in_calendar=True)

    def test_calendar_task_publishes_after_commit(
            self, service, kanban, make_task, publisher, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            task = make_task(kanban.columns[0].column, title='Demo', in_calendar=True, owner_id='alice')

        assert len(callbacks) == 1
        assert len(publisher.dispatched) == 1
        topic, key, payload = publisher.dispatched[0]
        assert topic == 'board.event'
        assert key == 'alice'
        assert payload == {
            'event_type': 'create',
            'title': 'Demo',
            'description': task.description,
            'deadline': task.deadline.isoformat(),
            'user_id': 'alice',
        }

    def test_regular_task_publishes_nothing(
            self, service, kanban, make_task, publisher, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            make_task(kanban.columns[0].column)

        assert callbacks == []
        assert publisher.dispatched == []

    def test_events_can_be_disabled(
            self, service, kanban, make_task, publisher, settings, django_capture_on_commit_callbacks):
        settings.BOARDFLOW_EVENTS_ENABLED = False
        with django_capture_on_commit_callbacks(execute=True):
            task = make_task(kanban.columns[0].column, in_calendar=True, owner_id='alice')

        assert task.in_calendar is True
        assert publisher.dispatched == []


class TestMoveTask:

    def test_only_the_column_changes(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)
        moved = service.move_task(task.id, kanban.columns[2].column.id)

        assert moved.column_id == kanban.columns[2].column.id
        assert moved.title == task.title
        assert [c.ordinal for c in live_columns(kanban.board.id)] == [1, 2, 3]

    def test_missing_destination_keeps_task_in_place(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)

        with pytest.raises(DestinationColumnNotFound, match='new column not found'):
            service.move_task(task.id, '2b7e1f0e-6f6c-4d55-9a8e-000000000000')

        assert Task.objects.get(pk=task.id).column_id == kanban.columns[0].column.id

    def test_missing_task(self, service, kanban):
        with pytest.raises(TaskNotFound) as excinfo:
            service.move_task('2b7e1f0e-6f6c-4d55-9a8e-000000000000', kanban.columns[0].column.id)
        assert not isinstance(excinfo.value, DestinationColumnNotFound)


class TestUpdateAndDeleteTask:

    def test_partial_update(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)
        updated = service.update_task(task.id, title='Renamed')
        assert updated.title == 'Renamed'
        assert updated.description == task.description

    def test_deadline_in_the_past_is_accepted_on_update(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)
        past = timezone.now() - timedelta(days=1)
        updated = service.update_task(task.id, deadline=past)
        assert updated.is_overdue()

    def test_blank_description(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)
        with pytest.raises(InvalidInput):
            service.update_task(task.id, description='')

    def test_delete(self, service, kanban, make_task):
        task = make_task(kanban.columns[0].column)
        service.delete_task(task.id)
        assert not Task.objects.filter(pk=task.id).exists()

    def test_delete_missing(self, service):
        with pytest.raises(TaskNotFound):
            service.delete_task('2b7e1f0e-6f6c-4d55-9a8e-000000000000')
