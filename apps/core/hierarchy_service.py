# apps/core/hierarchy_service.py

"""
Hierarchy Consistency Engine

Owns every lifecycle rule of the board -> column -> task hierarchy:
- board titles unique per owner, column names unique per board (case-insensitive)
- column ordinals dense 1..column_count, new columns appended at the end
- column_count always equal to the number of live columns of the board
- deletions cascade down the hierarchy; the board cascade is all-or-nothing

Callers (the transport layer) pass plain values and get model instances,
views, or a BoardflowError back. The owner identity is always an explicit
argument; the service never reads request state.
"""

import logging
import uuid
from datetime import datetime

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .aggregation import BoardView, assemble, build_board_view
from .events import calendar_event, event_publisher
from .exceptions import (
    BoardflowError, InvalidInput, StorageFailure, CascadeFailure,
    ColumnNotFound, DestinationColumnNotFound,
    BoardExists, ColumnExists,
)
from .models import Board, Column, Task, Methodology
from .storage import storage as default_storage

logger = logging.getLogger(__name__)

DEFAULT_PRESET_COLUMNS = {
    Methodology.KANBAN: ['To Do', 'In Progress', 'Done'],
    Methodology.SIMPLE: ['Tasks'],
}


def _required_text(value, field):
    """Non-blank string, stripped"""
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} cannot be empty")
    return value.strip()


def _parse_id(value, entity):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidInput(f"invalid {entity} ID")


def _parse_deadline(value):
    """Aware datetime from a datetime or an ISO-8601 string"""
    if isinstance(value, str):
        try:
            value = parse_datetime(value.strip())
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        raise InvalidInput("invalid deadline format")
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def _parse_progress(value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput("progress must be an integer")
    if not 0 <= value <= 100:
        raise InvalidInput("progress must be between 0 and 100")
    return value


class HierarchyService:
    """
    Board/column/task operations with their consistency rules

    Both collaborators are injectable so tests can swap the store or the
    event publisher.
    """

    def __init__(self, storage=None, publisher=None):
        self.storage = storage or default_storage
        self.publisher = publisher or event_publisher

    # === BOARDS ===

    def create_board(self, title, description, methodology, category, owner_id) -> BoardView:
        """
        Create a board seeded with the preset columns of its methodology

        Board and preset columns are persisted as one unit.
        """
        title = _required_text(title, 'title')
        description = _required_text(description, 'description')
        category = _required_text(category, 'category')
        owner_id = _required_text(owner_id, 'owner id')
        if methodology not in Methodology.values:
            raise InvalidInput("methodology must be kanban or simple")

        self._ensure_unique_title(owner_id, title)

        names = self._preset_columns(methodology)
        now = timezone.now()
        board = Board(
            title=title,
            description=description,
            category=category,
            methodology=methodology,
            progress=0,
            favorite=False,
            column_count=len(names),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        columns = [
            Column(name=name, ordinal=position, board=board)
            for position, name in enumerate(names, start=1)
        ]

        self.storage.boards.insert(board, columns)
        logger.info(f"✅ Board {board.id} '{title}' created for {owner_id} ({methodology}, {len(columns)} columns)")
        return assemble(board, columns)

    def get_board_info(self, board_id) -> BoardView:
        """Board with its ordered columns and their tasks"""
        return build_board_view(_parse_id(board_id, 'board'), self.storage)

    def list_boards(self, owner_id):
        """Summary of every board owned by `owner_id`, newest first"""
        return self.storage.boards.find_by_owner(owner_id)

    def update_board(self, board_id, title=None, description=None, progress=None, favorite=None):
        """Apply the supplied fields only and refresh updated_at"""
        if title is None and description is None and progress is None and favorite is None:
            raise InvalidInput("at least one field is required")

        board = self.storage.boards.find_by_id(_parse_id(board_id, 'board'))

        fields = {}
        if title is not None:
            title = _required_text(title, 'title')
            self._ensure_unique_title(board.owner_id, title, exclude=board.id)
            fields['title'] = title
        if description is not None:
            fields['description'] = _required_text(description, 'description')
        if progress is not None:
            fields['progress'] = _parse_progress(progress)
        if favorite is not None:
            fields['favorite'] = bool(favorite)
        fields['updated_at'] = timezone.now()

        return self.storage.boards.update_fields(board.id, **fields)

    def delete_board(self, board_id):
        """
        Delete the board with all of its columns and their tasks

        Runs as a single transaction: on any failure nothing is removed and
        CascadeFailure(partial=False) is raised from the original error.
        """
        board = self.storage.boards.find_by_id(_parse_id(board_id, 'board'))

        step = 'find_columns'
        removed_tasks = 0
        try:
            with self.storage.atomic():
                columns = self.storage.columns.find_by_board(board.id)
                for column in columns:
                    step = f'delete_tasks:{column.id}'
                    removed_tasks += self.storage.tasks.delete_by_columns([column.id])
                step = 'delete_columns'
                self.storage.columns.delete_by_board(board.id)
                step = 'delete_board'
                self.storage.boards.delete(board.id)
        except StorageFailure as exc:
            logger.error(f"❌ Board {board.id} cascade rolled back at {step}: {exc.message}")
            raise CascadeFailure(
                f"failed to delete board: {exc.message}",
                partial=False,
                step=step
            ) from exc

        logger.info(f"🗑️ Board {board.id} deleted ({len(columns)} columns, {removed_tasks} tasks)")

    # === COLUMNS ===

    def create_column(self, board_id, name) -> Column:
        """
        Append a column at the end of the board

        The counter increment doubles as the ordinal. Increment and insert
        share one transaction, so a failed insert rolls the counter back.
        """
        name = _required_text(name, 'name')
        board = self.storage.boards.find_by_id(_parse_id(board_id, 'board'))
        self._ensure_unique_column_name(board.id, name)

        try:
            with self.storage.atomic():
                ordinal = self.storage.boards.increment_column_count(board.id)
                column = self.storage.columns.insert(
                    Column(name=name, ordinal=ordinal, board_id=board.id)
                )
        except BoardflowError as exc:
            logger.warning(f"⚠️ Column '{name}' not created on board {board.id}, counter rolled back: {exc.message}")
            raise

        logger.info(f"✅ Column '{name}' added to board {board.id} at position {ordinal}")
        return column

    def update_column(self, column_id, name=None) -> Column:
        column = self.storage.columns.find_by_id(_parse_id(column_id, 'column'))
        if name is None:
            return column

        name = _required_text(name, 'name')
        self._ensure_unique_column_name(column.board_id, name, exclude=column.id)
        return self.storage.columns.update_fields(column.id, name=name)

    def delete_column(self, column_id):
        """
        Delete a column with its tasks, then close the ordinal gap

        Tasks and column go away together. Renumbering the siblings and
        decrementing the board counter follow as separate steps; if one of
        them fails the column stays deleted and CascadeFailure(partial=True)
        names the step that needs repair (see `manage.py check_hierarchy`).
        """
        column = self.storage.columns.find_by_id(_parse_id(column_id, 'column'))

        try:
            with self.storage.atomic():
                removed_tasks = self.storage.tasks.delete_by_columns([column.id])
                self.storage.columns.delete(column.id)
        except StorageFailure as exc:
            logger.error(f"❌ Column {column.id} not deleted: {exc.message}")
            raise CascadeFailure(
                f"failed to delete column: {exc.message}",
                partial=False,
                step='delete_column'
            ) from exc

        step = 'shift_ordinals'
        try:
            self.storage.columns.shift_ordinals_after(column.board_id, column.ordinal)
            step = 'decrement_column_count'
            self.storage.boards.decrement_column_count(column.board_id)
        except BoardflowError as exc:
            logger.error(f"❌ Column {column.id} deleted but {step} failed on board {column.board_id}: {exc.message}")
            raise CascadeFailure(
                f"column deleted but {step} failed: {exc.message}",
                partial=True,
                step=step
            ) from exc

        logger.info(f"🗑️ Column {column.id} removed from board {column.board_id} ({removed_tasks} tasks)")

    # === TASKS ===

    def create_task(self, title, description, deadline, column_id, in_calendar=False, owner_id=None) -> Task:
        """
        Create a task in an existing column

        When `in_calendar` is set, a calendar event is dispatched after the
        insert commits; its outcome never affects the result.
        """
        title = _required_text(title, 'title')
        description = _required_text(description, 'description')
        deadline = _parse_deadline(deadline)
        if deadline <= timezone.now():
            raise InvalidInput("deadline must be in the future")
        if in_calendar:
            owner_id = _required_text(owner_id, 'owner id')

        column = self.storage.columns.find_by_id(_parse_id(column_id, 'column'))
        task = self.storage.tasks.insert(Task(
            title=title,
            description=description,
            deadline=deadline,
            in_calendar=bool(in_calendar),
            column_id=column.id,
        ))

        if task.in_calendar:
            self._announce_calendar_task(task, owner_id)
        return task

    def move_task(self, task_id, new_column_id) -> Task:
        """Re-parent a task; ordinals are unaffected"""
        task = self.storage.tasks.find_by_id(_parse_id(task_id, 'task'))
        try:
            column = self.storage.columns.find_by_id(_parse_id(new_column_id, 'column'))
        except ColumnNotFound as exc:
            raise DestinationColumnNotFound(new_column_id) from exc

        return self.storage.tasks.update_fields(task.id, column_id=column.id)

    def update_task(self, task_id, title=None, description=None, deadline=None) -> Task:
        task = self.storage.tasks.find_by_id(_parse_id(task_id, 'task'))

        fields = {}
        if title is not None:
            fields['title'] = _required_text(title, 'title')
        if description is not None:
            fields['description'] = _required_text(description, 'description')
        if deadline is not None:
            fields['deadline'] = _parse_deadline(deadline)

        return self.storage.tasks.update_fields(task.id, **fields)

    def delete_task(self, task_id):
        self.storage.tasks.delete(_parse_id(task_id, 'task'))

    # === HELPERS ===

    def _preset_columns(self, methodology):
        presets = getattr(settings, 'BOARDFLOW_PRESET_COLUMNS', None) or DEFAULT_PRESET_COLUMNS
        return list(presets[methodology])

    def _ensure_unique_title(self, owner_id, title, exclude=None):
        wanted = title.casefold()
        for board in self.storage.boards.find_by_owner(owner_id):
            if board.id != exclude and board.title.casefold() == wanted:
                logger.info(f"Board title '{title}' already used by {owner_id}")
                raise BoardExists()

    def _ensure_unique_column_name(self, board_id, name, exclude=None):
        wanted = name.casefold()
        for column in self.storage.columns.find_by_board(board_id):
            if column.id != exclude and column.name.casefold() == wanted:
                logger.info(f"Column name '{name}' already used on board {board_id}")
                raise ColumnExists()

    def _announce_calendar_task(self, task, owner_id):
        if not getattr(settings, 'BOARDFLOW_EVENTS_ENABLED', True):
            return

        payload = calendar_event(task, owner_id)
        topic = settings.BOARDFLOW_EVENTS_TOPIC
        transaction.on_commit(
            lambda: self.publisher.dispatch(topic, owner_id, payload)
        )


# Global service instance
hierarchy_service = HierarchyService()
