# apps/core/storage.py

"""
Storage Gateway - thin persistence operations over the three collections

No business rules live here. Every operation translates store errors into
the core taxonomy:
- missing document      -> NotFound (entity specific)
- unique index conflict -> AlreadyExists (entity specific)
- anything else         -> StorageFailure
"""

import logging
from contextlib import contextmanager
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from .exceptions import (
    BoardflowError, StorageFailure,
    BoardNotFound, ColumnNotFound, TaskNotFound,
    AlreadyExists, BoardExists, ColumnExists,
)
from .models import Board, Column, Task

logger = logging.getLogger(__name__)


def _is_unique_violation(exc):
    cause = exc.__cause__
    if getattr(cause, 'pgcode', None) == '23505':
        return True
    return 'unique' in str(exc).lower()


def store_operation(not_found, conflict=AlreadyExists):
    """
    Decorator that maps Django/DB errors of a store method to the taxonomy

    The first positional argument of the decorated method, when present,
    is reported as the id of the missing entity.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except BoardflowError:
                raise
            except ObjectDoesNotExist as exc:
                raise not_found(args[0] if args else None) from exc
            except IntegrityError as exc:
                if _is_unique_violation(exc):
                    raise conflict() from exc
                logger.error(f"❌ {func.__qualname__} integrity error: {exc}")
                raise StorageFailure(str(exc)) from exc
            except DatabaseError as exc:
                logger.error(f"❌ {func.__qualname__} failed: {exc}")
                raise StorageFailure(str(exc)) from exc

        return wrapper

    return decorator


class BoardStore:
    """Persistence of the Boards collection"""

    @store_operation(BoardNotFound, BoardExists)
    def insert(self, board, columns=()):
        """Insert a board together with its initial columns (one unit)"""
        with transaction.atomic():
            board.save(force_insert=True)
            if columns:
                Column.objects.bulk_create(columns)
        return board

    @store_operation(BoardNotFound)
    def find_by_id(self, board_id):
        return Board.objects.get(pk=board_id)

    @store_operation(BoardNotFound)
    def find_by_owner(self, owner_id):
        return list(Board.objects.filter(owner_id=owner_id).order_by('-created_at'))

    @store_operation(BoardNotFound, BoardExists)
    def update_fields(self, board_id, **fields):
        """Partial patch: only the given fields are written"""
        if fields:
            with transaction.atomic():
                updated = Board.objects.filter(pk=board_id).update(**fields)
            if not updated:
                raise BoardNotFound(board_id)
        return Board.objects.get(pk=board_id)

    @store_operation(BoardNotFound)
    def delete(self, board_id):
        deleted, _ = Board.objects.filter(pk=board_id).delete()
        if not deleted:
            raise BoardNotFound(board_id)

    @store_operation(BoardNotFound)
    def increment_column_count(self, board_id):
        """
        Atomically bump column_count and return the post-increment value

        The UPDATE holds the row lock until the surrounding transaction ends,
        so the read-back cannot observe a concurrent increment.
        """
        with transaction.atomic():
            updated = Board.objects.filter(pk=board_id).update(
                column_count=F('column_count') + 1
            )
            if not updated:
                raise BoardNotFound(board_id)
            return Board.objects.values_list('column_count', flat=True).get(pk=board_id)

    @store_operation(BoardNotFound)
    def decrement_column_count(self, board_id):
        updated = Board.objects.filter(pk=board_id, column_count__gt=0).update(
            column_count=F('column_count') - 1
        )
        if not updated:
            if not Board.objects.filter(pk=board_id).exists():
                raise BoardNotFound(board_id)
            logger.warning(f"⚠️ column_count of board {board_id} already at zero")


class ColumnStore:
    """Persistence of the Columns collection"""

    @store_operation(ColumnNotFound, ColumnExists)
    def insert(self, column):
        with transaction.atomic():
            column.save(force_insert=True)
        return column

    @store_operation(ColumnNotFound)
    def find_by_id(self, column_id):
        return Column.objects.get(pk=column_id)

    @store_operation(ColumnNotFound)
    def find_by_board(self, board_id):
        return list(Column.objects.filter(board_id=board_id).order_by('ordinal'))

    @store_operation(ColumnNotFound, ColumnExists)
    def update_fields(self, column_id, **fields):
        if fields:
            with transaction.atomic():
                updated = Column.objects.filter(pk=column_id).update(**fields)
            if not updated:
                raise ColumnNotFound(column_id)
        return Column.objects.get(pk=column_id)

    @store_operation(ColumnNotFound)
    def delete(self, column_id):
        deleted, _ = Column.objects.filter(pk=column_id).delete()
        if not deleted:
            raise ColumnNotFound(column_id)

    @store_operation(ColumnNotFound)
    def delete_by_board(self, board_id):
        deleted, _ = Column.objects.filter(board_id=board_id).delete()
        return deleted

    @store_operation(ColumnNotFound)
    def shift_ordinals_after(self, board_id, ordinal):
        """Close the gap left at `ordinal`: every later sibling moves up by one"""
        return Column.objects.filter(board_id=board_id, ordinal__gt=ordinal).update(
            ordinal=F('ordinal') - 1
        )


class TaskStore:
    """Persistence of the Tasks collection"""

    @store_operation(TaskNotFound)
    def insert(self, task):
        with transaction.atomic():
            task.save(force_insert=True)
        return task

    @store_operation(TaskNotFound)
    def find_by_id(self, task_id):
        return Task.objects.get(pk=task_id)

    @store_operation(TaskNotFound)
    def find_by_columns(self, column_ids):
        return list(Task.objects.filter(column_id__in=list(column_ids)).order_by('created_at'))

    @store_operation(TaskNotFound)
    def update_fields(self, task_id, **fields):
        if fields:
            with transaction.atomic():
                updated = Task.objects.filter(pk=task_id).update(**fields)
            if not updated:
                raise TaskNotFound(task_id)
        return Task.objects.get(pk=task_id)

    @store_operation(TaskNotFound)
    def delete(self, task_id):
        deleted, _ = Task.objects.filter(pk=task_id).delete()
        if not deleted:
            raise TaskNotFound(task_id)

    @store_operation(TaskNotFound)
    def delete_by_columns(self, column_ids):
        deleted, _ = Task.objects.filter(column_id__in=list(column_ids)).delete()
        return deleted


class Storage:
    """Facade over the three stores plus the transaction boundary"""

    def __init__(self):
        self.boards = BoardStore()
        self.columns = ColumnStore()
        self.tasks = TaskStore()

    @contextmanager
    def atomic(self):
        """
        Group several store operations into one all-or-nothing unit

        Errors raised by the commit or the rollback themselves surface as
        StorageFailure; errors from the body propagate unchanged.
        """
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            logger.error(f"❌ Transaction failed: {exc}")
            raise StorageFailure(str(exc)) from exc


storage = Storage()
