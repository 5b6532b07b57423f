# apps/board/views.py

import json
import logging
import uuid
from functools import wraps

from django.db import connection
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.exceptions import (
    BoardflowError, InvalidInput, NotFound, AlreadyExists, StorageFailure,
    BoardNotFound, ColumnNotFound, DestinationColumnNotFound, TaskNotFound,
)
from apps.core.hierarchy_service import hierarchy_service
from apps.core.storage import storage

from .forms import (
    BoardCreateForm, BoardUpdateForm,
    ColumnCreateForm, ColumnUpdateForm,
    TaskCreateForm, TaskUpdateForm, TaskMoveForm,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (InvalidInput, 400),
    (NotFound, 404),
    (AlreadyExists, 409),
    (StorageFailure, 500),
)


def error_status(error):
    for error_class, status in ERROR_STATUS:
        if isinstance(error, error_class):
            return status
    return 500


def api_endpoint(view_func):
    """
    JSON API view: CSRF exempt, BoardflowError rendered as an error body

    Body: {"success": false, "error": ..., "code": ...} plus `partial`/`step`
    for cascade failures.
    """

    @csrf_exempt
    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except BoardflowError as e:
            status = error_status(e)
            if status >= 500:
                logger.error(f"❌ {request.method} {request.path} failed: {e.message}")
            body = {'success': False}
            body.update(e.to_dict())
            return JsonResponse(body, status=status)

    return wrapped_view


# === Request helpers ===

def _json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput("request body must be valid JSON")
    if not isinstance(data, dict):
        raise InvalidInput("request body must be a JSON object")
    return data


def _bound_form(form_class, request):
    form = form_class(_json_body(request))
    if not form.is_valid():
        errors = form.errors.get('__all__') or next(iter(form.errors.values()))
        raise InvalidInput(errors[0])
    return form


def _uuid(value, entity):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidInput(f"invalid {entity} ID")


# === Ownership ===
# Other owners' entities are reported as missing, never as forbidden.

def _owned_board(request, board_id):
    board = storage.boards.find_by_id(_uuid(board_id, 'board'))
    if board.owner_id != request.owner_id:
        raise BoardNotFound(board.id)
    return board


def _owned_column(request, column_id, not_found=ColumnNotFound):
    try:
        column = storage.columns.find_by_id(_uuid(column_id, 'column'))
    except ColumnNotFound as e:
        raise not_found(column_id) from e
    if storage.boards.find_by_id(column.board_id).owner_id != request.owner_id:
        raise not_found(column.id)
    return column


def _owned_task(request, task_id):
    task = storage.tasks.find_by_id(_uuid(task_id, 'task'))
    column = storage.columns.find_by_id(task.column_id)
    if storage.boards.find_by_id(column.board_id).owner_id != request.owner_id:
        raise TaskNotFound(task.id)
    return task


# === Boards ===

@api_endpoint
@require_http_methods(["GET", "POST"])
def boards(request):
    """GET: the caller's boards, POST: create a board with its preset columns"""
    if request.method == 'GET':
        owned = hierarchy_service.list_boards(request.owner_id)
        return JsonResponse({
            'success': True,
            'boards': [board.to_dict() for board in owned],
        })

    form = _bound_form(BoardCreateForm, request)
    view = hierarchy_service.create_board(owner_id=request.owner_id, **form.cleaned_data)
    return JsonResponse({'success': True, 'board': view.to_dict()}, status=201)


@api_endpoint
@require_http_methods(["GET", "PATCH", "DELETE"])
def board_detail(request, board_id):
    board = _owned_board(request, board_id)

    if request.method == 'GET':
        view = hierarchy_service.get_board_info(board.id)
        return JsonResponse({'success': True, 'board': view.to_dict()})

    if request.method == 'PATCH':
        form = _bound_form(BoardUpdateForm, request)
        board = hierarchy_service.update_board(board.id, **form.changes())
        return JsonResponse({'success': True, 'board': board.to_dict()})

    hierarchy_service.delete_board(board.id)
    return JsonResponse({'success': True})


# === Columns ===

@api_endpoint
@require_POST
def board_columns(request, board_id):
    board = _owned_board(request, board_id)
    form = _bound_form(ColumnCreateForm, request)
    column = hierarchy_service.create_column(board.id, form.cleaned_data['name'])
    return JsonResponse({'success': True, 'column': column.to_dict()}, status=201)


@api_endpoint
@require_http_methods(["PATCH", "DELETE"])
def column_detail(request, column_id):
    column = _owned_column(request, column_id)

    if request.method == 'PATCH':
        form = _bound_form(ColumnUpdateForm, request)
        column = hierarchy_service.update_column(column.id, **form.changes())
        return JsonResponse({'success': True, 'column': column.to_dict()})

    hierarchy_service.delete_column(column.id)
    return JsonResponse({'success': True})


# === Tasks ===

@api_endpoint
@require_POST
def column_tasks(request, column_id):
    column = _owned_column(request, column_id)
    form = _bound_form(TaskCreateForm, request)
    task = hierarchy_service.create_task(
        column_id=column.id,
        owner_id=request.owner_id,
        **form.cleaned_data
    )
    return JsonResponse({'success': True, 'task': task.to_dict()}, status=201)


@api_endpoint
@require_http_methods(["PATCH", "DELETE"])
def task_detail(request, task_id):
    task = _owned_task(request, task_id)

    if request.method == 'PATCH':
        form = _bound_form(TaskUpdateForm, request)
        task = hierarchy_service.update_task(task.id, **form.changes())
        return JsonResponse({'success': True, 'task': task.to_dict()})

    hierarchy_service.delete_task(task.id)
    return JsonResponse({'success': True})


@api_endpoint
@require_POST
def move_task(request, task_id):
    task = _owned_task(request, task_id)
    form = _bound_form(TaskMoveForm, request)
    destination = _owned_column(
        request, form.cleaned_data['new_column_id'], not_found=DestinationColumnNotFound
    )
    task = hierarchy_service.move_task(task.id, destination.id)
    return JsonResponse({'success': True, 'task': task.to_dict()})


# === Health ===

@require_GET
def health(request):
    """Liveness plus a trivial database round-trip"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except Exception as e:
        logger.error(f"❌ Health check failed: {e}")
        return JsonResponse({'status': 'unavailable', 'database': 'down'}, status=503)

    return JsonResponse({'status': 'ok', 'database': 'up'})
