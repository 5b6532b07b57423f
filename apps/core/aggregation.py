# apps/core/aggregation.py

"""
Aggregation Builder - assembles the nested board view from the flat collections
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import List

from .models import Board, Column, Task
from .storage import storage as default_storage


@dataclass
class ColumnView:
    column: Column
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self):
        data = self.column.to_dict()
        data['tasks'] = [task.to_dict() for task in self.tasks]
        return data


@dataclass
class BoardView:
    """A board with its columns (ordinal ascending) and each column's tasks"""

    board: Board
    columns: List[ColumnView] = field(default_factory=list)

    def to_dict(self):
        data = self.board.to_dict()
        data['columns'] = [column.to_dict() for column in self.columns]
        return data


def assemble(board, columns, tasks=()) -> BoardView:
    """
    Nest tasks under their column and columns under the board

    Tasks whose column is not among `columns` are ignored.
    """
    tasks_by_column = defaultdict(list)
    for task in tasks:
        tasks_by_column[task.column_id].append(task)

    ordered = sorted(columns, key=lambda column: column.ordinal)
    return BoardView(
        board=board,
        columns=[ColumnView(column, tasks_by_column.get(column.id, [])) for column in ordered]
    )


def build_board_view(board_id, storage=None) -> BoardView:
    """
    Fetch board, its columns and all of their tasks (three queries)

    Raises BoardNotFound when the board itself is absent; a board without
    columns or tasks simply yields empty lists.
    """
    storage = storage or default_storage
    board = storage.boards.find_by_id(board_id)
    columns = storage.columns.find_by_board(board.id)
    tasks = storage.tasks.find_by_columns([column.id for column in columns]) if columns else []
    return assemble(board, columns, tasks)
