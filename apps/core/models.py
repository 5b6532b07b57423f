# apps/core/models.py

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone


class Methodology(models.TextChoices):
    """Board template kind"""

    KANBAN = 'kanban', 'Kanban'
    SIMPLE = 'simple', 'Simple'


class Board(models.Model):
    """
    Top-level container of the hierarchy

    column_count is denormalized and maintained only by the hierarchy
    service: it always equals the number of columns pointing at the board.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=100)
    methodology = models.CharField(max_length=10, choices=Methodology.choices)
    progress = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    favorite = models.BooleanField(default=False)
    column_count = models.PositiveIntegerField(default=0, editable=False)

    # === OWNERSHIP ===
    owner_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Opaque identity of the caller that created the board"
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'board'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                models.F('owner_id'), Lower('title'),
                name='board_unique_owner_title'
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.methodology})"

    def to_dict(self):
        return {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'methodology': self.methodology,
            'progress': self.progress,
            'favorite': self.favorite,
            'column_count': self.column_count,
            'owner_id': self.owner_id,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }


class Column(models.Model):
    """Ordered sub-container of a board"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    ordinal = models.PositiveIntegerField(help_text="1-based, dense within the board")
    board = models.ForeignKey(
        Board,
        on_delete=models.PROTECT,
        related_name='columns'
    )

    class Meta:
        db_table = 'board_column'
        ordering = ['board', 'ordinal']
        constraints = [
            models.UniqueConstraint(
                models.F('board'), Lower('name'),
                name='column_unique_board_name'
            ),
        ]
        indexes = [
            models.Index(fields=['board', 'ordinal'], name='column_board_ordinal_idx'),
        ]

    def __str__(self):
        return f"{self.ordinal}. {self.name}"

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'ordinal': self.ordinal,
            'board_id': str(self.board_id),
        }


class Task(models.Model):
    """Leaf work item, owned by exactly one column"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField()
    deadline = models.DateTimeField()
    in_calendar = models.BooleanField(default=False)
    column = models.ForeignKey(
        Column,
        on_delete=models.PROTECT,
        related_name='tasks'
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = 'task'
        ordering = ['created_at']

    def __str__(self):
        return self.title

    def is_overdue(self):
        """Deadline already passed"""
        return self.deadline <= timezone.now()

    def to_dict(self):
        return {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'deadline': self.deadline.isoformat(),
            'in_calendar': self.in_calendar,
            'column_id': str(self.column_id),
        }
