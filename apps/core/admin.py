# apps/core/admin.py

from django.contrib import admin
from django.utils.html import format_html

from .models import Board, Column, Task


class ReadOnlyMixin:
    """
    Inspection only: every mutation goes through the hierarchy service,
    which keeps ordinals and column_count consistent
    """

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ReadOnlyAdmin(ReadOnlyMixin, admin.ModelAdmin):
    pass


class ColumnInline(ReadOnlyMixin, admin.TabularInline):
    """Columns of a board, in ordinal order"""
    model = Column
    extra = 0
    fields = ['ordinal', 'name']
    ordering = ['ordinal']


@admin.register(Board)
class BoardAdmin(ReadOnlyAdmin):
    """Admin for boards"""

    list_display = [
        'title', 'owner_id', 'methodology', 'category',
        'columns_badge', 'progress', 'favorite', 'updated_at'
    ]
    list_filter = ['methodology', 'favorite', 'created_at']
    search_fields = ['title', 'description', 'owner_id']
    readonly_fields = ['column_count', 'created_at', 'updated_at']
    inlines = [ColumnInline]

    fieldsets = (
        ('Board', {
            'fields': ('title', 'description', 'category', 'methodology')
        }),
        ('State', {
            'fields': ('progress', 'favorite', 'column_count', 'owner_id')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def columns_badge(self, obj):
        """column_count, in red when it disagrees with the live columns"""
        live = obj.columns.count()
        if live != obj.column_count:
            return format_html(
                '<span style="color: red; font-weight: bold;">{} (live {})</span>',
                obj.column_count, live
            )
        return obj.column_count

    columns_badge.short_description = 'Columns'


class TaskInline(ReadOnlyMixin, admin.TabularInline):
    """Tasks of a column"""
    model = Task
    extra = 0
    fields = ['title', 'deadline', 'in_calendar']


@admin.register(Column)
class ColumnAdmin(ReadOnlyAdmin):
    """Admin for columns"""

    list_display = ['name', 'board', 'ordinal', 'tasks_count']
    list_filter = ['board']
    search_fields = ['name', 'board__title']
    ordering = ['board', 'ordinal']
    inlines = [TaskInline]

    def tasks_count(self, obj):
        return obj.tasks.count()

    tasks_count.short_description = 'Tasks'


@admin.register(Task)
class TaskAdmin(ReadOnlyAdmin):
    """Admin for tasks"""

    list_display = ['title', 'column', 'deadline', 'in_calendar', 'overdue_badge']
    list_filter = ['in_calendar', 'deadline']
    search_fields = ['title', 'description']
    date_hierarchy = 'deadline'

    def overdue_badge(self, obj):
        if obj.is_overdue():
            return format_html('<span style="color: #EF4444;">{}</span>', 'overdue')
        return ''

    overdue_badge.short_description = 'Status'
