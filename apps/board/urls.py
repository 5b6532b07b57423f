# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('boards/', views.boards, name='boards'),
    path('boards/<str:board_id>/', views.board_detail, name='board_detail'),

    # Columns
    path('boards/<str:board_id>/columns/', views.board_columns, name='board_columns'),
    path('columns/<str:column_id>/', views.column_detail, name='column_detail'),

    # Tasks
    path('columns/<str:column_id>/tasks/', views.column_tasks, name='column_tasks'),
    path('tasks/<str:task_id>/', views.task_detail, name='task_detail'),
    path('tasks/<str:task_id>/move/', views.move_task, name='move_task'),
]
