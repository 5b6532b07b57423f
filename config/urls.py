# config/urls.py

from django.contrib import admin
from django.urls import path, include

from apps.board import views as board_views

urlpatterns = [
    # Admin (read-only inspection of the hierarchy)
    path('admin/', admin.site.urls),

    # JSON API
    path('api/', include('apps.board.urls')),

    # Liveness
    path('health/', board_views.health, name='health'),
]

# Admin titles
admin.site.site_header = 'Boardflow Admin'
admin.site.site_title = 'Boardflow'
admin.site.index_title = 'Board hierarchy'
