"""Main URL mapping configuration file."""

from django.contrib import admin
from django.urls import path

from server.apps.files.views import file_view, list_view
from server.apps.tokens.views import login_view, logout_view

admin.autodiscover()

urlpatterns = [
    # Auth:
    path('login', login_view, name='login'),
    path('logout', logout_view, name='logout'),

    # Files:
    path('file', file_view, name='file'),
    path('list', list_view, name='list'),

    # django-admin:
    path('admin/', admin.site.urls),
]
