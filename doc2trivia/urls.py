"""
Root URL configuration for Doc2Trivia.

    /admin/  - Django admin
    /api/    - Trivia REST API (see trivia.urls)
"""

from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('trivia.urls')),
]
