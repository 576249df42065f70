"""
Exam Portal URL Configuration

Root URL routing: the Django admin and the versionless JSON API of the
exam_portal application under /api/.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("exam_portal.urls")),
]
