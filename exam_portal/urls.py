"""
Exam Portal URL Configuration

URL Structure:
- /api/token/: Authentication endpoints (JWT token management)
- /api/exams/: Exam authoring, submission, results and analytics

The exam ids are integer primary keys; ``bulk-delete/`` is listed before the
``<int:pk>/`` routes so it is never read as an exam id.

Author: Exam Portal Development Team
Version: 1.0.0
"""

from typing import List
from django.urls import path, include, URLPattern
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

# Import der Views
from .users import views as user_views
from .exams import views as exam_views

app_name = 'exam_portal'

# --- Examination System URL Patterns ---

exams_urlpatterns: List[URLPattern] = [
    # Exam authoring and listing
    path('', exam_views.ExamListCreateView.as_view(), name='exam-list'),
    path('bulk-delete/', exam_views.ExamBulkDeleteView.as_view(), name='exam-bulk-delete'),
    path('<int:pk>/', exam_views.ExamDetailView.as_view(), name='exam-detail'),

    # Exam execution
    path('<int:pk>/submit/', exam_views.ExamSubmitView.as_view(), name='exam-submit'),

    # Results and attempts
    path('<int:pk>/results/', exam_views.ExamResultsListView.as_view(), name='exam-results'),
    path('<int:pk>/results/<int:result_id>/', exam_views.ExamResultDetailView.as_view(), name='exam-result-detail'),
    path('<int:pk>/attempts/', exam_views.ExamAttemptsView.as_view(), name='exam-attempts'),

    # Tutor analytics
    path('<int:pk>/analytics/', exam_views.ExamAnalyticsView.as_view(), name='exam-analytics'),
]

# --- Main URL Configuration for the Exam Portal ---

urlpatterns: List[URLPattern] = [
    # Authentication endpoints (JWT token management)
    path('token/', user_views.CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    path('exams/', include((exams_urlpatterns, 'exams'))),
]
