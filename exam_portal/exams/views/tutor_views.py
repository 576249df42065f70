from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import AccessDenied, ExamValidationError
from ..repositories import ExamRepository, ResultRepository
from ..serializers import ExamResultSerializer
from ..services.access_guard import check_access
from ..services.analytics import exam_analytics
from .mixins import ExamPortalViewMixin


class ExamAnalyticsView(ExamPortalViewMixin, APIView):
    """Auswertung einer Prüfung für den Besitzer."""

    def get(self, request, pk):
        identity = self.get_identity(request)
        if not identity.is_tutor:
            raise AccessDenied("Access denied. Only tutors can view analytics.")

        exam = ExamRepository().get_with_relations(pk)
        check_access(exam, identity)

        results = list(ResultRepository().for_exam(exam.pk))
        analytics = exam_analytics(exam, results)
        for key in ("topScorer", "lowestScorer"):
            if analytics[key] is not None:
                analytics[key] = ExamResultSerializer(analytics[key]).data
        return Response(analytics, status=status.HTTP_200_OK)


class ExamBulkDeleteView(ExamPortalViewMixin, APIView):
    def post(self, request):
        identity = self.get_identity(request)
        if not identity.is_tutor:
            raise AccessDenied("Access denied. Only tutors can delete exams.")

        exam_ids = request.data.get("examIds") if hasattr(request.data, "get") else None
        if (
            not isinstance(exam_ids, list)
            or not exam_ids
            or any(isinstance(i, bool) or not isinstance(i, int) for i in exam_ids)
        ):
            raise ExamValidationError("Please provide valid exam IDs to delete", field="examIds")

        summary = ExamRepository().bulk_delete(identity.id, exam_ids)
        return Response(
            {"message": f"Successfully deleted {summary['deletedExams']} exams", **summary},
            status=status.HTTP_200_OK,
        )
