from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import AccessDenied, NotFound
from ..repositories import ExamRepository, ResultRepository
from ..serializers import ExamResultDetailSerializer, ExamResultSerializer
from ..services.access_guard import check_access
from ..services.visibility import redact
from .mixins import ExamPortalViewMixin


class ExamResultsListView(ExamPortalViewMixin, APIView):
    """Tutoren sehen alle Versuche, Studierende nur ihre eigenen."""

    def get(self, request, pk):
        identity = self.get_identity(request)
        exam = ExamRepository().get_with_relations(pk)
        if identity.is_student and not exam.is_active:
            raise NotFound("Exam", pk)
        check_access(exam, identity)

        results = ResultRepository()
        if identity.is_tutor:
            queryset = results.for_exam(exam.pk)
        else:
            queryset = results.for_pair(exam.pk, identity.id)

        data = [
            redact(payload, exam, identity.role)
            for payload in ExamResultSerializer(queryset, many=True).data
        ]
        return Response(data, status=status.HTTP_200_OK)


class ExamResultDetailView(ExamPortalViewMixin, APIView):
    def get(self, request, pk, result_id):
        identity = self.get_identity(request)
        result = ResultRepository().get_with_relations(pk, result_id)

        if identity.is_student:
            if result.student_id != identity.id:
                raise AccessDenied("You can only view your own results")
            if not result.exam.is_active:
                raise NotFound("Exam", pk)
        else:
            check_access(result.exam, identity)

        payload = ExamResultDetailSerializer(result).data
        return Response(redact(payload, result.exam, identity.role), status=status.HTTP_200_OK)


class ExamAttemptsView(ExamPortalViewMixin, APIView):
    """Löscht Versuche: der Besitzer alle, Studierende nur die eigenen."""

    def delete(self, request, pk):
        identity = self.get_identity(request)
        exam = ExamRepository().get_with_relations(pk)
        if identity.is_student and not exam.is_active:
            raise NotFound("Exam", pk)
        check_access(exam, identity)

        student_id = identity.id if identity.is_student else None
        deleted = ResultRepository().clear(exam.pk, student_id)
        return Response(
            {
                "message": f"Successfully cleared {deleted} exam attempt(s)",
                "deletedCount": deleted,
            },
            status=status.HTTP_200_OK,
        )
