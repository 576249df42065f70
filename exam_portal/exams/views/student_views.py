from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..serializers import SubmissionSummarySerializer
from ..services.submission import SubmissionService
from .mixins import ExamPortalViewMixin


class ExamSubmitView(ExamPortalViewMixin, APIView):
    """Abgabe einer Prüfung durch einen zugewiesenen Studierenden."""

    def post(self, request, pk):
        identity = self.get_identity(request)
        result = SubmissionService().submit(pk, identity, request.data)
        return Response(
            {
                "message": "Exam submitted successfully",
                "result": SubmissionSummarySerializer(result).data,
            },
            status=status.HTTP_200_OK,
        )
