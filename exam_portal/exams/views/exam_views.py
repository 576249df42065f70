import random

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import AccessDenied, NotFound
from ..repositories import ExamRepository
from ..serializers import ExamSerializer, ExamWithWindowSerializer
from ..services.access_guard import check_access
from ..services.visibility import strip_answer_key
from ..validation import validate_exam_payload
from .mixins import ExamPortalViewMixin


class ExamListCreateView(ExamPortalViewMixin, APIView):
    """
    GET: Prüfungen des Tutors bzw. dem Studierenden zugewiesene Prüfungen
    POST: Neue Prüfung anlegen (nur Tutoren)
    """

    def get(self, request):
        identity = self.get_identity(request)
        exams = ExamRepository().list_for(identity)
        data = ExamSerializer(exams, many=True).data
        if identity.is_student:
            data = [strip_answer_key(exam) for exam in data]
        return Response(data, status=status.HTTP_200_OK)

    def post(self, request):
        identity = self.get_identity(request)
        if not identity.is_tutor:
            raise AccessDenied("Only tutors can create exams")

        payload = validate_exam_payload(request.data)
        exam = ExamRepository().create(identity.id, payload)
        return Response(ExamSerializer(exam).data, status=status.HTTP_201_CREATED)


class ExamDetailView(ExamPortalViewMixin, APIView):
    """
    GET: Prüfung inklusive Zeitfenster-Status
    DELETE: Prüfung samt Ergebnissen löschen (nur Besitzer)
    """

    def get(self, request, pk):
        identity = self.get_identity(request)
        exam = ExamRepository().get_with_relations(pk)
        if identity.is_student and not exam.is_active:
            raise NotFound("Exam", pk)
        check_access(exam, identity)

        data = ExamWithWindowSerializer(exam, context={"now": timezone.now()}).data
        if identity.is_student:
            data = strip_answer_key(data)
            if exam.randomize_questions:
                random.shuffle(data["questions"])
        return Response(data, status=status.HTTP_200_OK)

    def delete(self, request, pk):
        identity = self.get_identity(request)
        if not identity.is_tutor:
            raise AccessDenied("Access denied. Only tutors can delete exams.")

        repository = ExamRepository()
        exam = repository.get_with_relations(pk)
        check_access(exam, identity)

        title = exam.title
        deleted_results = repository.delete(exam)
        return Response(
            {
                "message": "Exam deleted successfully",
                "deletedResults": deleted_results,
                "examTitle": title,
            },
            status=status.HTTP_200_OK,
        )
