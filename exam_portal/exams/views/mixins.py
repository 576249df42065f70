import logging

from rest_framework.response import Response

from ...users.identity import Identity, identity_from_user
from ..exceptions import ExamPortalException, StorageFailure

logger = logging.getLogger(__name__)


class ExamPortalViewMixin:
    """
    Basis-Mixin für alle Exam-Portal Views.

    Wandelt ExamPortalException in JSON-Antworten {message, error_code, details}
    mit dem passenden HTTP-Status um. Alle anderen Fehler behandelt DRF.
    """

    def get_identity(self, request) -> Identity:
        return identity_from_user(request.user)

    def handle_exception(self, exc):
        if isinstance(exc, ExamPortalException):
            if isinstance(exc, StorageFailure):
                logger.error(f"{exc.operation} failed on {self.request.method} {self.request.path}")
            else:
                logger.info(
                    f"{exc.error_code} on {self.request.method} {self.request.path}: {exc.message}"
                )
            return Response(exc.to_dict(), status=exc.status_code)
        return super().handle_exception(exc)
