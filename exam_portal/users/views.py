"""
Exam Portal Authentication Views

Views:
- CustomTokenObtainPairView: JWT authentication returning the caller's role

Tokens are returned in the response body and additionally set as an HTTP-only
access cookie, which backend.custom_auth accepts when no Authorization header
is present.

Author: Exam Portal Development Team
Version: 1.0.0
"""

from django.conf import settings
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import CustomTokenObtainPairSerializer


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == 200:
            access = response.data.get("access")
            if access:
                response.set_cookie(
                    settings.JWT_ACCESS_COOKIE_NAME,
                    access,
                    httponly=True,
                    secure=not settings.DEBUG,
                    samesite="Lax",
                    path="/",
                    max_age=int(settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds()),
                )
        return response
