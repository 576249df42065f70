from django.conf import settings
from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework import status

from ..users.identity import identity_from_user
from ..users.models import Profile, Role
from .factories import PASSWORD, create_user

"""
    Tests für die Token-Ausgabe (Rolle im Token), den Header- und Cookie-Login
    sowie die automatische Profilanlage.
"""


class TokenTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.tutor = create_user("tutor", Role.TUTOR)

    def obtain(self):
        return self.client.post(
            "/api/token/",
            {"username": "tutor", "password": PASSWORD},
            content_type="application/json",
        )

    def test_token_contains_role(self):
        response = self.obtain()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["role"], Role.TUTOR)
        self.assertEqual(body["userId"], self.tutor.pk)
        self.assertIn("access", body)
        self.assertIn("refresh", body)
        self.assertIn(settings.JWT_ACCESS_COOKIE_NAME, response.cookies)

    def test_wrong_password(self):
        response = self.client.post(
            "/api/token/",
            {"username": "tutor", "password": "falsch"},
            content_type="application/json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bearer_header(self):
        access = self.obtain().json()["access"]
        self.client.cookies.clear()
        response = self.client.get("/api/exams/", HTTP_AUTHORIZATION=f"Bearer {access}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_cookie_fallback(self):
        self.obtain()
        response = self.client.get("/api/exams/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_refresh(self):
        refresh = self.obtain().json()["refresh"]
        response = self.client.post(
            "/api/token/refresh/", {"refresh": refresh}, content_type="application/json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.json())


class ProfileTests(TestCase):
    def test_profile_created_with_student_role(self):
        user = User.objects.create_user(username="neu", password=PASSWORD)
        self.assertEqual(user.profile.role, Role.STUDENT)
        self.assertFalse(user.profile.is_tutor)

    def test_identity_recreates_missing_profile(self):
        user = create_user("student")
        Profile.objects.filter(user=user).delete()
        user = User.objects.get(pk=user.pk)

        identity = identity_from_user(user)
        self.assertEqual(identity.id, user.pk)
        self.assertEqual(identity.role, Role.STUDENT)
        self.assertTrue(Profile.objects.filter(user=user).exists())
