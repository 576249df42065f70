"""
Exam Portal User Serializers

Serializers:
- CustomTokenObtainPairSerializer: JWT token enriched with the user's role
- UserReferenceSerializer: Compact user representation embedded in exams and results

Author: Exam Portal Development Team
Version: 1.0.0
"""

from typing import Dict, Any
from django.contrib.auth.models import User
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Profile


def _profile_for(user: User) -> Profile:
    try:
        return user.profile
    except Profile.DoesNotExist:
        profile, _ = Profile.objects.get_or_create(user=user)
        return profile


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer carrying the user's exam role.

    Token Payload Includes:
    - username: User identification
    - role: TUTOR or STUDENT
    """

    @classmethod
    def get_token(cls, user: User) -> RefreshToken:
        token = super().get_token(user)
        token["username"] = user.username
        token["role"] = _profile_for(user).role
        return token

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        data = super().validate(attrs)

        # Add user information to response for frontend convenience
        data.update({
            "userId": self.user.id,
            "username": self.user.username,
            "role": _profile_for(self.user).role,
        })
        return data


class UserReferenceSerializer(serializers.ModelSerializer):
    fullName = serializers.SerializerMethodField()
    studentId = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "fullName", "email", "studentId"]

    def get_fullName(self, obj: User) -> str:
        return obj.get_full_name() or obj.username

    def get_studentId(self, obj: User) -> str:
        return _profile_for(obj).student_id
