"""
Explicit caller identity for exam operations.

Every service call receives an ``Identity`` instead of reading the request
user ad hoc, so access checks stay pure functions of their arguments.
"""

from dataclasses import dataclass

from .models import Profile, Role


@dataclass(frozen=True)
class Identity:
    id: int
    role: str

    @property
    def is_tutor(self) -> bool:
        return self.role == Role.TUTOR

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


def identity_from_user(user) -> Identity:
    """Build the Identity for an authenticated Django user, creating a missing profile."""
    try:
        role = user.profile.role
    except Profile.DoesNotExist:
        profile, _ = Profile.objects.get_or_create(user=user)
        role = profile.role
    return Identity(id=user.pk, role=role)
