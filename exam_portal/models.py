"""
Exam Portal Models Registry

This module serves as the central models registry for the Exam Portal application.
It imports and exposes all models from the logical submodules (users, exams)
so they are registered with Django's ORM under the single `exam_portal` app label.

Architecture:
- users/: Role-carrying user profiles
- exams/: Exams, questions, options and graded attempt results

Author: Exam Portal Development Team
Version: 1.0.0
"""

# Import all user-related models for registration with Django ORM
from .users.models import *

# Import all exam-related models for registration with Django ORM
from .exams.models import *
