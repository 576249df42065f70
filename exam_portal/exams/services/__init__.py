"""
Exam lifecycle services: access guard, attempt counter, scoring engine,
visibility filter, submission and analytics.

The modules are imported directly (``from .services.scoring import ...``);
this package does not re-export them so that serializers can import the
access guard without pulling in the repositories.
"""
