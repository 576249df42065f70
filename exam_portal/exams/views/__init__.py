"""
Exam Portal Views Package

Enthält alle API-Views des Prüfungsportals:
- Prüfungen anlegen, auflisten, anzeigen und löschen
- Abgabe durch Studierende
- Ergebnisse und Versuche
- Tutor-Auswertungen und Massenlöschung

Author: Exam Portal Development Team
Version: 1.0.0
"""

from .exam_views import *
from .student_views import *
from .result_views import *
from .tutor_views import *
