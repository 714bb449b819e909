"""Database models"""

from backend.app.models.base import TimestampMixin
from backend.app.models.admin import Admin
from backend.app.models.registration import Registration, RegistrationStatus
from backend.app.models.evaluation import Evaluation, EvaluationResult, SCORE_CRITERIA

__all__ = [
    "TimestampMixin",
    "Admin",
    "Registration",
    "RegistrationStatus",
    "Evaluation",
    "EvaluationResult",
    "SCORE_CRITERIA",
]
