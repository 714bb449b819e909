"""Data access layer"""

from backend.app.repositories.admin_repository import AdminRepository
from backend.app.repositories.registration_repository import RegistrationRepository
from backend.app.repositories.evaluation_repository import EvaluationRepository

__all__ = ['AdminRepository', 'RegistrationRepository', 'EvaluationRepository']
