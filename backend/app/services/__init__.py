"""Business logic services"""

from backend.app.services.auth_service import AuthService, auth_service
from backend.app.services.file_intake import FileIntake
from backend.app.services.registration_service import RegistrationService
from backend.app.services.evaluation_service import EvaluationService
from backend.app.services.notification_service import NotificationService, notification_service
from backend.app.services.email_service import EmailService

__all__ = [
    'AuthService',
    'auth_service',
    'FileIntake',
    'RegistrationService',
    'EvaluationService',
    'NotificationService',
    'notification_service',
    'EmailService',
]
