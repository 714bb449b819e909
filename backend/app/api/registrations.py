"""Public registration API endpoints"""

from typing import Any, Dict, List, Tuple
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from backend.app.core.config import settings
from backend.app.core.database import get_db
from backend.app.core.security import get_current_admin
from backend.app.core.exceptions import ValidationException
from backend.app.models.admin import Admin
from backend.app.repositories.registration_repository import RegistrationRepository
from backend.app.services.file_intake import FileIntake
from backend.app.services.registration_service import RegistrationService
from backend.app.services.notification_service import NotificationService, notification_service
from backend.app.schemas.registration import (
    RegistrationResponse, RegistrationCreatedResponse, StatusUpdate
)
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Form names that may carry several values
MULTI_VALUE_FIELDS = ("terms",)


def get_file_intake() -> FileIntake:
    """Dependency to get the file intake"""
    return FileIntake()


def get_notification_service() -> NotificationService:
    """Dependency to get the notification service"""
    return notification_service


async def get_registration_service(
    db: AsyncSession = Depends(get_db),
    file_intake: FileIntake = Depends(get_file_intake)
) -> RegistrationService:
    """Dependency to get registration service"""
    return RegistrationService(RegistrationRepository(db), file_intake)


def split_form(form) -> Tuple[Dict[str, Any], List[Tuple[str, UploadFile]]]:
    """
    Separate a multipart form into text values and uploads

    Returns:
        Tuple of (text fields, (name, upload) pairs in posted order)
    """
    fields: Dict[str, Any] = {}
    files: List[Tuple[str, UploadFile]] = []

    for name in dict.fromkeys(form.keys()):
        values = form.getlist(name)
        uploads = [value for value in values if isinstance(value, UploadFile)]
        texts = [value for value in values if not isinstance(value, UploadFile)]

        files.extend((name, upload) for upload in uploads)
        if not texts:
            continue

        if name in MULTI_VALUE_FIELDS and len(texts) > 1:
            fields[name] = texts
        elif len(texts) > 1:
            raise ValidationException(
                "Each form field may only be sent once",
                details={"duplicate_fields": [name]}
            )
        else:
            fields[name] = texts[0]

    return fields, files


@router.post("", response_model=RegistrationCreatedResponse, status_code=status.HTTP_201_CREATED)
async def submit_registration(
    request: Request,
    background_tasks: BackgroundTasks,
    registration_service: RegistrationService = Depends(get_registration_service),
    notifier: NotificationService = Depends(get_notification_service)
):
    """
    Submit a registration

    Multipart form with the applicant's text fields and three documents
    (`resume`, `sop`, `recommendationLetter`; PDF, DOC or DOCX, 10MB each).
    `terms` is a JSON array of four `true` values, or four repeated values.

    The confirmation email is queued after the response is sent.

    ## Error Responses

    - **400 Bad Request**: Missing or malformed fields, wrong file type, duplicate uid or email
    - **413 Payload Too Large**: A file over 10MB or more than three files
    """
    async with request.form() as form:
        fields, files = split_form(form)
        registration = await registration_service.register(fields, files)

    background_tasks.add_task(
        notifier.send_registration_confirmation,
        registration.email,
        registration.full_name
    )

    return RegistrationCreatedResponse(
        data=RegistrationResponse.from_registration(registration, settings.UPLOAD_URL_PREFIX)
    )


@router.get("/{registration_id}", response_model=RegistrationResponse)
async def get_registration(
    registration_id: UUID,
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """Get one registration by ID"""
    registration = await registration_service.get_registration(registration_id)
    return RegistrationResponse.from_registration(registration, settings.UPLOAD_URL_PREFIX)


@router.patch("/{registration_id}/status", response_model=RegistrationResponse)
async def update_registration_status(
    registration_id: UUID,
    update: StatusUpdate,
    current_admin: Admin = Depends(get_current_admin),
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """
    Change a registration's status

    **Requirements:**
    - Admin token
    - `status` is one of `pending`, `approved`, `rejected`
    """
    registration = await registration_service.set_status(registration_id, update.status)

    logger.info(
        f"Registration status set to {registration.status.value} by {current_admin.username}",
        extra={"registration_id": str(registration_id)}
    )
    return RegistrationResponse.from_registration(registration, settings.UPLOAD_URL_PREFIX)
