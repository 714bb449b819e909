"""Admin dashboard API endpoints for registrations"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from backend.app.core.config import settings
from backend.app.core.security import get_current_admin
from backend.app.models.admin import Admin
from backend.app.services.registration_service import RegistrationService
from backend.app.api.registrations import get_registration_service
from backend.app.schemas.registration import (
    RegistrationResponse, RegistrationListResponse, RegistrationStatistics,
    StatusUpdate, Pagination
)
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/registrations", response_model=RegistrationListResponse)
async def list_registrations(
    page: int = Query(1, description="Page number", ge=1),
    limit: int = Query(10, description="Page size", ge=1, le=100),
    status: Optional[str] = Query(None, description="pending, approved or rejected"),
    search: Optional[str] = Query(None, description="Match on name or UID"),
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """
    List registrations, newest first

    `search` matches anywhere in the applicant's name or UID, ignoring case.
    """
    registrations, total = await registration_service.list_registrations(
        page=page,
        limit=limit,
        status=status,
        search=search
    )

    return RegistrationListResponse(
        registrations=[
            RegistrationResponse.from_registration(r, settings.UPLOAD_URL_PREFIX)
            for r in registrations
        ],
        pagination=Pagination.build(page, limit, total)
    )


@router.get("/registrations/{registration_id}", response_model=RegistrationResponse)
async def get_registration(
    registration_id: UUID,
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """Get one registration with its document links"""
    registration = await registration_service.get_registration(registration_id)
    return RegistrationResponse.from_registration(registration, settings.UPLOAD_URL_PREFIX)


@router.put("/registrations/{registration_id}/status", response_model=RegistrationResponse)
async def update_registration_status(
    registration_id: UUID,
    update: StatusUpdate,
    current_admin: Admin = Depends(get_current_admin),
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """Approve, reject or reset a registration to pending"""
    registration = await registration_service.set_status(registration_id, update.status)

    logger.info(
        f"Registration status set to {registration.status.value} by {current_admin.username}",
        extra={"registration_id": str(registration_id)}
    )
    return RegistrationResponse.from_registration(registration, settings.UPLOAD_URL_PREFIX)


@router.get("/statistics", response_model=RegistrationStatistics)
async def get_statistics(
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """Registration counts per status"""
    return RegistrationStatistics(**await registration_service.get_statistics())
