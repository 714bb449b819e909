"""Evaluation API endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.security import get_current_admin
from backend.app.repositories.evaluation_repository import EvaluationRepository
from backend.app.repositories.registration_repository import RegistrationRepository
from backend.app.services.evaluation_service import EvaluationService
from backend.app.schemas.evaluation import (
    EvaluationUpdate, EvaluationResponse, EvaluationListResponse
)
from backend.app.schemas.registration import Pagination
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


async def get_evaluation_service(db: AsyncSession = Depends(get_db)) -> EvaluationService:
    """Dependency to get evaluation service"""
    return EvaluationService(EvaluationRepository(db), RegistrationRepository(db))


@router.get("", response_model=EvaluationListResponse)
async def list_evaluations(
    page: int = Query(1, description="Page number", ge=1),
    limit: int = Query(10, description="Page size", ge=1, le=100),
    evaluation_service: EvaluationService = Depends(get_evaluation_service)
):
    """
    List approved applicants with their scoring sheets

    Applicants without a sheet get a zero-valued one on this read.
    """
    rows, total = await evaluation_service.list_evaluations(page=page, limit=limit)

    return EvaluationListResponse(
        evaluations=[
            EvaluationResponse.from_evaluation(evaluation, registration)
            for evaluation, registration in rows
        ],
        pagination=Pagination.build(page, limit, total)
    )


@router.get("/{registration_id}", response_model=EvaluationResponse)
async def get_evaluation(
    registration_id: UUID,
    evaluation_service: EvaluationService = Depends(get_evaluation_service)
):
    """
    Get the scoring sheet of an approved applicant

    **Returns:** 404 unless the registration exists and is approved
    """
    evaluation, registration = await evaluation_service.get_or_create(registration_id)
    return EvaluationResponse.from_evaluation(evaluation, registration)


@router.put("/{registration_id}", response_model=EvaluationResponse)
async def update_evaluation(
    registration_id: UUID,
    update: EvaluationUpdate,
    evaluation_service: EvaluationService = Depends(get_evaluation_service)
):
    """
    Update some criteria and/or the result

    Scores are clamped into each criterion's range: leadership and
    timeManagement 0-20, the others 0-15. `result` is `""`, `selected` or
    `notSelected`.
    """
    payload = update.model_dump(exclude_unset=True)
    evaluation, registration = await evaluation_service.apply_update(registration_id, payload)
    return EvaluationResponse.from_evaluation(evaluation, registration)
