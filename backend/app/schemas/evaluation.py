"""Evaluation schemas for API requests and responses"""

from typing import Optional, List
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict

from backend.app.models.evaluation import EvaluationResult
from backend.app.schemas.registration import Pagination


class EvaluationUpdate(BaseModel):
    """Partial update of a scoring sheet

    Scores outside a criterion's range are accepted here and clamped by the
    evaluation service.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    leadership: Optional[int] = None
    prior_experience: Optional[int] = Field(None, alias="priorExperience")
    discipline: Optional[int] = None
    academics: Optional[int] = None
    attitude: Optional[int] = None
    time_management: Optional[int] = Field(None, alias="timeManagement")
    result: Optional[str] = Field(None, description="'', 'selected' or 'notSelected'")


class EvaluationResponse(BaseModel):
    """Scoring sheet joined with the applicant it belongs to"""
    id: UUID
    registration_id: UUID
    full_name: str
    uid: str
    leadership: int
    prior_experience: int
    discipline: int
    academics: int
    attitude: int
    time_management: int
    total_score: int = Field(..., description="Sum of the six criteria, computed on read")
    result: EvaluationResult
    evaluated_at: datetime

    @classmethod
    def from_evaluation(cls, evaluation, registration) -> "EvaluationResponse":
        """Create response from Evaluation and Registration models"""
        return cls(
            id=evaluation.id,
            registration_id=evaluation.registration_id,
            full_name=registration.full_name,
            uid=registration.uid,
            leadership=evaluation.leadership,
            prior_experience=evaluation.prior_experience,
            discipline=evaluation.discipline,
            academics=evaluation.academics,
            attitude=evaluation.attitude,
            time_management=evaluation.time_management,
            total_score=evaluation.total_score,
            result=evaluation.result,
            evaluated_at=evaluation.evaluated_at
        )


class EvaluationListResponse(BaseModel):
    """Paginated evaluation list"""
    evaluations: List[EvaluationResponse]
    pagination: Pagination
