"""Evaluation service for scoring approved applicants"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from backend.app.repositories.evaluation_repository import EvaluationRepository
from backend.app.repositories.registration_repository import RegistrationRepository
from backend.app.models.evaluation import Evaluation, EvaluationResult, SCORE_CRITERIA
from backend.app.models.registration import Registration, RegistrationStatus
from backend.app.core.exceptions import ValidationException, NotFoundException
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

# Wire names used by the dashboard -> model attribute
CRITERIA_ALIASES = {
    "leadership": "leadership",
    "priorExperience": "prior_experience",
    "discipline": "discipline",
    "academics": "academics",
    "attitude": "attitude",
    "timeManagement": "time_management",
}


def resolve_criterion(field: str) -> str:
    """
    Map a camelCase or snake_case criterion name to its model attribute

    Raises:
        ValidationException: If the name is not one of the six criteria
    """
    if field in SCORE_CRITERIA:
        return field
    if field in CRITERIA_ALIASES:
        return CRITERIA_ALIASES[field]
    raise ValidationException(
        f"Unknown scoring field: {field}",
        details={"field": field, "allowed": list(CRITERIA_ALIASES)}
    )


def clamp_score(field: str, value: Any) -> int:
    """
    Bound a score into ``[0, max]`` for its criterion

    Out-of-range numbers are corrected, not rejected; only values that are
    not integers at all fail.

    Raises:
        ValidationException: If ``value`` is not an integer
    """
    attribute = resolve_criterion(field)
    if isinstance(value, bool):
        raise ValidationException(f"Score for {field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationException(f"Score for {field} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationException(f"Score for {field} must be an integer")

    return max(0, min(number, SCORE_CRITERIA[attribute]))


def parse_result(value: Any) -> EvaluationResult:
    """Convert a raw result tag or raise ValidationException"""
    try:
        return EvaluationResult(value)
    except ValueError:
        raise ValidationException(
            "Invalid result value",
            details={"result": value, "allowed": [r.value for r in EvaluationResult]}
        )


class EvaluationService:
    """Service for evaluation reads and score updates"""

    def __init__(
        self,
        evaluation_repository: EvaluationRepository,
        registration_repository: RegistrationRepository
    ):
        """
        Initialize evaluation service

        Args:
            evaluation_repository: Evaluation repository
            registration_repository: Registration repository
        """
        self.evaluation_repo = evaluation_repository
        self.registration_repo = registration_repository

    async def get_approved_registration(self, registration_id: UUID) -> Registration:
        """
        Raises:
            NotFoundException: If the registration is missing or not approved
        """
        registration = await self.registration_repo.get_by_id(registration_id)
        if not registration or registration.status != RegistrationStatus.APPROVED:
            logger.info(f"Registration {registration_id} not found or not approved")
            raise NotFoundException("Approved registration not found")
        return registration

    async def get_or_create(self, registration_id: UUID) -> Tuple[Evaluation, Registration]:
        """
        Return the evaluation of an approved applicant, creating a
        zero-valued one on first access

        Returns:
            Tuple of (evaluation, registration)

        Raises:
            NotFoundException: If the registration is missing or not approved
        """
        registration = await self.get_approved_registration(registration_id)
        evaluation = await self.evaluation_repo.get_or_create(registration_id)
        return evaluation, registration

    async def update_score(self, registration_id: UUID, field: str, value: Any) -> Evaluation:
        """
        Store one criterion score, clamped into its range

        Raises:
            ValidationException: On an unknown field or non-integer value
            NotFoundException: If the registration is missing or not approved
        """
        evaluation, _ = await self.apply_update(registration_id, {field: value})
        return evaluation

    async def set_result(self, registration_id: UUID, value: Any) -> Evaluation:
        """
        Store the final result tag

        Raises:
            ValidationException: If ``value`` is not '', selected or notSelected
            NotFoundException: If the registration is missing or not approved
        """
        evaluation, _ = await self.apply_update(registration_id, {"result": value})
        return evaluation

    @staticmethod
    def build_updates(payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate a partial update and convert it to column values

        Raises:
            ValidationException: If the payload is empty or has a bad entry
        """
        if not payload:
            raise ValidationException("No evaluation fields to update")

        updates: Dict[str, Any] = {}
        for field, value in payload.items():
            if field == "result":
                updates["result"] = parse_result(value)
            else:
                updates[resolve_criterion(field)] = clamp_score(field, value)
        return updates

    async def apply_update(
        self,
        registration_id: UUID,
        payload: Dict[str, Any]
    ) -> Tuple[Evaluation, Registration]:
        """
        Upsert several criteria and/or the result in one write

        The payload is validated before the registration is looked up, so a
        bad payload never creates an evaluation.

        Returns:
            Tuple of (updated evaluation, registration)
        """
        updates = self.build_updates(payload)

        evaluation, registration = await self.get_or_create(registration_id)
        evaluation = await self.evaluation_repo.update_fields(evaluation, updates)

        logger.info(
            f"Evaluation updated for {registration.uid}: {sorted(updates)} (total {evaluation.total_score})",
            extra={"registration_id": str(registration_id)}
        )
        return evaluation, registration

    async def list_evaluations(
        self,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Tuple[Evaluation, Registration]], int]:
        """
        Page through approved applicants with their evaluations, creating
        the missing ones

        Returns:
            Tuple of ([(evaluation, registration)], total approved)
        """
        registrations, total = await self.registration_repo.list_by_status(
            RegistrationStatus.APPROVED,
            skip=(page - 1) * limit,
            limit=limit
        )

        existing = await self.evaluation_repo.get_for_registrations([r.id for r in registrations])

        rows: List[Tuple[Evaluation, Registration]] = []
        for registration in registrations:
            evaluation: Optional[Evaluation] = existing.get(registration.id)
            if evaluation is None:
                evaluation = await self.evaluation_repo.get_or_create(registration.id)
            rows.append((evaluation, registration))

        logger.debug(f"Listed {len(rows)} of {total} evaluations")
        return rows, total
