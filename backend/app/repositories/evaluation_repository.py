"""Evaluation repository for database operations"""

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.evaluation import Evaluation
from backend.app.core.logging import get_logger

logger = get_logger(__name__)


class EvaluationRepository:
    """Repository for evaluation-related database operations"""

    def __init__(self, db: AsyncSession):
        """
        Initialize evaluation repository

        Args:
            db: Database session
        """
        self.db = db

    async def get_by_registration_id(self, registration_id: UUID) -> Optional[Evaluation]:
        """
        Get the evaluation attached to a registration

        Args:
            registration_id: Registration UUID

        Returns:
            Evaluation if found, None otherwise
        """
        result = await self.db.execute(
            select(Evaluation).where(Evaluation.registration_id == registration_id)
        )
        return result.scalar_one_or_none()

    async def get_for_registrations(self, registration_ids: List[UUID]) -> Dict[UUID, Evaluation]:
        """Map registration id -> evaluation for the ids that have one"""
        if not registration_ids:
            return {}
        result = await self.db.execute(
            select(Evaluation).where(Evaluation.registration_id.in_(registration_ids))
        )
        return {evaluation.registration_id: evaluation for evaluation in result.scalars().all()}

    async def get_or_create(self, registration_id: UUID) -> Evaluation:
        """
        Return the evaluation for a registration, inserting a zero-valued one
        if none exists

        The unique constraint on ``registration_id`` decides concurrent
        creations; the loser re-reads the winner's row. The insert runs in a
        savepoint so a lost race leaves the rest of the session loaded.

        Args:
            registration_id: Registration UUID

        Returns:
            Existing or newly created evaluation
        """
        existing = await self.get_by_registration_id(registration_id)
        if existing:
            return existing

        evaluation = Evaluation(registration_id=registration_id)

        try:
            async with self.db.begin_nested():
                self.db.add(evaluation)
        except IntegrityError:
            existing = await self.get_by_registration_id(registration_id)
            if existing is None:
                raise
            logger.debug(f"Evaluation for {registration_id} created concurrently; reusing it")
            return existing

        await self.db.commit()
        await self.db.refresh(evaluation)

        logger.info(
            f"Created evaluation {evaluation.id} for registration {registration_id}",
            extra={"registration_id": str(registration_id)}
        )
        return evaluation

    async def update_fields(self, evaluation: Evaluation, updates: Dict[str, Any]) -> Evaluation:
        """
        Apply column updates to an evaluation and stamp ``evaluated_at``

        Args:
            evaluation: Evaluation to update
            updates: Dictionary with column updates

        Returns:
            Updated evaluation
        """
        for key, value in updates.items():
            setattr(evaluation, key, value)
        evaluation.evaluated_at = datetime.now(timezone.utc)

        await self.db.commit()
        await self.db.refresh(evaluation)

        logger.info(f"Updated evaluation: {evaluation.id}")
        return evaluation
