"""Registration repository for database operations"""

from typing import List, Optional, Dict, Any, Tuple
from uuid import UUID
from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.registration import Registration, RegistrationStatus
from backend.app.core.exceptions import ConflictException
from backend.app.core.logging import get_logger

logger = get_logger(__name__)


class RegistrationRepository:
    """Repository for registration database operations"""

    def __init__(self, session: AsyncSession):
        """
        Initialize repository

        Args:
            session: Database session
        """
        self.session = session

    async def create(self, registration_data: Dict[str, Any]) -> Registration:
        """
        Create a new registration

        The unique constraints on ``uid`` and ``email`` are the final
        authority: a submission that passed the duplicate check but lost the
        insert race surfaces here as ConflictException.

        Args:
            registration_data: Dictionary with registration columns

        Returns:
            Created registration

        Raises:
            ConflictException: If ``uid`` or ``email`` is already taken
        """
        registration = Registration(**registration_data)
        self.session.add(registration)

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            field = await self.find_duplicate(
                registration_data.get("uid"), registration_data.get("email")
            ) or self._field_from_error(e)
            logger.warning(f"Registration insert lost uniqueness race on {field}")
            raise ConflictException(
                f"A registration with this {field} already exists",
                field=field
            ) from e

        await self.session.refresh(registration)

        logger.info(f"Created registration: {registration.id}", extra={"registration_id": str(registration.id)})
        return registration

    @staticmethod
    def _field_from_error(error: IntegrityError) -> str:
        message = str(error.orig).lower()
        return "email" if "email" in message else "uid"

    async def get_by_id(self, registration_id: UUID) -> Optional[Registration]:
        """
        Get registration by ID

        Args:
            registration_id: Registration UUID

        Returns:
            Registration if found, None otherwise
        """
        result = await self.session.execute(
            select(Registration).where(Registration.id == registration_id)
        )
        return result.scalar_one_or_none()

    async def find_duplicate(self, uid: Optional[str], email: Optional[str]) -> Optional[str]:
        """
        Look for an existing registration sharing ``uid`` or ``email``

        Returns:
            ``"uid"`` or ``"email"`` naming the colliding field, None if free
        """
        conditions = []
        if uid:
            conditions.append(Registration.uid == uid)
        if email:
            conditions.append(Registration.email == email)
        if not conditions:
            return None

        result = await self.session.execute(
            select(Registration.uid, Registration.email).where(or_(*conditions)).limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return "uid" if row.uid == uid else "email"

    async def update_status(
        self,
        registration_id: UUID,
        status: RegistrationStatus
    ) -> Optional[Registration]:
        """
        Update the status of a registration

        Only ``status`` is written; ``submitted_at`` keeps its original value.

        Returns:
            Updated registration if found, None otherwise
        """
        registration = await self.get_by_id(registration_id)

        if not registration:
            return None

        registration.status = status
        await self.session.commit()
        await self.session.refresh(registration)

        logger.info(f"Registration {registration_id} status set to {status.value}")
        return registration

    async def list_filtered(
        self,
        status: Optional[RegistrationStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Registration], int]:
        """
        List registrations newest first, filtered by status and name/uid search

        Returns:
            Tuple of (page of registrations, total matching count)
        """
        conditions = []

        if status is not None:
            conditions.append(Registration.status == status)

        if search:
            search_pattern = f"%{search}%"
            conditions.append(
                or_(
                    Registration.full_name.ilike(search_pattern),
                    Registration.uid.ilike(search_pattern)
                )
            )

        stmt = select(Registration)
        count_stmt = select(func.count()).select_from(Registration)
        if conditions:
            stmt = stmt.where(*conditions)
            count_stmt = count_stmt.where(*conditions)

        stmt = stmt.order_by(Registration.submitted_at.desc()).offset(skip).limit(limit)

        result = await self.session.execute(stmt)
        registrations = list(result.scalars().all())

        total = (await self.session.execute(count_stmt)).scalar() or 0

        logger.debug(f"Listed {len(registrations)} of {total} registrations")
        return registrations, total

    async def list_by_status(
        self,
        status: RegistrationStatus,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Registration], int]:
        return await self.list_filtered(status=status, skip=skip, limit=limit)

    async def count_by_status(self) -> Dict[str, int]:
        """
        Count registrations per status

        Returns:
            Mapping with ``total`` and one key per status
        """
        result = await self.session.execute(
            select(Registration.status, func.count()).group_by(Registration.status)
        )
        counts = {status.value: 0 for status in RegistrationStatus}
        for status, count in result.all():
            counts[RegistrationStatus(status).value] = count

        counts["total"] = sum(counts.values())
        return counts
