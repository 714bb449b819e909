"""Registration service for the intake and status workflows"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from pydantic import ValidationError
from starlette.datastructures import UploadFile

from backend.app.repositories.registration_repository import RegistrationRepository
from backend.app.services.file_intake import FileIntake, REQUIRED_FILE_FIELDS
from backend.app.models.registration import (
    Registration, RegistrationStatus, OTHER_POSITION, FILE_FIELDS
)
from backend.app.schemas.registration import RegistrationCreate
from backend.app.core.exceptions import ValidationException, ConflictException, NotFoundException
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

# Form names every submission must fill in
REQUIRED_FORM_FIELDS = (
    "fullName",
    "uid",
    "cluster",
    "institute",
    "phoneNumber",
    "email",
    "leadershipRoles",
    "yourPosition",
    "nameOfEntity",
    "linkedinAccount",
    "terms",
)
OPTIONAL_FORM_FIELDS = ("otherPositionName",)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def parse_status(value: Any) -> RegistrationStatus:
    """Convert a raw status value or raise ValidationException"""
    try:
        return RegistrationStatus(value)
    except ValueError:
        raise ValidationException(
            "Invalid status value",
            details={"status": value, "allowed": [s.value for s in RegistrationStatus]}
        )


class RegistrationService:
    """Service for registration intake, lookup and status changes"""

    def __init__(
        self,
        registration_repository: RegistrationRepository,
        file_intake: FileIntake
    ):
        """
        Initialize registration service

        Args:
            registration_repository: Registration repository
            file_intake: File intake used for the three attachments
        """
        self.registration_repo = registration_repository
        self.file_intake = file_intake

    @staticmethod
    def required_fields(fields: Dict[str, Any]) -> List[str]:
        """Required form names for the submitted form variant"""
        required = list(REQUIRED_FORM_FIELDS)
        position = fields.get("yourPosition")
        if isinstance(position, str) and position.strip() == OTHER_POSITION:
            required.append("otherPositionName")
        return required

    def check_fields(self, fields: Dict[str, Any]) -> None:
        """
        Reject unknown form names and report every missing required one

        Raises:
            ValidationException: With ``unknown_fields`` or ``missing_fields``
        """
        known = set(REQUIRED_FORM_FIELDS) | set(OPTIONAL_FORM_FIELDS) | set(REQUIRED_FILE_FIELDS)
        unknown = sorted(name for name in fields if name not in known)
        if unknown:
            raise ValidationException(
                "Unexpected form fields",
                details={"unknown_fields": unknown}
            )

        missing = [name for name in self.required_fields(fields) if _is_blank(fields.get(name))]
        if missing:
            raise ValidationException(
                "Please fill in all required fields",
                details={"missing_fields": missing}
            )

    @staticmethod
    def parse_fields(fields: Dict[str, Any]) -> RegistrationCreate:
        """
        Validate field formats

        Raises:
            ValidationException: With one entry per failing field
        """
        text_fields = {name: value for name, value in fields.items() if name not in REQUIRED_FILE_FIELDS}
        try:
            return RegistrationCreate.model_validate(text_fields)
        except ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(part) for part in error["loc"]) or "form",
                    "message": error["msg"].removeprefix("Value error, "),
                }
                for error in e.errors()
            ]
            raise ValidationException(errors[0]["message"], details={"errors": errors}) from e

    async def register(
        self,
        fields: Dict[str, Any],
        files: Sequence[Tuple[str, UploadFile]]
    ) -> Registration:
        """
        Run the intake workflow for one submission

        Workflow:
        1. Required fields for the form variant
        2. Email, phone and terms formats
        3. Duplicate uid / email lookup
        4. File slots, count, type and size
        5. Store files, then insert the record as pending
        6. Remove stored files if anything after step 5 began fails

        Args:
            fields: Text form values keyed by form name
            files: (form name, upload) pairs

        Returns:
            Created registration

        Raises:
            ValidationException: On missing or malformed input
            ConflictException: If uid or email is already registered
            PayloadTooLargeException: If a file or the file count is too large
        """
        self.check_fields(fields)
        data = self.parse_fields(fields)

        duplicate = await self.registration_repo.find_duplicate(data.uid, data.email)
        if duplicate:
            logger.info(f"Rejected duplicate registration on {duplicate}")
            raise ConflictException(
                f"A registration with this {duplicate} already exists",
                field=duplicate
            )

        uploads = self.file_intake.validate(files)

        stored = await self.file_intake.store_all(uploads)
        try:
            registration_data = data.model_dump()
            for stored_file in stored:
                registration_data[FILE_FIELDS[stored_file.field_name]] = stored_file.filename
            registration_data["status"] = RegistrationStatus.PENDING
            registration_data["submitted_at"] = datetime.now(timezone.utc)

            registration = await self.registration_repo.create(registration_data)
        except BaseException:
            self.file_intake.cleanup(stored)
            raise

        logger.info(
            f"Registration submitted: {registration.uid}",
            extra={"registration_id": str(registration.id)}
        )
        return registration

    async def get_registration(self, registration_id: UUID) -> Registration:
        """
        Get registration by ID

        Raises:
            NotFoundException: If no registration matches
        """
        registration = await self.registration_repo.get_by_id(registration_id)
        if not registration:
            raise NotFoundException("Registration not found")
        return registration

    async def set_status(self, registration_id: UUID, status: Any) -> Registration:
        """
        Move a registration to pending, approved or rejected

        Only the status changes; evaluations are created lazily elsewhere.

        Raises:
            ValidationException: If ``status`` is not a known value
            NotFoundException: If no registration matches
        """
        new_status = parse_status(status)

        registration = await self.registration_repo.update_status(registration_id, new_status)
        if not registration:
            raise NotFoundException("Registration not found")

        return registration

    async def list_registrations(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> Tuple[List[Registration], int]:
        """
        Page through registrations newest first

        Returns:
            Tuple of (registrations on the page, total matching)
        """
        status_filter = parse_status(status) if status else None
        search = search.strip() if search else None

        return await self.registration_repo.list_filtered(
            status=status_filter,
            search=search or None,
            skip=(page - 1) * limit,
            limit=limit
        )

    async def get_statistics(self) -> Dict[str, int]:
        return await self.registration_repo.count_by_status()
