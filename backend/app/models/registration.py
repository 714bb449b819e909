"""Registration model"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, JSON, Uuid, Enum as SQLEnum, func
from backend.app.core.database import Base
import uuid
import enum


class RegistrationStatus(str, enum.Enum):
    """Lifecycle status of an applicant record"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


OTHER_POSITION = "Other Leadership Position"

# Form slot name -> model attribute holding the stored file name
FILE_FIELDS = {
    "resume": "resume",
    "sop": "sop",
    "recommendationLetter": "recommendation_letter",
}

TERMS_COUNT = 4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Registration(Base):
    """Applicant record created by the registration form"""

    __tablename__ = "registrations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Identity
    uid = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # Profile
    full_name = Column(String(255), nullable=False, index=True)
    cluster = Column(String(255), nullable=False)
    institute = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=False)
    leadership_roles = Column(Text, nullable=False)
    your_position = Column(String(255), nullable=False)
    other_position_name = Column(String(255), nullable=True)
    name_of_entity = Column(String(255), nullable=False)
    linkedin_account = Column(String(500), nullable=False)

    # Stored file names under the upload directory
    resume = Column(String(500), nullable=False)
    sop = Column(String(500), nullable=False)
    recommendation_letter = Column(String(500), nullable=False)

    terms = Column(JSON, nullable=False)

    status = Column(
        SQLEnum(RegistrationStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RegistrationStatus.PENDING,
        index=True
    )

    # submitted_at is written once at insert and has no onupdate
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    @property
    def display_position(self) -> str:
        if self.your_position == OTHER_POSITION and self.other_position_name:
            return self.other_position_name
        return self.your_position

    def __repr__(self):
        return f"<Registration(id={self.id}, uid={self.uid}, status={self.status})>"
