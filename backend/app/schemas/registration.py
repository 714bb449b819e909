"""Registration schemas for API requests and responses"""

import json
import re
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from backend.app.models.registration import RegistrationStatus, OTHER_POSITION, FILE_FIELDS, TERMS_COUNT

EMAIL_PATTERN = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")
PHONE_PATTERN = re.compile(r"^\+91\d{10}$")


class RegistrationCreate(BaseModel):
    """Text fields of the registration form

    Field aliases are the form names posted by the client.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="forbid")

    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    uid: str = Field(..., min_length=1, max_length=100)
    cluster: str = Field(..., min_length=1, max_length=255)
    institute: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., alias="phoneNumber")
    email: str = Field(..., max_length=255)
    leadership_roles: str = Field(..., alias="leadershipRoles", min_length=1)
    your_position: str = Field(..., alias="yourPosition", min_length=1, max_length=255)
    other_position_name: Optional[str] = Field(None, alias="otherPositionName", max_length=255)
    name_of_entity: str = Field(..., alias="nameOfEntity", min_length=1, max_length=255)
    linkedin_account: str = Field(..., alias="linkedinAccount", min_length=1, max_length=500)
    terms: List[bool]

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email address")
        return value

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must be exactly 10 digits long and start with +91")
        return value

    @field_validator("terms", mode="before")
    @classmethod
    def parse_terms(cls, value):
        # Multipart clients send the acknowledgments as one JSON array string
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("terms must be a JSON array of booleans")
        return value

    @field_validator("terms")
    @classmethod
    def validate_terms(cls, value: List[bool]) -> List[bool]:
        if len(value) != TERMS_COUNT or not all(value):
            raise ValueError("All terms must be accepted")
        return value

    @model_validator(mode="after")
    def validate_other_position(self) -> "RegistrationCreate":
        if self.your_position == OTHER_POSITION:
            if not self.other_position_name:
                raise ValueError("otherPositionName is required for 'Other Leadership Position'")
        else:
            self.other_position_name = None
        return self


class StatusUpdate(BaseModel):
    """Request body for a status change

    The value is checked by the status workflow so that an unknown status
    is reported as a validation error rather than a schema error.
    """
    status: str = Field(..., description="One of pending, approved, rejected")


class RegistrationResponse(BaseModel):
    """Response schema for one registration"""
    id: UUID
    uid: str
    full_name: str
    email: str
    cluster: str
    institute: str
    phone_number: str
    leadership_roles: str
    your_position: str
    other_position_name: Optional[str] = None
    name_of_entity: str
    linkedin_account: str
    documents: Dict[str, str] = Field(..., description="Form slot -> public URL of the stored file")
    status: RegistrationStatus
    submitted_at: datetime

    @classmethod
    def from_registration(cls, registration, url_prefix: str) -> "RegistrationResponse":
        """Create response from Registration model"""
        prefix = url_prefix.rstrip("/")
        return cls(
            id=registration.id,
            uid=registration.uid,
            full_name=registration.full_name,
            email=registration.email,
            cluster=registration.cluster,
            institute=registration.institute,
            phone_number=registration.phone_number,
            leadership_roles=registration.leadership_roles,
            your_position=registration.your_position,
            other_position_name=registration.other_position_name,
            name_of_entity=registration.name_of_entity,
            linkedin_account=registration.linkedin_account,
            documents={
                slot: f"{prefix}/{getattr(registration, attribute)}"
                for slot, attribute in FILE_FIELDS.items()
            },
            status=registration.status,
            submitted_at=registration.submitted_at
        )


class RegistrationCreatedResponse(BaseModel):
    """Response schema for a successful submission"""
    success: bool = True
    message: str = "Registration submitted successfully"
    data: RegistrationResponse


class Pagination(BaseModel):
    """Pagination metadata for list responses"""
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


class RegistrationListResponse(BaseModel):
    """Paginated registration list"""
    registrations: List[RegistrationResponse]
    pagination: Pagination


class RegistrationStatistics(BaseModel):
    """Registration counts per status"""
    total: int
    pending: int
    approved: int
    rejected: int
