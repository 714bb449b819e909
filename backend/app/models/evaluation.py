"""Evaluation model"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from backend.app.core.database import Base
from backend.app.models.base import TimestampMixin
import uuid
import enum


class EvaluationResult(str, enum.Enum):
    """Final decision recorded on a scoring sheet"""
    UNSET = ""
    SELECTED = "selected"
    NOT_SELECTED = "notSelected"


# Model attribute -> maximum score
SCORE_CRITERIA = {
    "leadership": 20,
    "prior_experience": 15,
    "discipline": 15,
    "academics": 15,
    "attitude": 15,
    "time_management": 20,
}


class Evaluation(Base, TimestampMixin):
    """Scoring sheet for one approved applicant"""

    __tablename__ = "evaluations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # unique: at most one evaluation per registration
    registration_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("registrations.id"),
        unique=True,
        nullable=False,
        index=True
    )

    leadership = Column(Integer, nullable=False, default=0)
    prior_experience = Column(Integer, nullable=False, default=0)
    discipline = Column(Integer, nullable=False, default=0)
    academics = Column(Integer, nullable=False, default=0)
    attitude = Column(Integer, nullable=False, default=0)
    time_management = Column(Integer, nullable=False, default=0)

    result = Column(
        SQLEnum(
            EvaluationResult,
            values_callable=lambda e: [m.value for m in e],
            native_enum=False,
            length=20
        ),
        nullable=False,
        default=EvaluationResult.UNSET
    )
    evaluated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    @property
    def total_score(self) -> int:
        return sum(getattr(self, name) or 0 for name in SCORE_CRITERIA)

    def __repr__(self):
        return f"<Evaluation(id={self.id}, registration_id={self.registration_id}, total={self.total_score})>"
