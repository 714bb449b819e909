"""Admin model"""

from sqlalchemy import Column, String, Uuid
from backend.app.core.database import Base
from backend.app.models.base import TimestampMixin
import uuid


class Admin(Base, TimestampMixin):
    """Administrator account used for the review dashboard"""

    __tablename__ = "admins"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Admin(id={self.id}, username={self.username})>"
