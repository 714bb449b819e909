"""Pydantic schemas for authentication"""

from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict


class AdminLogin(BaseModel):
    """Schema for admin login"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminResponse(BaseModel):
    """Schema for admin profile"""
    id: UUID
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Schema for a successful login"""
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    admin: AdminResponse
