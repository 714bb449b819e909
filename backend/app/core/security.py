"""Security utilities and dependencies for admin authentication"""

from typing import Optional
from uuid import UUID
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.exceptions import AuthenticationException
from backend.app.models.admin import Admin
from backend.app.repositories.admin_repository import AdminRepository
from backend.app.services.auth_service import auth_service
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer token scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Admin:
    """
    Dependency to get the current authenticated admin from the JWT token

    Args:
        credentials: HTTP Bearer credentials
        db: Database session

    Returns:
        Current admin

    Raises:
        AuthenticationException: If the token is missing or invalid, or the
            admin no longer exists
    """
    token = credentials.credentials if credentials else None
    payload = auth_service.verify_access_token(token)

    try:
        admin_id = UUID(str(payload["sub"]))
    except ValueError as e:
        raise AuthenticationException("Invalid token payload") from e

    admin = await AdminRepository(db).get_by_id(admin_id)

    if not admin:
        logger.warning(f"Admin not found: {admin_id}")
        raise AuthenticationException("Invalid or expired token")

    return admin
