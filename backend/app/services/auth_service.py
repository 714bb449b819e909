"""Authentication service for admin credentials and JWT token management"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import AuthenticationException
from backend.app.core.logging import get_logger
from backend.app.models.admin import Admin
from backend.app.repositories.admin_repository import AdminRepository

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Service for admin authentication and JWT token management"""

    def __init__(self):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.access_token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.access_token_expire_minutes * 60

    def create_access_token(
        self,
        admin_id: str,
        username: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Generate JWT access token

        Args:
            admin_id: Admin ID
            username: Admin username
            expires_delta: Optional custom expiration time

        Returns:
            JWT token string
        """
        now = datetime.now(timezone.utc)
        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(minutes=self.access_token_expire_minutes)

        to_encode = {
            "sub": str(admin_id),
            "username": username,
            "exp": expire,
            "iat": now,
            "type": "access"
        }

        encoded_jwt = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        logger.info(f"Created access token for admin: {username}")
        return encoded_jwt

    def verify_access_token(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Verify and decode an access token

        Args:
            token: JWT token string

        Returns:
            Token payload

        Raises:
            AuthenticationException: If the token is missing, malformed,
                wrongly signed, expired, not an access token or has no subject
        """
        if not token:
            raise AuthenticationException("No authentication token, access denied")

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Token verification failed: {str(e)}")
            raise AuthenticationException("Invalid or expired token") from e

        if payload.get("type") != "access":
            logger.warning("Token is not an access token")
            raise AuthenticationException("Invalid or expired token")

        if not payload.get("sub"):
            logger.warning("Token missing admin ID")
            raise AuthenticationException("Invalid token payload")

        return payload

    async def login(self, session: AsyncSession, username: str, password: str) -> Tuple[str, Admin]:
        """
        Authenticate an admin and issue an access token

        Unknown usernames and wrong passwords fail identically.

        Returns:
            Tuple of (access token, admin)

        Raises:
            AuthenticationException: On any credential mismatch
        """
        admin = await AdminRepository(session).authenticate(username, password)
        if not admin:
            raise AuthenticationException(INVALID_CREDENTIALS)

        token = self.create_access_token(admin_id=str(admin.id), username=admin.username)
        logger.info(f"Admin logged in: {admin.username}")
        return token, admin


async def ensure_bootstrap_admin(session: AsyncSession) -> Optional[Admin]:
    """
    Create the configured bootstrap admin when no admin exists

    Returns:
        The created admin, or None if an admin was already present
    """
    repo = AdminRepository(session)
    if await repo.count() > 0:
        return None

    try:
        admin = await repo.create(
            username=settings.BOOTSTRAP_ADMIN_USERNAME,
            email=settings.BOOTSTRAP_ADMIN_EMAIL,
            password=settings.BOOTSTRAP_ADMIN_PASSWORD
        )
        await session.commit()
    except IntegrityError:
        # Another process created it between the count and the insert
        await session.rollback()
        logger.info("Bootstrap admin already created by another process")
        return None

    logger.warning(
        f"Created bootstrap admin '{admin.username}'; change its password before going live"
    )
    return admin


# Global auth service instance
auth_service = AuthService()
