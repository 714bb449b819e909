"""Admin repository for database operations"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext

from backend.app.models.admin import Admin
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AdminRepository:
    """Repository for Admin CRUD operations"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt"""
        if not password:
            raise ValueError("Password must not be empty")
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    async def create(self, username: str, email: str, password: str) -> Admin:
        """Create a new admin"""
        admin = Admin(
            username=username,
            email=email,
            password_hash=self.hash_password(password)
        )

        self.session.add(admin)
        await self.session.flush()
        await self.session.refresh(admin)

        logger.info(f"Created admin: {admin.username}")
        return admin

    async def get_by_id(self, admin_id: UUID) -> Optional[Admin]:
        """Get admin by ID"""
        result = await self.session.execute(
            select(Admin).where(Admin.id == admin_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[Admin]:
        """Get admin by username"""
        result = await self.session.execute(
            select(Admin).where(Admin.username == username)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Admin)
        )
        return result.scalar() or 0

    async def authenticate(self, username: str, password: str) -> Optional[Admin]:
        """Authenticate admin by username and password"""
        admin = await self.get_by_username(username)

        if not admin:
            logger.warning(f"Authentication failed: admin {username} not found")
            # Both failure paths run one bcrypt verification
            pwd_context.dummy_verify()
            return None

        if not self.verify_password(password, admin.password_hash):
            logger.warning(f"Authentication failed: invalid password for {username}")
            return None

        logger.info(f"Admin authenticated: {username}")
        return admin
