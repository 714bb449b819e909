"""Admin authentication API endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.core.rate_limit import login_rate_limiter
from backend.app.core.security import get_current_admin
from backend.app.services.auth_service import auth_service
from backend.app.schemas.auth import AdminLogin, AdminResponse, LoginResponse
from backend.app.models.admin import Admin
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(login_rate_limiter)])
async def login(
    credentials: AdminLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Log in as an admin

    Returns a bearer token valid for 24 hours. Send it on admin routes as
    `Authorization: Bearer <token>`.

    ## Error Responses

    - **401 Unauthorized**: Unknown username or wrong password (same message for both)
    - **429 Too Many Requests**: More than 5 attempts from one address within 15 minutes

    ## Example Usage

    ```bash
    curl -X POST "http://localhost:8000/api/v1/admin/login" \\
         -H "Content-Type: application/json" \\
         -d '{"username": "admin", "password": "admin123"}'
    ```
    """
    token, admin = await auth_service.login(db, credentials.username, credentials.password)

    return LoginResponse(
        token=token,
        expires_in=auth_service.access_token_ttl_seconds,
        admin=AdminResponse.model_validate(admin)
    )


@router.get("/me", response_model=AdminResponse)
async def get_current_admin_info(
    current_admin: Admin = Depends(get_current_admin)
):
    """Get the profile of the authenticated admin"""
    return current_admin
