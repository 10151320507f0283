from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import settings
from core.database import get_db
from core.dependencies import get_current_admin
from models.admin import AdminUser
from schemas.auth import AdminLogin, AdminSession
from services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _session(admin: AdminUser) -> AdminSession:
    return AdminSession(
        id=str(admin.id),
        email=admin.email,
        role=admin.role,
        first_name=admin.first_name,
        last_name=admin.last_name,
    )


@router.post("/login")
async def login(
    credentials: AdminLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Log an admin in and set the session cookie."""
    auth_service = AuthService(db)
    admin = await auth_service.authenticate(credentials.email, credentials.password)
    token = auth_service.create_session_token(admin)

    response.set_cookie(
        key=settings.ADMIN_COOKIE_NAME,
        value=token,
        max_age=settings.ADMIN_SESSION_MINUTES * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        path="/",
    )
    return {"success": True, "user": _session(admin).model_dump()}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(key=settings.ADMIN_COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/me")
async def me(current_admin: AdminUser = Depends(get_current_admin)):
    return {"user": _session(current_admin).model_dump()}
