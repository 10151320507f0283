from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import timedelta
from typing import Optional
from uuid import UUID
from core.config import settings
from core.exceptions import AuthenticationException
from core.utils.auth.jwt_auth import JWTManager
from core.utils.encryption import PasswordManager
from core.utils.logging import structured_logger
from models.admin import AdminUser


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.password_manager = PasswordManager()
        self.jwt_manager = JWTManager()

    async def get_admin_by_email(self, email: str) -> Optional[AdminUser]:
        result = await self.db.execute(select(AdminUser).where(AdminUser.email == email.lower()))
        return result.scalar_one_or_none()

    async def create_admin(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: str = "admin",
    ) -> AdminUser:
        """Create an admin account. Used by seeding and tests."""
        admin = AdminUser(
            email=email.lower(),
            password_hash=self.password_manager.hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=True,
        )
        self.db.add(admin)
        await self.db.commit()
        await self.db.refresh(admin)
        return admin

    async def authenticate(self, email: str, password: str) -> AdminUser:
        """Check credentials. Unknown email and wrong password fail the same way."""
        admin = await self.get_admin_by_email(email)
        if not admin or not admin.is_active or not self.password_manager.verify_password(
            password, admin.password_hash
        ):
            structured_logger.warning(
                message="Admin login failed",
                endpoint="/auth/login",
                metadata={"email": email},
            )
            raise AuthenticationException(message="Invalid email or password")
        return admin

    def create_session_token(self, admin: AdminUser) -> str:
        return self.jwt_manager.create_access_token(
            {"sub": str(admin.id), "email": admin.email, "role": admin.role},
            expires_delta=timedelta(minutes=settings.ADMIN_SESSION_MINUTES),
        )

    async def get_admin_from_token(self, token: Optional[str]) -> Optional[AdminUser]:
        """Resolve a session token to an active admin, or None"""
        if not token:
            return None
        payload = self.jwt_manager.verify_token(token)
        if not payload or not payload.get("sub"):
            return None
        try:
            admin_id = UUID(payload["sub"])
        except ValueError:
            return None

        result = await self.db.execute(select(AdminUser).where(AdminUser.id == admin_id))
        admin = result.scalar_one_or_none()
        if not admin or not admin.is_active:
            return None
        return admin
