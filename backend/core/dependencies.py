from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from core.config import settings
from core.database import get_db
from core.exceptions import AuthenticationException, AuthorizationException, PaymentConfigurationException
from core.utils.logging import structured_logger
from models.admin import AdminUser
from services.auth import AuthService
from services.payment_gateway import PaymentGateway, get_payment_gateway

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AdminUser:
    """Resolve the admin from the session cookie, falling back to a Bearer header"""
    token = request.cookies.get(settings.ADMIN_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials

    if not token:
        raise AuthenticationException(message="Not authenticated")

    admin = await AuthService(db).get_admin_from_token(token)
    if not admin:
        raise AuthenticationException(message="Invalid or expired session")
    return admin


async def require_admin(current_admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
    """Require admin role"""
    if current_admin.role not in ("admin", "owner"):
        raise AuthorizationException(message="Admin access required")
    return current_admin


async def get_configured_payment_gateway(
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentGateway:
    """Fail before the request body is used when the processor has no credentials"""
    if not gateway.configured:
        structured_logger.error(
            message="Payment processor is not configured",
            endpoint="/checkout/create-payment-intent",
        )
        raise PaymentConfigurationException()
    return gateway
