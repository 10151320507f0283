from fastapi import HTTPException
from datetime import datetime
from core.utils.uuid_utils import uuid7
from typing import Optional


class APIException(HTTPException):
    """Custom API exception with enhanced error details"""

    def __init__(
        self,
        status_code: int,
        message: str = "An unexpected API error occurred",
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **kwargs
    ):
        self.message = message
        self.detail = detail or message
        self.error_code = error_code or f"ERR_{status_code}"
        self.correlation_id = correlation_id or str(uuid7())
        self.timestamp = datetime.now().isoformat()

        super().__init__(status_code=status_code, detail=self.detail, **kwargs)


class BadRequestException(APIException):
    """Exception for malformed or incomplete requests"""

    def __init__(self, message: str = "Bad request", field: Optional[str] = None):
        self.field = field
        super().__init__(
            status_code=400,
            message=message,
            error_code="BAD_REQUEST"
        )


class AuthenticationException(APIException):
    """Exception for authentication errors"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            status_code=401,
            message=message,
            error_code="AUTH_ERROR",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationException(APIException):
    """Exception for authorization errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            status_code=403,
            message=message,
            error_code="AUTHORIZATION_ERROR"
        )


class NotFoundException(APIException):
    """Exception for resource not found errors"""

    def __init__(self, message: str = "Resource not found", resource: Optional[str] = None):
        self.resource = resource
        super().__init__(
            status_code=404,
            message=message,
            error_code="NOT_FOUND"
        )


class ConflictException(APIException):
    """Exception for conflict errors"""

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(
            status_code=409,
            message=message,
            error_code="CONFLICT_ERROR"
        )


class DatabaseException(APIException):
    """Exception for database errors"""

    def __init__(self, message: str = "Database error occurred"):
        super().__init__(
            status_code=500,
            message=message,
            error_code="DATABASE_ERROR"
        )


class PaymentConfigurationException(APIException):
    """Raised when the payment processor has no credentials"""

    def __init__(self, message: str = "Payment system unavailable"):
        super().__init__(
            status_code=500,
            message=message,
            error_code="PAYMENT_NOT_CONFIGURED"
        )


class ExternalServiceException(APIException):
    """Exception for external service errors"""

    def __init__(
        self,
        message: str = "External service error",
        service: Optional[str] = None,
        status_code: int = 502,
    ):
        self.service = service
        super().__init__(
            status_code=status_code,
            message=message,
            error_code="EXTERNAL_SERVICE_ERROR"
        )


class WebhookVerificationException(APIException):
    """Webhook payload could not be authenticated"""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(
            status_code=400,
            message=message,
            error_code="WEBHOOK_SIGNATURE_ERROR"
        )
