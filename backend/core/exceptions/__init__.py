from .api_exceptions import (
    APIException,
    BadRequestException,
    AuthenticationException,
    AuthorizationException,
    NotFoundException,
    ConflictException,
    DatabaseException,
    PaymentConfigurationException,
    ExternalServiceException,
    WebhookVerificationException,
)

from .handlers import (
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)

from .utils import get_correlation_id

__all__ = [
    # Exceptions
    "APIException",
    "BadRequestException",
    "AuthenticationException",
    "AuthorizationException",
    "NotFoundException",
    "ConflictException",
    "DatabaseException",
    "PaymentConfigurationException",
    "ExternalServiceException",
    "WebhookVerificationException",

    # Handlers
    "api_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "sqlalchemy_exception_handler",
    "general_exception_handler",

    # Utils
    "get_correlation_id",
]
