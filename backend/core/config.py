import os
from decimal import Decimal
from typing import List, Literal
from dotenv import load_dotenv
import logging


logging.basicConfig(level=logging.INFO)

# Load environment variables from .env file located in the parent directory
# Environment variables explicitly set (e.g., by Docker Compose) take precedence.
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, '.env')
load_dotenv(ENV_PATH)


def parse_cors(value: str) -> List[str]:
    """
    Parses CORS origins. Accepts comma-separated string or list-like string.
    Example: "http://localhost,http://127.0.0.1" → ["http://localhost", "http://127.0.0.1"]
    If the value is empty, a default list of common development origins is provided.
    """
    if not value:
        return [
            "http://localhost:3000",  # storefront dev server
            "http://127.0.0.1:3000",
        ]
    if isinstance(value, str):
        value = value.strip()
        if value.startswith("[") and value.endswith("]"):
            return [i.strip().strip('"').strip("'") for i in value[1:-1].split(",")]
        return [i.strip() for i in value.split(",")]
    raise ValueError("Invalid CORS format")


class Settings:
    # --- General Environment Settings ---
    # ENVIRONMENT determines application behavior (e.g., SQL echo, secure cookies).
    ENVIRONMENT: Literal["local", "staging",
                         "production"] = os.getenv('ENVIRONMENT', 'local')

    # --- PostgreSQL Database Configuration ---
    POSTGRES_USER: str = os.getenv('POSTGRES_USER', 'kindkandles')
    POSTGRES_PASSWORD: str = os.getenv('POSTGRES_PASSWORD', 'kindkandles_password')
    POSTGRES_SERVER: str = os.getenv('POSTGRES_SERVER', 'postgres')
    POSTGRES_PORT: int = int(os.getenv('POSTGRES_PORT', 5432))
    POSTGRES_DB: str = os.getenv('POSTGRES_DB', 'kindkandles_db')

    # Full database URL. Takes precedence over the individual components when set.
    POSTGRES_DB_URL: str = os.getenv('POSTGRES_DB_URL', "")

    # Seconds an individual statement may run before asyncpg cancels it.
    DB_COMMAND_TIMEOUT: int = int(os.getenv('DB_COMMAND_TIMEOUT', 15))

    # --- Security Settings ---
    # SECRET_KEY signs the admin session JWT.
    SECRET_KEY: str = os.getenv('SECRET_KEY', 'change-me-in-production')
    ALGORITHM: str = os.getenv('ALGORITHM', "HS256")
    # Lifetime of the admin-token cookie and the JWT inside it.
    ADMIN_SESSION_MINUTES: int = int(os.getenv('ADMIN_SESSION_MINUTES', 60))
    ADMIN_COOKIE_NAME: str = os.getenv('ADMIN_COOKIE_NAME', 'admin-token')

    # --- Stripe ---
    STRIPE_SECRET_KEY: str = os.getenv('STRIPE_SECRET_KEY', '')
    # STRIPE_WEBHOOK_SECRET verifies the stripe-signature header on webhooks.
    STRIPE_WEBHOOK_SECRET: str = os.getenv('STRIPE_WEBHOOK_SECRET', '')
    STRIPE_TIMEOUT_SECONDS: int = int(os.getenv('STRIPE_TIMEOUT_SECONDS', 10))
    STRIPE_MAX_NETWORK_RETRIES: int = int(os.getenv('STRIPE_MAX_NETWORK_RETRIES', 2))

    # --- Checkout ---
    # Flat sales tax applied to (subtotal - discount).
    TAX_RATE: Decimal = Decimal(os.getenv('TAX_RATE', '0.06'))
    CURRENCY: str = os.getenv('CURRENCY', 'usd')
    ORDER_NUMBER_PREFIX: str = os.getenv('ORDER_NUMBER_PREFIX', 'KK')

    # --- CORS Configuration ---
    RAW_CORS_ORIGINS: str = os.getenv('BACKEND_CORS_ORIGINS', '')
    BACKEND_CORS_ORIGINS: List[str] = parse_cors(RAW_CORS_ORIGINS)

    @property
    def stripe_configured(self) -> bool:
        """True when a Stripe secret key is available."""
        return bool(self.STRIPE_SECRET_KEY)

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        Constructs the SQLAlchemy database URI.
        Prioritizes POSTGRES_DB_URL over individual components.
        """
        if self.POSTGRES_DB_URL:
            return self.POSTGRES_DB_URL

        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# Instantiate the settings object to be used throughout the application
settings = Settings()
