from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
from core.config import settings
from core.database import initialize_db, db_manager
from core.utils.logging import structured_logger
# Import exceptions and handlers
from core.exceptions import (
    APIException,
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)
from routes import (
    admin_router,
    auth_router,
    checkout_router,
    health_router,
    orders_router,
    webhooks_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup event
    initialize_db(
        settings.SQLALCHEMY_DATABASE_URI,
        settings.ENVIRONMENT == "local",
        command_timeout=settings.DB_COMMAND_TIMEOUT,
    )
    if not settings.stripe_configured:
        structured_logger.warning(
            message="STRIPE_SECRET_KEY is not set; checkout payments will be refused",
        )
    structured_logger.info(
        message="Application started",
        metadata={"environment": settings.ENVIRONMENT},
    )
    yield
    # Shutdown event
    await db_manager.dispose()


app = FastAPI(
    title="Kind Kandles API",
    description="Checkout, discount and order reconciliation service for the Kind Kandles boutique.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(admin_router)
app.include_router(webhooks_router)
app.include_router(health_router)


@app.get("/")
async def read_root():
    return {
        "service": "Kind Kandles API",
        "status": "Running",
        "version": "1.0.0",
    }


# Register exception handlers
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)
