from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy import text, Column, DateTime, func, TypeDecorator, CHAR
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.exc import SQLAlchemyError
import time
import uuid
from typing import AsyncGenerator

from core.utils.logging import structured_logger
from core.exceptions.api_exceptions import DatabaseException

Base = declarative_base()


class GUID(TypeDecorator):
    """Platform-independent GUID type.

    Uses PostgreSQL's UUID type, otherwise uses
    CHAR(36), storing as stringified UUID values with hyphens.
    """
    impl = CHAR

    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(UUID())
        else:
            return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            return uuid.UUID(str(value))
        return value


class BaseModel(Base):
    """Base model with UUID primary key and timestamps"""
    __abstract__ = True

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class DatabaseManager:
    """Owns the async engine and session factory."""

    def __init__(self):
        self.engine = None
        self.session_factory = None
        self._connection_failures = 0
        self._last_health_check = 0

    def initialize(self, database_uri: str, env_is_local: bool, command_timeout: int = 15):
        """Initializes the database engine and session factory."""
        if self.engine and self.session_factory:  # Prevent re-initialization
            return

        engine_kwargs = {
            "echo": env_is_local,
            "pool_pre_ping": True,
        }
        if database_uri.startswith("postgresql"):
            engine_kwargs.update(
                pool_recycle=3600,
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                connect_args={"command_timeout": command_timeout},
            )

        engine = create_async_engine(database_uri, **engine_kwargs)
        session_factory = sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        self.set_engine_and_session_factory(engine, session_factory)

    def set_engine_and_session_factory(self, engine, session_factory):
        self.engine = engine
        self.session_factory = session_factory

    async def dispose(self):
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None

    async def health_check(self) -> dict:
        """Perform database health check."""
        if not self.engine or not self.session_factory:
            return {"status": "uninitialized", "message": "Database not initialized."}

        start_time = time.time()

        try:
            async with self.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                result.fetchone()

            response_time = (time.time() - start_time) * 1000
            self._connection_failures = 0
            self._last_health_check = time.time()

            return {
                "status": "healthy",
                "response_time_ms": response_time,
                "last_check": self._last_health_check,
            }

        except SQLAlchemyError as e:
            self._connection_failures += 1
            response_time = (time.time() - start_time) * 1000

            structured_logger.error(
                message="Database health check failed",
                metadata={
                    "response_time_ms": response_time,
                    "connection_failures": self._connection_failures,
                    "error_type": type(e).__name__,
                },
                exception=e,
            )

            return {
                "status": "unhealthy",
                "response_time_ms": response_time,
                "connection_failures": self._connection_failures,
                "last_check": time.time(),
            }


# Global database manager instance
db_manager = DatabaseManager()


def initialize_db(database_uri: str, env_is_local: bool, command_timeout: int = 15):
    """Initializes the database manager with engine and session factory."""
    db_manager.initialize(database_uri, env_is_local, command_timeout)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session dependency."""
    if not db_manager.session_factory:
        raise DatabaseException(message="Database session factory not initialized.")

    async with db_manager.session_factory() as session:
        try:
            yield session
        except SQLAlchemyError:
            await session.rollback()
            raise


async def get_db_health() -> dict:
    """Get database health status."""
    return await db_manager.health_check()
