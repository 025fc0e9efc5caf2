"""Database engine and session management."""

from asyncio import wait_for
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from inkblog.configs.settings import Settings
from inkblog.errors import DatabaseConnectionError
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

STATEMENT_TIMEOUT_MS = 30000
PING_TIMEOUT_SECONDS = 2.0


def _configure_engine_events(engine: AsyncEngine) -> None:
    """Configure connection pool events for debugging."""

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection: object, connection_record: object) -> None:
        logger.debug("New database connection established")

    @event.listens_for(engine.sync_engine, "checkin")
    def on_checkin(dbapi_connection: object, connection_record: object) -> None:
        logger.debug("Connection returned to pool")


class Database:
    """
    Owns the async engine and session factory.

    One instance is created in the application lifespan and kept on
    ``app.state.database``; request handlers reach it through ``get_session``.
    """

    def __init__(self, settings: Settings, engine: AsyncEngine | None = None) -> None:
        self.engine = engine or create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.POOL_SIZE,
            max_overflow=settings.MAX_OVERFLOW,
            pool_timeout=settings.POOL_TIMEOUT,
            pool_recycle=settings.POOL_RECYCLE,
            pool_pre_ping=True,
            connect_args={
                "command_timeout": STATEMENT_TIMEOUT_MS / 1000,
                "server_settings": {
                    "statement_timeout": str(STATEMENT_TIMEOUT_MS),
                    "lock_timeout": str(STATEMENT_TIMEOUT_MS),
                },
            },
        )
        if settings.DEBUG:
            _configure_engine_events(self.engine)

        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Session without an enclosing transaction; callers commit themselves."""
        async with self.session_maker() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession]:
        """
        Session inside a transaction.

        Commits on a clean exit and rolls back when the body raises.

        Example:
            ```python
            async with database.transaction() as session:
                session.add(CategoryDB(name="python"))
            ```
        """
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Transaction error")
                raise

    async def init_db(self) -> None:
        """
        Create every table known to SQLModel.

        Note:
            Meant for development and tests; deployments run Alembic.
        """
        from inkblog import models  # noqa: F401, PLC0415

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            mssg = f"Failed to initialise database: {e}"
            raise DatabaseConnectionError(mssg) from e
        logger.info("Database initialized successfully!")

    async def ping(self) -> bool:
        """Run ``SELECT 1``; False when the database is unreachable or slow."""
        try:
            async with self.session() as session:
                await wait_for(session.execute(text("SELECT 1")), timeout=PING_TIMEOUT_SECONDS)
        except (TimeoutError, SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False
        return True

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """
    Dependency for getting a transactional database session.

    Yields:
        AsyncSession: Session committed when the request handler returns.
    """
    database: Database = request.app.state.database
    async with database.transaction() as session:
        yield session
