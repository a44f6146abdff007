"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, create_engine

from src.greenhouse.core.errors import ApiError
from src.greenhouse.runtime.config.config_data import DatabaseConfig
from src.greenhouse.runtime.context import get_config


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Create the shared database engine.

        Args:
            db_config: Database settings; defaults to the active configuration.
        """
        main_config = get_config()
        self._config = db_config or main_config.database

        engine_kwargs: dict[str, Any] = {
            "echo": self._config.echo,
            "pool_pre_ping": True,
            "connect_args": self._get_connect_args(main_config.app.environment),
        }
        if self._config.is_memory:
            # one shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        elif not self._config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": self._config.pool_size,
                    "max_overflow": self._config.max_overflow,
                    "pool_timeout": self._config.pool_timeout,
                    "pool_recycle": self._config.pool_recycle,
                }
            )

        logger.info(
            "Initializing database engine for {}",
            make_url(self._config.url).render_as_string(hide_password=True),
        )
        self._engine = create_engine(self._config.url, **engine_kwargs)

    def _get_connect_args(self, environment: str) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if self._config.url.startswith("postgresql"):
            connect_args.update(
                {
                    "application_name": f"{environment}_greenhouse",
                    "connect_timeout": 30,
                }
            )
        elif self._config.is_sqlite:
            connect_args.update({"check_same_thread": False, "timeout": 20})
            if environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        return connect_args

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Run a unit of work: commit on success, roll back on any error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            if isinstance(e, ApiError):
                logger.debug("Transaction rolled back ({})", type(e).__name__)
            else:
                logger.error("Database transaction failed ({}: {})", type(e).__name__, e)
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Ping the database."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database health check failed ({}: {})", type(e).__name__, e)
            return False

    def dispose(self) -> None:
        self._engine.dispose()
