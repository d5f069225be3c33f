import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlmodel import create_engine

from app.core.config import Settings
from app.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """
    Crea el engine (pool de conexiones acotado) y lo verifica con un ping.
    El engine es de quien lo pide: cerrarlo con dispose_db_engine al apagar.
    """
    if not settings.DATABASE_URL:
        raise ConfigurationError("DATABASE_URL (or DB_DSN) is required")

    try:
        url = make_url(settings.DATABASE_URL)
    except ArgumentError as e:
        raise ConfigurationError(f"invalid DATABASE_URL: {e}") from e

    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            url,
            echo=settings.DB_ECHO,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_MIN_SIZE,
            max_overflow=max(settings.DB_POOL_MAX_SIZE - settings.DB_POOL_MIN_SIZE, 0),
            pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
        )

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise ConfigurationError(f"database ping failed: {e}") from e

    logger.info(f"Engine listo: {url.render_as_string(hide_password=True)}")
    return engine


def dispose_db_engine(engine: Engine) -> None:
    engine.dispose()
    logger.info("Engine cerrado")
