from typing import Optional

from sqlalchemy import create_engine, URL
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from ..core.config import settings
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_database_url(database_url_string: Optional[str] = None) -> URL:
    """
    Create SQLAlchemy URL object from settings (or an explicit string).
    """
    database_url_string = database_url_string or settings.DATABASE_URL

    if not database_url_string:
        raise ValueError("DATABASE_URL is empty or not set")

    try:
        url_obj = make_url(database_url_string)
    except Exception as e:
        logger.error(f"Failed to parse DATABASE_URL: {e}")
        raise ValueError(f"Invalid DATABASE_URL format: {e}")

    logger.info(f"Using key-value database: {url_obj.render_as_string(hide_password=True)}")
    return url_obj


def is_memory_database(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def get_engine_kwargs(url: URL) -> dict:
    """Connection arguments per backend (SQLite needs cross-thread access)."""
    if url.get_backend_name() != "sqlite":
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if is_memory_database(url):
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    return kwargs


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    url = create_database_url(database_url)
    engine = create_engine(
        url,
        echo=settings.DATABASE_ECHO if echo is None else echo,
        **get_engine_kwargs(url),
    )
    logger.info(f"Database engine initialized ({url.get_backend_name()})")
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create the key-value table if it does not exist yet."""
    from . import models  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(bind=engine)
