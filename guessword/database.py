import logging
from sqlmodel import SQLModel, create_engine
from .config import DEV, SQLITE_URL, POSTGRES_URL

logger = logging.getLogger(__name__)


def build_engine(url: str | None = None):
    if url:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        return create_engine(url, connect_args=connect_args)

    if DEV:
        # SQLite for development
        logger.info("Using SQLite database for development")
        return create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # PostgreSQL for production
    if not POSTGRES_URL:
        raise ValueError("POSTGRES_URL environment variable is required in production")

    logger.info("Using PostgreSQL database for production")
    return create_engine(POSTGRES_URL)


def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


