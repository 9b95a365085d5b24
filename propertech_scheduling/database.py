import logging
import sqlite3

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from propertech_scheduling.core.config import settings

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")


def build_engine(url: str):
    """Create the SQLAlchemy engine with per-backend connection options."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},  # SQLite multi-thread
            echo=False,
        )
    return create_engine(
        url,
        connect_args={
            "connect_timeout": 10,
            "options": "-c statement_timeout=30000",  # 30s query timeout
        },
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_timeout=30,
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_connection() -> bool:
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.info(f"[OK] Database connected: {engine.url.render_as_string(hide_password=True)}")
        return True
    except Exception as e:
        logger.warning(f"[WARN] Database connection failed (continuing): {e}")
        return False


def init_db(bind=None) -> bool:
    """Create all tables for the scheduling models."""
    # Import all models so they're registered with Base
    from propertech_scheduling.db.base import Base
    from propertech_scheduling import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("[OK] Database tables initialized!")
    return True


def close_db_connection():
    """Close database connections."""
    engine.dispose()
    logger.info("[OK] Database connections closed")
