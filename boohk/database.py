import os
import uuid
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_database_url() -> str:
    """Get database URL from environment."""
    url = os.getenv("DATABASE_URL", "sqlite:///./boohk.db")
    # Ensure psycopg (v3) driver is used
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


DATABASE_URL = get_database_url()


def get_engine(url: str = None):
    """Create the database engine for a URL (defaults to DATABASE_URL)."""
    url = url or DATABASE_URL
    echo = os.getenv("DEBUG", "false").lower() == "true"
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases must share one connection across sessions
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def new_id() -> str:
    """Generate a document-style string ID."""
    return uuid.uuid4().hex


def init_db(bind=None):
    """Create all tables. Raises RuntimeError if the database is unreachable."""
    # Import models so they register on Base.metadata
    import boohk.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine)
    except Exception as e:
        raise RuntimeError(f"Could not initialize database: {e}") from e
    logger.info("Database tables ensured")


def get_db():
    """Dependency for FastAPI routes to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
