"""
Database connection and session management.
"""
from sqlmodel import create_engine, SQLModel, Session
from myfocus.core.settings import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before use
        "pool_recycle": 300,  # Recycle connections every 5 minutes
    }


# Create database engine
engine = create_engine(
    settings.database_url,
    echo=False,
    **_engine_kwargs(settings.database_url)
)


def create_db_and_tables():
    """Create database tables."""
    # Table classes must be imported so their metadata is registered
    import myfocus.db.models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency to get database session."""
    with Session(engine) as session:
        yield session
