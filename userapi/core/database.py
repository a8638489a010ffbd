"""Database engine and session management (SQLite or PostgreSQL)."""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from userapi.core.config import settings


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across the server's worker threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables. Alembic migrations are the source of truth in deployments."""
    from userapi.models import Base

    Base.metadata.create_all(bind=bind or engine)


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
