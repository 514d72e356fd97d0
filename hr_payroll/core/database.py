# hr_payroll/core/database.py

from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings

Base = declarative_base()


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for the configured database URL."""
    settings = get_settings()
    url = database_url or settings.database_url

    engine_kwargs = {
        "echo": settings.log_sql_queries,
        "pool_pre_ping": True,
    }

    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if url in {"sqlite://", "sqlite:///:memory:"}:
            engine_kwargs["poolclass"] = StaticPool

    return create_engine(url, **engine_kwargs)


def create_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine or create_db_engine())


def init_db(engine: Engine) -> None:
    """Create all tables registered on Base."""
    # Model modules register their tables on import
    from ..modules.attendance.models import attendance_models  # noqa: F401
    from ..modules.payroll.models import payroll_models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(session_factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    db = (session_factory or create_session_factory())()
    try:
        yield db
    finally:
        db.close()
