from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from storeshift.core.config import settings


def create_db_engine(db_url: str = settings.DATABASE_URL, echo: bool = False):
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    return create_engine(db_url, echo=echo, connect_args=connect_args)


engine = create_db_engine()
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def init_database() -> None:
    """Create all tables on the configured engine."""
    import storeshift.db.models  # noqa: F401  registers models on Base.metadata
    Base.metadata.create_all(engine)
