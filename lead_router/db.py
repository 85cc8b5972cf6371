import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from lead_router.config import get_settings
from lead_router.models import Base

logger = logging.getLogger(__name__)

# -------------------------------------------------
# Database URL
# -------------------------------------------------
DATABASE_URL = get_settings().database_url


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""

    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(url, **kwargs)
    enable_sqlite_foreign_keys(engine)
    return engine


# -------------------------------------------------
# SQLAlchemy engine & session
# -------------------------------------------------
engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def init_db(bind: Engine = engine) -> None:
    """
    Verify the database is reachable and create missing tables.
    Any failure here is fatal for process startup.
    """

    with bind.connect() as connection:
        connection.execute(text("SELECT 1"))

    Base.metadata.create_all(bind=bind)
    logger.info("Database ready (%s)", bind.url.render_as_string(hide_password=True))


# -------------------------------------------------
# Dependency for FastAPI
# -------------------------------------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
