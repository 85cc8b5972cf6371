import os
import sys
from logging.config import fileConfig

from dotenv import load_dotenv
from alembic import context

# -------------------------------------------------
# Load .env FIRST
# -------------------------------------------------
load_dotenv()

# -------------------------------------------------
# Ensure project root is on PYTHONPATH
# -------------------------------------------------
sys.path.append(
    os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
)

# -------------------------------------------------
# Import engine & metadata from app
# -------------------------------------------------
from lead_router.db import engine, DATABASE_URL
from lead_router.models import Base

# -------------------------------------------------
# Alembic Config
# -------------------------------------------------
config = context.config

# Logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Metadata for autogenerate
target_metadata = Base.metadata

# -------------------------------------------------
# OFFLINE migrations
# -------------------------------------------------
def run_migrations_offline() -> None:
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=DATABASE_URL.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()

# -------------------------------------------------
# ONLINE migrations
# -------------------------------------------------
def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    # Callers such as the test suite may hand over an open connection
    connection = config.attributes.get("connection")
    if connection is not None:
        do_run_migrations(connection)
        return

    with engine.connect() as connection:
        do_run_migrations(connection)

# -------------------------------------------------
# Run migrations
# -------------------------------------------------
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
