# fishlog/app/db/session.py
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from fishlog.app.core.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

# Create the SQLAlchemy engine
# SQL_ECHO=true will log all SQL queries, useful for debugging
engine = create_engine(DATABASE_URL, echo=SQL_ECHO)

# autocommit=False ensures transactions are not automatically committed
# autoflush=False means objects are not automatically flushed to the database
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for declarative models
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables on the given engine (defaults to the configured one)."""
    # Import models so their tables are registered with Base
    from fishlog.app.models import kv_record  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind)
    logger.info("Database initialized: %s", bind.url.render_as_string(hide_password=True))
