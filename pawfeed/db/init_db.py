"""
Database initialization.

Creates all tables.
"""

from sqlmodel import SQLModel

from pawfeed.core.logging import get_logger
from pawfeed.db.session import engine

logger = get_logger(__name__)


def init_db() -> None:
    """Create all SQLModel tables that do not exist yet."""
    # Import all models so SQLModel.metadata has them
    import pawfeed.db.base  # noqa: F401

    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Database initialization complete")


if __name__ == "__main__":
    init_db()
