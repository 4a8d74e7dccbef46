"""Durable schema declarations

The running service keeps its registry in memory. These declarations
describe how a persistent store lays the same records out, and are used
by migration tooling and schema tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from flash_registry.core.config import settings

Base = declarative_base()


def get_engine(url: str = None) -> Engine:
    """Create an engine for the configured database"""
    return create_engine(url or settings.DATABASE_URL, echo=settings.DEBUG)


def init_schema(engine: Engine):
    """Create all tables"""
    # Import models so they register with Base.metadata
    from flash_registry import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
