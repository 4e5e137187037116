"""
Database entry points shared by the API, the models and Alembic.
"""

from eventhub.core.database_manager import Base, db_manager  # noqa: F401

async_session_maker = db_manager.session_factory
