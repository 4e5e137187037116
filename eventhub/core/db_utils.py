from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.errors import FOREIGN_KEY_VIOLATION_SQLSTATE, StoreError


def extract_sqlstate(exc: DBAPIError) -> Optional[str]:
    """Return the SQLSTATE code reported by the driver, if any.

    asyncpg exposes it as ``sqlstate``, psycopg as ``pgcode``. SQLite has no
    codes, so its foreign key failures are recognised by message.
    """
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    # asyncpg errors arrive wrapped by SQLAlchemy's adapter
    cause = getattr(orig, "__cause__", None)
    code = getattr(cause, "sqlstate", None)
    if code:
        return str(code)
    if "FOREIGN KEY constraint failed" in str(orig):
        return FOREIGN_KEY_VIOLATION_SQLSTATE
    return None


@asynccontextmanager
async def translate_store_errors() -> AsyncGenerator[None, None]:
    """Re-raise driver errors as StoreError carrying the SQLSTATE code."""
    try:
        yield
    except DBAPIError as e:
        raise StoreError(str(e.orig), sqlstate=extract_sqlstate(e)) from e


@asynccontextmanager
async def db_transaction(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    try:
        async with translate_store_errors():
            yield db
            await db.commit()
    except Exception:
        await db.rollback()
        raise
