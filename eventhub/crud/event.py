from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.db_utils import db_transaction, translate_store_errors
from eventhub.models.event import Event


async def get_event(db: AsyncSession, event_id: str) -> Optional[Event]:
    async with translate_store_errors():
        result = await db.execute(select(Event).filter(Event.id == event_id))
    first: Optional[Event] = result.scalars().first()
    return first


async def get_events(db: AsyncSession) -> list[Event]:
    """All events, newest first."""
    async with translate_store_errors():
        result = await db.execute(
            select(Event).order_by(Event.created_at.desc(), Event.id)
        )
    return list(result.scalars().all())


async def create_event(db: AsyncSession, values: dict[str, Any]) -> Event:
    db_event = Event(**values)
    async with db_transaction(db):
        db.add(db_event)
    await db.refresh(db_event)
    return db_event


async def update_event(db: AsyncSession, event_id: str, values: dict[str, Any]) -> bool:
    """Update one event by id. Returns False when no row matched."""
    async with db_transaction(db):
        result = await db.execute(
            update(Event).where(Event.id == event_id).values(**values)
        )
    return bool(result.rowcount)


async def delete_event(db: AsyncSession, event_id: str) -> bool:
    # Registrations keep their copied category label; nothing cascades.
    async with db_transaction(db):
        result = await db.execute(delete(Event).where(Event.id == event_id))
    return bool(result.rowcount)


async def increment_registered(db: AsyncSession, event_id: str) -> None:
    async with db_transaction(db):
        await db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(registered=func.coalesce(Event.registered, 0) + 1)
        )
