from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.db_utils import db_transaction, translate_store_errors
from eventhub.models.registration import Registration, RegistrationStatus
from eventhub.schemas.registration import RegistrationCreate


async def get_registration(
    db: AsyncSession, registration_id: str
) -> Optional[Registration]:
    async with translate_store_errors():
        result = await db.execute(
            select(Registration).filter(Registration.id == registration_id)
        )
    first: Optional[Registration] = result.scalars().first()
    return first


async def get_registrations(db: AsyncSession) -> list[Registration]:
    async with translate_store_errors():
        result = await db.execute(
            select(Registration).order_by(
                Registration.created_at.desc(), Registration.id
            )
        )
    return list(result.scalars().all())


async def create_registration(
    db: AsyncSession, obj_in: RegistrationCreate
) -> Registration:
    db_obj = Registration(**obj_in.model_dump())
    async with db_transaction(db):
        db.add(db_obj)
    await db.refresh(db_obj)
    return db_obj


async def update_status(
    db: AsyncSession, registration_id: str, status: RegistrationStatus
) -> bool:
    async with db_transaction(db):
        result = await db.execute(
            update(Registration)
            .where(Registration.id == registration_id)
            .values(status=status)
        )
    return bool(result.rowcount)


async def delete_registration(db: AsyncSession, registration_id: str) -> bool:
    async with db_transaction(db):
        result = await db.execute(
            delete(Registration).where(Registration.id == registration_id)
        )
    return bool(result.rowcount)


async def delete_all_registrations(db: AsyncSession) -> int:
    """Bulk delete in a single statement. Returns the number of rows removed."""
    async with db_transaction(db):
        result = await db.execute(delete(Registration))
    return int(result.rowcount or 0)
