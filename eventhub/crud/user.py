from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.db_utils import db_transaction, translate_store_errors
from eventhub.models.user import AdminUser
from eventhub.schemas.user import AdminCreate

from ..core.security import get_password_hash, verify_password


async def get(db: AsyncSession, id: Any) -> Optional[AdminUser]:
    async with translate_store_errors():
        result = await db.execute(select(AdminUser).filter(AdminUser.id == id))
    first: Optional[AdminUser] = result.scalars().first()
    return first


async def get_by_email(db: AsyncSession, *, email: str) -> Optional[AdminUser]:
    async with translate_store_errors():
        result = await db.execute(select(AdminUser).filter(AdminUser.email == email))
    first: Optional[AdminUser] = result.scalars().first()
    return first


async def create(db: AsyncSession, *, obj_in: AdminCreate) -> AdminUser:
    db_obj = AdminUser(
        email=obj_in.email,
        hashed_password=get_password_hash(obj_in.password),
    )
    async with db_transaction(db):
        db.add(db_obj)
    await db.refresh(db_obj)
    return db_obj


async def authenticate(
    db: AsyncSession, *, email: str, password: str
) -> Optional[AdminUser]:
    user = await get_by_email(db, email=email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def record_login(db: AsyncSession, *, db_obj: AdminUser) -> AdminUser:
    db_obj.last_login = datetime.now(timezone.utc)
    async with db_transaction(db):
        db.add(db_obj)
    await db.refresh(db_obj)
    return db_obj


def is_active(user: AdminUser) -> bool:
    return user.is_active
