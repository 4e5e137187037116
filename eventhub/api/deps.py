from typing import Any, AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose.exceptions import JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventhub import crud
from eventhub.models.user import AdminUser
from eventhub.schemas.user import TokenPayload
from eventhub.services.admin_service import AdminOperations

from ..core import security
from ..core.database_manager import db_manager
from ..core.settings import settings
from ..database import async_session_maker
from ..redis import redis_client

reusable_oauth2 = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login")

CREDENTIALS_ERROR = "Could not validate credentials"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with db_manager.get_session() as session:
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    assert async_session_maker is not None
    return async_session_maker


def get_admin_operations(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AdminOperations:
    return AdminOperations(session_factory)


async def get_redis_client() -> Any:
    return redis_client


def _unauthorized(detail: str = CREDENTIALS_ERROR) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_admin(
    db: AsyncSession = Depends(get_db),
    redis: Any = Depends(get_redis_client),
    token: str = Depends(reusable_oauth2),
) -> AdminUser:
    """An admin with an active session: a valid token that is still stored."""
    try:
        token_data = TokenPayload(**security.decode_access_token(token))
    except (JWTError, ValidationError):
        raise _unauthorized()
    if not token_data.sub:
        raise _unauthorized()

    stored = await redis.get(security.session_key(token_data.sub))
    if stored != token:
        raise _unauthorized("Session expired. Please sign in again.")

    admin = await crud.user.get(db, id=token_data.sub)
    if not admin or not crud.user.is_active(admin):
        raise _unauthorized()
    return admin
