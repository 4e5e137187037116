import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub import crud
from eventhub.api import deps
from eventhub.core import security
from eventhub.core.settings import settings
from eventhub.models.user import AdminUser
from eventhub.schemas.user import AdminCreate, Token
from eventhub.schemas.user import AdminUser as AdminUserSchema

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=AdminUserSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Admin Sign Up",
)  # type: ignore[misc]
async def signup(
    admin_in: AdminCreate,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    **Create an Admin Account**

    Available while open registration is enabled (`USERS_OPEN_REGISTRATION`).

    **Errors:**
    - `400`: An account with this email already exists
    - `403`: Sign-up is closed
    - `422`: Invalid email or password too short
    """
    if not settings.USERS_OPEN_REGISTRATION:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Open sign-up is disabled",
        )
    existing = await crud.user.get_by_email(db, email=admin_in.email)
    if existing:
        raise HTTPException(
            status_code=400, detail="An account with this email already exists"
        )
    admin = await crud.user.create(db, obj_in=admin_in)
    logger.info(f"Admin account created: {admin.email}")
    return admin


@router.post("/login", response_model=Token, summary="Admin Login")  # type: ignore[misc]
async def login(
    db: AsyncSession = Depends(deps.get_db),
    redis_client: Any = Depends(deps.get_redis_client),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    **Sign In and Start a Session**

    OAuth2 password form (`username` is the email). The returned bearer
    token stays valid until it expires or the admin logs out.

    **Example Request:**
    ```bash
    curl -X POST "/api/v1/auth/login" \\
         -H "Content-Type: application/x-www-form-urlencoded" \\
         -d "username=admin@example.com&password=secret123"
    ```

    **Errors:**
    - `400`: Incorrect email or password, or inactive account
    """
    admin = await crud.user.authenticate(
        db, email=form_data.username, password=form_data.password
    )
    if not admin:
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    elif not crud.user.is_active(admin):
        raise HTTPException(status_code=400, detail="Inactive user")

    expires = timedelta(minutes=settings.security.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(admin.id, expires_delta=expires)
    await redis_client.set(security.session_key(admin.id), access_token, ex=expires)
    await crud.user.record_login(db, db_obj=admin)

    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", summary="Admin Logout")  # type: ignore[misc]
async def logout(
    current_admin: AdminUser = Depends(deps.get_current_admin),
    redis_client: Any = Depends(deps.get_redis_client),
) -> Any:
    """End the current session. The token stops working immediately."""
    await redis_client.delete(security.session_key(current_admin.id))
    return {"message": "Successfully logged out"}


@router.get("/session", response_model=AdminUserSchema, summary="Current Session")  # type: ignore[misc]
async def read_session(
    current_admin: AdminUser = Depends(deps.get_current_admin),
) -> Any:
    """The signed-in admin. `401` when there is no active session."""
    return current_admin
