"""Authentication routes and dependencies: register, login, federated register, me."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.app.context import AppContext, get_context
from smartrent.domain.enums import UserRole
from smartrent.domain.errors import Forbidden, InvalidCredential, InvalidInput
from smartrent.domain.models import User, utcnow
from smartrent.domain.schemas import (
    FirebaseRegister,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from smartrent.infra.database import get_db
from smartrent.services.auth_service import (
    create_user,
    find_registered_user,
    get_user_by_email,
    get_user_by_id,
    verify_password,
)
from smartrent.services.credential_verifiers import FederatedIdentity, Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

SELF_REGISTER_ROLES = {UserRole.LANDLORD.value, UserRole.TENANT.value}
FEDERATED_REGISTER_ROLES = {r.value for r in UserRole}


async def get_current_principal(
    request: Request,
    db: AsyncSession = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Principal:
    """Dependency: authenticate the Bearer token (Firebase first, then local)."""
    return await ctx.gateway.authenticate(request.headers.get("Authorization"), db)


async def get_federated_identity(
    request: Request,
    ctx: AppContext = Depends(get_context),
) -> FederatedIdentity:
    """Dependency: verify a Firebase token without requiring a local user."""
    return await ctx.gateway.identity_only(request.headers.get("Authorization"))


def require_role(*roles: str):
    """Factory: dependency that checks the principal has one of the required roles."""

    async def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise Forbidden(f"Access denied. {' or '.join(r.capitalize() for r in roles)} role required.")
        return principal

    return checker


async def _resolve_landlord(db: AsyncSession, landlord_id: str | None) -> str | None:
    """Return ``landlord_id`` if it names a landlord, else None (never an error)."""
    if not landlord_id:
        return None
    landlord = await get_user_by_id(db, landlord_id)
    if landlord is None or landlord.role != UserRole.LANDLORD.value:
        logger.warning("Ignoring invalid landlord reference %s during registration", landlord_id)
        return None
    return landlord.id


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    if not data.username or not data.email or not data.password:
        raise InvalidInput("Username, email, and password are required")
    if await find_registered_user(db, data.email, data.username):
        raise InvalidInput("User already exists with this email or username")

    role = data.role if data.role in SELF_REGISTER_ROLES else UserRole.TENANT.value
    landlord_id = None
    if role == UserRole.TENANT.value:
        landlord_id = await _resolve_landlord(db, data.landlord_id)

    user = await create_user(
        db,
        email=data.email,
        role=role,
        username=data.username,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        landlord_id=landlord_id,
    )
    logger.info("Registered %s user %s", role, user.id)
    return TokenResponse(access_token=ctx.tokens.issue(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    user = await get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("Login failed for %s", data.email)
        raise InvalidCredential("Invalid credentials")
    return TokenResponse(access_token=ctx.tokens.issue(user), user=UserResponse.model_validate(user))


@router.post("/firebase-register", response_model=UserResponse)
async def firebase_register(
    data: FirebaseRegister,
    identity: FederatedIdentity = Depends(get_federated_identity),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the local user for a verified Firebase identity."""
    role = data.role if data.role in FEDERATED_REGISTER_ROLES else UserRole.TENANT.value
    landlord_id = None
    if role == UserRole.TENANT.value:
        landlord_id = await _resolve_landlord(db, data.landlord_code)

    existing = await get_user_by_id(db, identity.uid)
    if existing is None and identity.email:
        existing = await get_user_by_email(db, identity.email)

    if existing is None:
        user = await create_user(
            db,
            email=identity.email,
            role=role,
            username=data.username or data.first_name or identity.name or identity.email.split("@")[0],
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            landlord_id=landlord_id,
            user_id=identity.uid,
        )
        logger.info("Federated registration created user %s (%s)", user.id, role)
        return UserResponse.model_validate(user)

    existing.username = data.username or existing.username
    existing.role = role
    existing.phone = data.phone or existing.phone
    # A tenant's landlord is fixed once set
    if landlord_id and not existing.landlord_id:
        existing.landlord_id = landlord_id
    existing.updated_at = utcnow()
    await db.commit()
    await db.refresh(existing)
    logger.info("Federated registration updated user %s", existing.id)
    return UserResponse.model_validate(existing)


@router.get("/me", response_model=UserResponse)
async def me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_by_id(db, principal.user_id)
    return UserResponse.model_validate(user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    data: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidInput("No fields to update")

    user: User = await get_user_by_id(db, principal.user_id)
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)
