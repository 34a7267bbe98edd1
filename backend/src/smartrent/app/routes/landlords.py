"""Landlord directory: the tenants registered with a landlord."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.app.routes.auth import get_current_principal
from smartrent.domain.enums import Action, UserRole
from smartrent.domain.models import User
from smartrent.domain.schemas import UserResponse
from smartrent.infra.database import get_db
from smartrent.services import permissions
from smartrent.services.credential_verifiers import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/landlords", tags=["landlords"])


@router.get("/{landlord_id}/tenants", response_model=list[UserResponse])
async def list_landlord_tenants(
    landlord_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    permissions.require(
        principal, Action.TENANTS_VIEW, landlord_id, message="Unauthorized to view these tenants"
    )
    result = await db.execute(
        select(User)
        .where(User.role == UserRole.TENANT.value, User.landlord_id == landlord_id)
        .order_by(User.created_at.desc())
    )
    tenants = result.scalars().all()
    logger.info("Returning %d tenants for landlord %s", len(tenants), landlord_id)
    return [UserResponse.model_validate(t) for t in tenants]
