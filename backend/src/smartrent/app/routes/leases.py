"""Lease API endpoints.

Role filtering, ownership checks and the state machine all live in
``lease_service``; these handlers only wire HTTP to it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.app.routes.auth import get_current_principal, require_role
from smartrent.domain.enums import UserRole
from smartrent.domain.schemas import LeaseCreate, LeaseResponse, LeaseStatusUpdate
from smartrent.infra.database import get_db
from smartrent.services import lease_service
from smartrent.services.credential_verifiers import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leases", tags=["leases"])


@router.get("", response_model=list[LeaseResponse])
async def list_leases(
    status: Optional[str] = Query(None),
    property_id: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await lease_service.list_leases(db, principal, status=status, property_id=property_id)


@router.post("", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
async def create_lease(
    data: LeaseCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await lease_service.create_lease(db, principal, data)


@router.get("/property/{property_id}", response_model=list[LeaseResponse])
async def list_property_leases(
    property_id: str,
    principal: Principal = Depends(require_role(UserRole.LANDLORD.value)),
    db: AsyncSession = Depends(get_db),
):
    return await lease_service.list_property_leases(db, principal, property_id)


@router.get("/{lease_id}", response_model=LeaseResponse)
async def get_lease(
    lease_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await lease_service.get_lease(db, principal, lease_id)


@router.patch("/{lease_id}/status", response_model=LeaseResponse)
async def update_lease_status(
    lease_id: str,
    body: LeaseStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await lease_service.update_lease_status(db, principal, lease_id, body.status)
