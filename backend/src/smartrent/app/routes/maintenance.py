"""Maintenance request endpoints.

Who may file, see, edit or delete a request is decided in
``maintenance_service``; these handlers only wire HTTP to it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.app.routes.auth import get_current_principal
from smartrent.domain.schemas import MaintenanceCreate, MaintenanceResponse, MaintenanceUpdate
from smartrent.infra.database import get_db
from smartrent.services import maintenance_service
from smartrent.services.credential_verifiers import Principal

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


@router.get("", response_model=list[MaintenanceResponse])
async def list_requests(
    property_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await maintenance_service.list_requests(
        db, principal, property_id=property_id, status=status, priority=priority
    )


@router.post("", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    data: MaintenanceCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await maintenance_service.create_request(db, principal, data)


@router.get("/{request_id}", response_model=MaintenanceResponse)
async def get_request(
    request_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await maintenance_service.get_request(db, principal, request_id)


@router.put("/{request_id}", response_model=MaintenanceResponse)
async def update_request(
    request_id: str,
    data: MaintenanceUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await maintenance_service.update_request(db, principal, request_id, data)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_request(
    request_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await maintenance_service.delete_request(db, principal, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
