"""Property endpoints. Only the owning landlord may change or delete a listing."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.app.routes.auth import get_current_principal, require_role
from smartrent.domain.enums import UserRole
from smartrent.domain.schemas import PropertyCreate, PropertyResponse, PropertyUpdate
from smartrent.infra.database import get_db
from smartrent.services import property_service
from smartrent.services.credential_verifiers import Principal

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.get("", response_model=list[PropertyResponse])
async def list_properties(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.list_properties(db, principal)


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    data: PropertyCreate,
    principal: Principal = Depends(require_role(UserRole.LANDLORD.value)),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.create_property(db, principal, data)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.get_property(db, principal, property_id)


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: str,
    data: PropertyUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.update_property(db, principal, property_id, data)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await property_service.delete_property(db, principal, property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
