"""Property CRUD scoped to the owning landlord."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.domain.enums import Action, PropertyStatus, UserRole
from smartrent.domain.errors import InvalidInput, NotFound
from smartrent.domain.models import Lease, Property, utcnow
from smartrent.domain.schemas import PropertyCreate, PropertyUpdate
from smartrent.services import permissions
from smartrent.services.credential_verifiers import Principal

logger = logging.getLogger(__name__)

_STATUSES = {s.value for s in PropertyStatus}


def _check_status(status: str | None) -> None:
    if status is not None and status not in _STATUSES:
        raise InvalidInput(f"status must be one of: {', '.join(sorted(_STATUSES))}")


async def create_property(db: AsyncSession, principal: Principal, data: PropertyCreate) -> Property:
    permissions.require(principal, Action.PROPERTY_CREATE, message="Only landlords can create properties")
    _check_status(data.status)

    prop = Property(landlord_id=principal.user_id, **data.model_dump())
    db.add(prop)
    await db.commit()
    await db.refresh(prop)
    logger.info("Property %s created by landlord %s", prop.id, principal.user_id)
    return prop


async def get_property(db: AsyncSession, principal: Principal, property_id: str) -> Property:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFound("Property not found")
    permissions.require(principal, Action.PROPERTY_VIEW, prop, message="Unauthorized")
    return prop


async def list_properties(db: AsyncSession, principal: Principal) -> list[Property]:
    """Landlords see their own listings, tenants the properties they lease, admins everything."""
    query = select(Property)
    if principal.role == UserRole.LANDLORD.value:
        query = query.where(Property.landlord_id == principal.user_id)
    elif principal.role == UserRole.TENANT.value:
        leased = select(Lease.property_id).where(Lease.tenant_id == principal.user_id)
        query = query.where(Property.id.in_(leased))
    result = await db.execute(query.order_by(Property.created_at.desc()))
    return list(result.scalars().all())


async def update_property(
    db: AsyncSession, principal: Principal, property_id: str, data: PropertyUpdate
) -> Property:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFound("Property not found")
    permissions.require(principal, Action.PROPERTY_MANAGE, prop, message="You do not own this property")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidInput("No fields to update")
    _check_status(changes.get("status"))

    # landlord_id is not part of PropertyUpdate, so ownership can't change here
    for key, value in changes.items():
        setattr(prop, key, value)
    prop.updated_at = utcnow()
    await db.commit()
    await db.refresh(prop)
    return prop


async def delete_property(db: AsyncSession, principal: Principal, property_id: str) -> None:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFound("Property not found")
    permissions.require(principal, Action.PROPERTY_MANAGE, prop, message="You do not own this property")

    await db.delete(prop)
    await db.commit()
    logger.info("Property %s deleted by landlord %s", property_id, principal.user_id)
