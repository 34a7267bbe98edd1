"""Maintenance requests: tenants file them, landlords work them.

Ownership and status gates are evaluated by ``permissions`` like every other
resource. Which fields an update may touch depends on the caller's role:
tenants edit the description of a request until the landlord picks it up,
landlords manage scheduling, costs and status.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.domain.enums import Action, LeaseStatus, MaintenancePriority, MaintenanceStatus, UserRole
from smartrent.domain.errors import Forbidden, InvalidInput, NotFound
from smartrent.domain.models import Lease, MaintenanceRequest, Property, User, utcnow
from smartrent.domain.schemas import MaintenanceCreate, MaintenanceResponse, MaintenanceUpdate
from smartrent.services import permissions
from smartrent.services.credential_verifiers import Principal

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "other"

TENANT_FIELDS = {"title", "description", "category", "priority"}
LANDLORD_FIELDS = {
    "status",
    "assigned_to",
    "estimated_cost",
    "actual_cost",
    "scheduled_date",
    "completed_date",
    "notes",
    "priority",
}

_STATUSES = {s.value for s in MaintenanceStatus}
_PRIORITIES = {p.value for p in MaintenancePriority}


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _check_choice(field_name: str, value: str | None, allowed: set[str]) -> None:
    if value is not None and value not in allowed:
        raise InvalidInput(
            f"{field_name} must be one of: {', '.join(sorted(allowed))}",
            details={"allowed": sorted(allowed)},
        )


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


async def enrich_requests(db: AsyncSession, requests: list[MaintenanceRequest]) -> list[MaintenanceResponse]:
    """Attach property title/address and tenant/landlord display names.

    Best-effort, like lease enrichment: a failed lookup leaves the fields empty.
    """
    properties: dict[str, Property] = {}
    users: dict[str, User] = {}
    if requests:
        try:
            prop_ids = {r.property_id for r in requests}
            user_ids = {r.tenant_id for r in requests} | {r.landlord_id for r in requests}
            prop_rows = await db.execute(select(Property).where(Property.id.in_(prop_ids)))
            properties = {p.id: p for p in prop_rows.scalars().all()}
            user_rows = await db.execute(select(User).where(User.id.in_(user_ids)))
            users = {u.id: u for u in user_rows.scalars().all()}
        except SQLAlchemyError as e:
            logger.warning("Maintenance enrichment failed for %d requests: %s", len(requests), e)

    responses = []
    for request in requests:
        response = MaintenanceResponse.model_validate(request)
        prop = properties.get(request.property_id)
        if prop is not None:
            response.property_title = prop.title
            response.property_address = prop.address
        if request.tenant_id in users:
            response.tenant_name = users[request.tenant_id].display_name
        if request.landlord_id in users:
            response.landlord_name = users[request.landlord_id].display_name
        responses.append(response)
    return responses


async def _load(db: AsyncSession, principal: Principal, request_id: str) -> MaintenanceRequest:
    request = await db.get(MaintenanceRequest, request_id)
    if request is None:
        raise NotFound("Maintenance request not found")
    permissions.require(principal, Action.MAINTENANCE_VIEW, request, message="Unauthorized")
    return request


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_request(
    db: AsyncSession, principal: Principal, data: MaintenanceCreate
) -> MaintenanceResponse:
    """File a pending request. The tenant must hold an active lease on the property."""
    permissions.require(
        principal, Action.MAINTENANCE_CREATE, message="Only tenants can create maintenance requests"
    )

    if _blank(data.property_id) or _blank(data.title) or _blank(data.description):
        raise InvalidInput("Missing required fields: property_id, title and description")
    _check_choice("priority", data.priority or None, _PRIORITIES)

    prop = await db.get(Property, data.property_id.strip())
    if prop is None:
        raise NotFound("Property not found")

    result = await db.execute(
        select(Lease).where(
            Lease.property_id == prop.id,
            Lease.tenant_id == principal.user_id,
            Lease.status == LeaseStatus.ACTIVE.value,
        )
    )
    lease = result.scalars().first()
    no_lease = "You do not have an active lease for this property"
    if lease is None:
        raise Forbidden(no_lease)
    permissions.require(principal, Action.MAINTENANCE_CREATE, lease, message=no_lease)

    now = utcnow()
    request = MaintenanceRequest(
        property_id=prop.id,
        tenant_id=principal.user_id,
        landlord_id=prop.landlord_id,
        title=data.title.strip(),
        description=data.description,
        category=data.category or DEFAULT_CATEGORY,
        priority=data.priority or MaintenancePriority.MEDIUM.value,
        status=MaintenanceStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)

    logger.info(
        "Maintenance request %s filed by tenant %s on property %s (%s)",
        request.id, principal.user_id, prop.id, request.priority,
    )
    return (await enrich_requests(db, [request]))[0]


async def get_request(db: AsyncSession, principal: Principal, request_id: str) -> MaintenanceResponse:
    request = await _load(db, principal, request_id)
    return (await enrich_requests(db, [request]))[0]


async def list_requests(
    db: AsyncSession,
    principal: Principal,
    property_id: str | None = None,
    status: str | None = None,
    priority: str | None = None,
) -> list[MaintenanceResponse]:
    """Tenants see the requests they filed, landlords those on their properties, admins all."""
    query = select(MaintenanceRequest)
    if principal.role == UserRole.TENANT.value:
        query = query.where(MaintenanceRequest.tenant_id == principal.user_id)
    elif principal.role == UserRole.LANDLORD.value:
        query = query.where(MaintenanceRequest.landlord_id == principal.user_id)
    elif principal.role != UserRole.ADMIN.value:
        raise Forbidden("Unknown role")

    if property_id:
        query = query.where(MaintenanceRequest.property_id == property_id)
    if status:
        query = query.where(MaintenanceRequest.status == status)
    if priority:
        query = query.where(MaintenanceRequest.priority == priority)

    result = await db.execute(query.order_by(MaintenanceRequest.created_at.desc()))
    return await enrich_requests(db, list(result.scalars().all()))


async def update_request(
    db: AsyncSession,
    principal: Principal,
    request_id: str,
    data: MaintenanceUpdate,
) -> MaintenanceResponse:
    request = await _load(db, principal, request_id)

    if principal.role == UserRole.LANDLORD.value:
        permissions.require(principal, Action.MAINTENANCE_MANAGE, request, message="Unauthorized")
        allowed = LANDLORD_FIELDS
    elif principal.role == UserRole.TENANT.value:
        permissions.require(
            principal,
            Action.MAINTENANCE_EDIT,
            request,
            message="Cannot update request after it has been processed",
        )
        allowed = TENANT_FIELDS
    else:
        raise Forbidden("Only the tenant or landlord can update a maintenance request")

    # Fields outside the caller's set are ignored rather than rejected
    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items()
        if key in allowed
    }
    if not changes:
        raise InvalidInput("No fields to update")
    _check_choice("status", changes.get("status"), _STATUSES)
    _check_choice("priority", changes.get("priority"), _PRIORITIES)

    previous_status = request.status
    for key, value in changes.items():
        setattr(request, key, value)
    if request.status == MaintenanceStatus.COMPLETED.value and request.completed_date is None:
        request.completed_date = date.today()
    request.updated_at = utcnow()
    await db.commit()
    await db.refresh(request)

    if request.status != previous_status:
        logger.info(
            "Maintenance request %s moved %s -> %s by %s",
            request.id, previous_status, request.status, principal.user_id,
        )
    return (await enrich_requests(db, [request]))[0]


async def delete_request(db: AsyncSession, principal: Principal, request_id: str) -> None:
    request = await _load(db, principal, request_id)
    message = (
        "Can only delete pending requests" if principal.role == UserRole.TENANT.value else "Unauthorized"
    )
    permissions.require(principal, Action.MAINTENANCE_DELETE, request, message=message)

    await db.delete(request)
    await db.commit()
    logger.info("Maintenance request %s deleted by %s", request_id, principal.user_id)
