"""Lease lifecycle: creation, client-driven status changes and role-scoped queries.

Every authorization decision is delegated to ``permissions``; every status
change is validated by ``LeaseStateMachine``. Store errors are not caught
here: they propagate to the app-level handler, which logs them and answers
with a generic 500.
"""

import logging
import math
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.domain.enums import Action, LeaseStatus, UserRole
from smartrent.domain.errors import Forbidden, InvalidInput, NotFound
from smartrent.domain.models import Lease, Property, User, utcnow
from smartrent.domain.schemas import LeaseCreate, LeaseResponse
from smartrent.services import permissions
from smartrent.services.credential_verifiers import Principal
from smartrent.services.lease_state_machine import TERMINAL_STATES, LeaseStateMachine

logger = logging.getLogger(__name__)

state_machine = LeaseStateMachine()


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(value: Any, default: float = 0.0) -> float:
    """Permissive float parsing: blank, unparseable or non-finite input collapses to ``default``."""
    if _blank(value):
        return default
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return default
    return amount if math.isfinite(amount) else default


def _parse_date(value: Any, field_name: str) -> date:
    if _blank(value):
        raise InvalidInput(f"{field_name} is required")
    try:
        # Accept full ISO timestamps from date pickers; keep the date part only
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise InvalidInput(f"{field_name} must be an ISO date (YYYY-MM-DD)")


def _parse_due_day(value: Any) -> int:
    if _blank(value):
        return 1
    try:
        day = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("payment_due_day must be an integer")
    if not 1 <= day <= 31:
        raise InvalidInput("payment_due_day must be between 1 and 31")
    return day


def _validated_terms(data: LeaseCreate) -> dict:
    if _blank(data.tenant_id):
        raise InvalidInput("tenant_id is required")

    start_date = _parse_date(data.start_date, "start_date")
    end_date = _parse_date(data.end_date, "end_date")

    if _blank(data.monthly_rent):
        raise InvalidInput("monthly_rent is required")
    try:
        monthly_rent = float(data.monthly_rent)
    except (TypeError, ValueError):
        raise InvalidInput("monthly_rent must be a number")
    if not math.isfinite(monthly_rent):
        raise InvalidInput("monthly_rent must be a number")

    return {
        "start_date": start_date,
        "end_date": end_date,
        "monthly_rent": monthly_rent,
        "security_deposit": parse_amount(data.security_deposit),
        "utilities_cost": parse_amount(data.utilities_cost),
        "payment_due_day": _parse_due_day(data.payment_due_day),
    }


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


def serialize_lease(lease: Lease, prop: Property | None, tenant: User | None) -> LeaseResponse:
    response = LeaseResponse.model_validate(lease)
    if prop is not None:
        response.property_title = prop.title
        response.property_address = prop.address
    if tenant is not None:
        response.tenant_name = tenant.display_name
        response.tenant_email = tenant.email
    return response


async def enrich_leases(db: AsyncSession, leases: list[Lease]) -> list[LeaseResponse]:
    """Attach property title/address and tenant name/email.

    Best-effort: a failed lookup is logged and the lease is returned without
    the enrichment fields.
    """
    properties: dict[str, Property] = {}
    tenants: dict[str, User] = {}
    if leases:
        try:
            prop_ids = {lease.property_id for lease in leases}
            tenant_ids = {lease.tenant_id for lease in leases}
            prop_rows = await db.execute(select(Property).where(Property.id.in_(prop_ids)))
            properties = {p.id: p for p in prop_rows.scalars().all()}
            tenant_rows = await db.execute(select(User).where(User.id.in_(tenant_ids)))
            tenants = {u.id: u for u in tenant_rows.scalars().all()}
        except SQLAlchemyError as e:
            logger.warning("Lease enrichment failed for %d leases: %s", len(leases), e)

    return [
        serialize_lease(lease, properties.get(lease.property_id), tenants.get(lease.tenant_id))
        for lease in leases
    ]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_lease(db: AsyncSession, principal: Principal, data: LeaseCreate) -> LeaseResponse:
    """Create a pending lease. Checks run in a fixed order and fail fast."""
    permissions.require(principal, Action.LEASE_CREATE, message="Only landlords can create leases")

    if _blank(data.property_id):
        raise InvalidInput("property_id is required")
    property_id = str(data.property_id).strip()

    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFound("Property not found")
    permissions.require(principal, Action.LEASE_CREATE, prop, message="You do not own this property")

    terms = _validated_terms(data)

    tenant = await db.get(User, str(data.tenant_id).strip())
    if tenant is None:
        raise NotFound("Tenant not found")
    if tenant.role != UserRole.TENANT.value:
        raise InvalidInput("Selected user is not a tenant")
    permissions.require(
        principal,
        Action.LEASE_ASSIGN_TENANT,
        tenant,
        message="Tenant is not registered with this landlord",
    )

    now = utcnow()
    lease = Lease(
        property_id=prop.id,
        tenant_id=tenant.id,
        landlord_id=prop.landlord_id,
        status=LeaseStatus.PENDING.value,
        notes=data.notes,
        created_at=now,
        updated_at=now,
        **terms,
    )
    db.add(lease)
    await db.commit()
    await db.refresh(lease)

    logger.info(
        "Lease %s created by landlord %s for tenant %s on property %s",
        lease.id, principal.user_id, tenant.id, prop.id,
    )
    return serialize_lease(lease, prop, tenant)


async def update_lease_status(
    db: AsyncSession,
    principal: Principal,
    lease_id: str,
    target: str,
) -> LeaseResponse:
    """Apply a client-requested transition (accept, reject or terminate)."""
    lease = await db.get(Lease, lease_id)
    if lease is None:
        raise NotFound("Lease not found")

    if not permissions.is_lease_party(principal, lease):
        raise Forbidden("You are not a party to this lease")

    try:
        target_status = LeaseStatus(target)
    except ValueError:
        raise InvalidInput(
            f"Unknown lease status '{target}'",
            details={"allowed": [s.value for s in LeaseStatus]},
        )

    current_status = LeaseStatus(lease.status)
    action = state_machine.action_for(current_status, target_status)
    permissions.require(
        principal,
        action,
        lease,
        message=f"You may not move this lease from {current_status.value} to {target_status.value}",
    )

    now = utcnow()
    lease.status = target_status.value
    lease.updated_at = now
    if target_status in TERMINAL_STATES:
        lease.move_out_date = now
    await db.commit()
    await db.refresh(lease)

    logger.info(
        "Lease %s moved %s -> %s by %s",
        lease.id, current_status.value, target_status.value, principal.user_id,
    )
    return (await enrich_leases(db, [lease]))[0]


async def get_lease(db: AsyncSession, principal: Principal, lease_id: str) -> LeaseResponse:
    lease = await db.get(Lease, lease_id)
    if lease is None:
        raise NotFound("Lease not found")
    permissions.require(principal, Action.LEASE_VIEW, lease, message="Unauthorized")
    return (await enrich_leases(db, [lease]))[0]


async def list_leases(
    db: AsyncSession,
    principal: Principal,
    status: str | None = None,
    property_id: str | None = None,
) -> list[LeaseResponse]:
    """Landlords see their leases, tenants theirs, admins all."""
    query = select(Lease)
    if principal.role == UserRole.LANDLORD.value:
        query = query.where(Lease.landlord_id == principal.user_id)
    elif principal.role == UserRole.TENANT.value:
        query = query.where(Lease.tenant_id == principal.user_id)
    elif principal.role != UserRole.ADMIN.value:
        raise Forbidden("Unknown role")

    if status:
        query = query.where(Lease.status == status)
    if property_id:
        query = query.where(Lease.property_id == property_id)

    result = await db.execute(query.order_by(Lease.created_at.desc()))
    return await enrich_leases(db, list(result.scalars().all()))


async def list_property_leases(db: AsyncSession, principal: Principal, property_id: str) -> list[LeaseResponse]:
    """All leases on one property; owning landlord only."""
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFound("Property not found")
    permissions.require(principal, Action.PROPERTY_MANAGE, prop, message="You do not own this property")

    result = await db.execute(
        select(Lease).where(Lease.property_id == prop.id).order_by(Lease.created_at.desc())
    )
    return await enrich_leases(db, list(result.scalars().all()))
