"""Background job: expire active leases whose end date has passed."""

import logging
from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.domain.enums import LeaseActor, LeaseStatus, PropertyStatus
from smartrent.domain.models import Lease, Property, utcnow
from smartrent.services.lease_state_machine import LeaseStateMachine

logger = logging.getLogger(__name__)

state_machine = LeaseStateMachine()


async def expire_leases(db: AsyncSession, today: date | None = None) -> list[str]:
    """Mark every active lease with ``end_date < today`` as expired.

    The properties of the expired leases are set back to available in the
    same transaction. Only active leases are selected, so re-running the job
    never touches a lease twice. Returns the ids of the leases it expired.
    """
    today = today or datetime.now(timezone.utc).date()

    result = await db.execute(
        select(Lease).where(
            Lease.status == LeaseStatus.ACTIVE.value,
            Lease.end_date < today,
        )
    )
    leases = result.scalars().all()
    if not leases:
        return []

    now = utcnow()
    property_ids: set[str] = set()
    try:
        for lease in leases:
            state_machine.validate_transition(LeaseStatus.ACTIVE, LeaseStatus.EXPIRED, LeaseActor.SYSTEM)
            lease.status = LeaseStatus.EXPIRED.value
            lease.updated_at = now
            lease.move_out_date = now
            property_ids.add(lease.property_id)

        await db.execute(
            update(Property)
            .where(Property.id.in_(property_ids))
            .values(status=PropertyStatus.AVAILABLE.value, updated_at=now)
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    expired_ids = [lease.id for lease in leases]
    logger.info(
        "Expired %d leases (end_date < %s); %d properties set available",
        len(expired_ids), today.isoformat(), len(property_ids),
    )
    return expired_ids
