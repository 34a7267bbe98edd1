"""Tests for the lease expiry sweep."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from smartrent.domain.enums import LeaseStatus, PropertyStatus
from smartrent.domain.models import Lease, Property
from smartrent.services.lease_monitor import expire_leases

TODAY = date(2026, 6, 15)
YESTERDAY = TODAY - timedelta(days=1)


@pytest.fixture
async def setup(make_user, make_property):
    landlord = await make_user(role="landlord")
    tenant = await make_user(role="tenant", landlord_id=landlord.id)
    prop = await make_property(landlord, status=PropertyStatus.OCCUPIED.value)
    return landlord, tenant, prop


class TestExpireLeases:

    async def test_expires_overdue_active_lease(self, db_session, setup, make_lease):
        _, tenant, prop = setup
        lease = await make_lease(
            prop, tenant, status=LeaseStatus.ACTIVE.value,
            start_date=date(2025, 6, 15), end_date=YESTERDAY,
        )

        expired = await expire_leases(db_session, today=TODAY)

        assert expired == [lease.id]
        await db_session.refresh(lease)
        await db_session.refresh(prop)
        assert lease.status == LeaseStatus.EXPIRED.value
        assert lease.move_out_date is not None
        assert prop.status == PropertyStatus.AVAILABLE.value

    async def test_lease_ending_today_is_kept(self, db_session, setup, make_lease):
        _, tenant, prop = setup
        lease = await make_lease(prop, tenant, status=LeaseStatus.ACTIVE.value, end_date=TODAY)

        assert await expire_leases(db_session, today=TODAY) == []
        await db_session.refresh(lease)
        assert lease.status == LeaseStatus.ACTIVE.value

    @pytest.mark.parametrize("status", [LeaseStatus.PENDING.value, LeaseStatus.TERMINATED.value])
    async def test_only_active_leases_expire(self, db_session, setup, make_lease, status):
        _, tenant, prop = setup
        lease = await make_lease(prop, tenant, status=status, end_date=YESTERDAY)

        assert await expire_leases(db_session, today=TODAY) == []
        await db_session.refresh(lease)
        await db_session.refresh(prop)
        assert lease.status == status
        assert prop.status == PropertyStatus.OCCUPIED.value

    async def test_second_run_is_a_no_op(self, db_session, setup, make_lease):
        _, tenant, prop = setup
        await make_lease(prop, tenant, status=LeaseStatus.ACTIVE.value, end_date=YESTERDAY)

        first = await expire_leases(db_session, today=TODAY)
        second = await expire_leases(db_session, today=TODAY)

        assert len(first) == 1
        assert second == []

    async def test_only_referenced_properties_freed(self, db_session, setup, make_property, make_lease):
        landlord, tenant, prop = setup
        other = await make_property(landlord, title="Cedar 4", status=PropertyStatus.OCCUPIED.value)
        await make_lease(prop, tenant, status=LeaseStatus.ACTIVE.value, end_date=YESTERDAY)
        await make_lease(other, tenant, status=LeaseStatus.ACTIVE.value, end_date=TODAY + timedelta(days=30))

        await expire_leases(db_session, today=TODAY)

        statuses = {
            p.id: p.status
            for p in (await db_session.execute(select(Property))).scalars().all()
        }
        assert statuses[prop.id] == PropertyStatus.AVAILABLE.value
        assert statuses[other.id] == PropertyStatus.OCCUPIED.value

    async def test_many_leases_one_property(self, db_session, setup, make_lease):
        _, tenant, prop = setup
        for _ in range(3):
            await make_lease(prop, tenant, status=LeaseStatus.ACTIVE.value, end_date=YESTERDAY)

        expired = await expire_leases(db_session, today=TODAY)

        assert len(expired) == 3
        remaining = (await db_session.execute(
            select(Lease).where(Lease.status == LeaseStatus.ACTIVE.value)
        )).scalars().all()
        assert remaining == []

    async def test_store_error_rolls_back_and_raises(self):
        lease = Lease(
            id="l1", property_id="p1", status=LeaseStatus.ACTIVE.value, end_date=YESTERDAY,
        )
        selected = MagicMock()
        selected.scalars.return_value.all.return_value = [lease]

        db = AsyncMock()
        db.execute.side_effect = [selected, OperationalError("UPDATE", {}, Exception("disk I/O error"))]

        with pytest.raises(OperationalError):
            await expire_leases(db, today=TODAY)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
