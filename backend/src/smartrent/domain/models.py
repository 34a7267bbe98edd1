"""SQLAlchemy ORM models for SmartRent.

All models use SQLite-compatible types:
- String(128) for primary keys (local UUIDs or Firebase UIDs)
- Date for lease bounds (no time-of-day component)
- DateTime for timestamps (no TIMESTAMPTZ)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)

from smartrent.domain.enums import LeaseStatus, MaintenancePriority, MaintenanceStatus, PropertyStatus, UserRole
from smartrent.infra.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Auth / User
# ---------------------------------------------------------------------------


class User(Base):
    """Portal user. Tenants carry a back-reference to the landlord who onboarded them."""

    __tablename__ = "users"

    id = Column(String(128), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=True)  # null for federated-only accounts
    role = Column(String(20), nullable=False, default=UserRole.TENANT.value)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    landlord_id = Column(String(128), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return self.username or full or self.email.split("@")[0]


# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


class Property(Base):
    """Rentable unit owned by exactly one landlord."""

    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=_uuid)
    landlord_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(20), nullable=True)
    property_type = Column(String(50), nullable=False, default="apartment")
    bedrooms = Column(Integer, default=0)
    bathrooms = Column(Float, default=0)
    square_feet = Column(Integer, default=0)
    rent_amount = Column(Float, default=0)
    status = Column(String(20), nullable=False, default=PropertyStatus.AVAILABLE.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Lease
# ---------------------------------------------------------------------------


class Lease(Base):
    """Rental agreement linking a property, a tenant and the property's landlord.

    ``landlord_id`` is denormalized from the property at creation time.
    """

    __tablename__ = "leases"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    landlord_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    monthly_rent = Column(Float, nullable=False)
    security_deposit = Column(Float, default=0)
    utilities_cost = Column(Float, default=0)
    payment_due_day = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=LeaseStatus.PENDING.value, index=True)
    notes = Column(Text, nullable=True)
    move_out_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


class MaintenanceRequest(Base):
    """Repair request filed by a tenant against a property they lease.

    ``landlord_id`` is copied from the property when the request is filed.
    """

    __tablename__ = "maintenance_requests"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    landlord_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, default="other")
    priority = Column(String(20), nullable=False, default=MaintenancePriority.MEDIUM.value)
    status = Column(String(20), nullable=False, default=MaintenanceStatus.PENDING.value, index=True)
    assigned_to = Column(String(255), nullable=True)
    estimated_cost = Column(Float, nullable=True)
    actual_cost = Column(Float, nullable=True)
    scheduled_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
