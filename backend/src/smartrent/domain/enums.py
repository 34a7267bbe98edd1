"""Domain enumerations for SmartRent.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class UserRole(str, Enum):
    """Role attached to every user account."""

    LANDLORD = "landlord"
    TENANT = "tenant"
    ADMIN = "admin"


class PropertyStatus(str, Enum):
    """Availability of a listed property."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class LeaseStatus(str, Enum):
    """Lifecycle status of a lease."""

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class MaintenanceStatus(str, Enum):
    """Progress of a maintenance request."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class LeaseActor(str, Enum):
    """Who is performing a lease transition."""

    TENANT = "tenant"
    LANDLORD = "landlord"
    SYSTEM = "system"


class Action(str, Enum):
    """Actions evaluated by the permission layer."""

    LEASE_CREATE = "lease:create"
    LEASE_ASSIGN_TENANT = "lease:assign_tenant"
    LEASE_VIEW = "lease:view"
    LEASE_ACCEPT = "lease:accept"
    LEASE_REJECT = "lease:reject"
    LEASE_TERMINATE = "lease:terminate"
    PROPERTY_CREATE = "property:create"
    PROPERTY_VIEW = "property:view"
    PROPERTY_MANAGE = "property:manage"
    TENANTS_VIEW = "tenants:view"
    MAINTENANCE_CREATE = "maintenance:create"
    MAINTENANCE_VIEW = "maintenance:view"
    MAINTENANCE_EDIT = "maintenance:edit"
    MAINTENANCE_MANAGE = "maintenance:manage"
    MAINTENANCE_DELETE = "maintenance:delete"
