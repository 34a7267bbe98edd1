"""Central authorization rules.

Every role and ownership decision goes through ``evaluate(principal, action,
resource)``. An action is allowed when the principal's role may attempt it at
all (``ROLE_ACTIONS``) AND the ownership rule for that action holds against
the resource (``OWNERSHIP_RULES``).

Pure Python logic - no FastAPI imports, no database access.
"""

from typing import Any, Callable

from smartrent.domain.enums import Action, LeaseStatus, MaintenanceStatus, UserRole
from smartrent.domain.errors import Forbidden
from smartrent.services.credential_verifiers import Principal

R = UserRole
A = Action

ROLE_ACTIONS: dict[str, set[Action]] = {
    R.LANDLORD.value: {
        A.LEASE_CREATE,
        A.LEASE_ASSIGN_TENANT,
        A.LEASE_VIEW,
        A.LEASE_TERMINATE,
        A.PROPERTY_CREATE,
        A.PROPERTY_VIEW,
        A.PROPERTY_MANAGE,
        A.TENANTS_VIEW,
        A.MAINTENANCE_VIEW,
        A.MAINTENANCE_MANAGE,
        A.MAINTENANCE_DELETE,
    },
    R.TENANT.value: {
        A.LEASE_VIEW,
        A.LEASE_ACCEPT,
        A.LEASE_REJECT,
        A.LEASE_TERMINATE,
        A.PROPERTY_VIEW,
        A.MAINTENANCE_CREATE,
        A.MAINTENANCE_VIEW,
        A.MAINTENANCE_EDIT,
        A.MAINTENANCE_DELETE,
    },
    # Admins read everything but are never a party to a lease transition
    R.ADMIN.value: {
        A.LEASE_VIEW,
        A.PROPERTY_VIEW,
        A.TENANTS_VIEW,
        A.MAINTENANCE_VIEW,
    },
}


def _is_admin(principal: Principal) -> bool:
    return principal.role == R.ADMIN.value


def _owns(principal: Principal, resource: Any) -> bool:
    """Resource (property or tenant user) belongs to the principal as landlord."""
    return resource is not None and resource.landlord_id == principal.user_id


def _is_lease_tenant(principal: Principal, lease: Any) -> bool:
    return lease.tenant_id == principal.user_id


def _is_lease_party(principal: Principal, record: Any) -> bool:
    """Tenant or landlord of a lease (or of a maintenance request filed under one)."""
    return principal.user_id in (record.tenant_id, record.landlord_id)


def _can_file_request(principal: Principal, lease: Any) -> bool:
    """Tenants file maintenance requests only against a lease they currently hold."""
    return lease is None or (_is_lease_tenant(principal, lease) and lease.status == LeaseStatus.ACTIVE.value)


def _is_pending_requester(principal: Principal, request: Any) -> bool:
    return request.tenant_id == principal.user_id and request.status == MaintenanceStatus.PENDING.value


def _can_delete_request(principal: Principal, request: Any) -> bool:
    if principal.role == R.LANDLORD.value:
        return _owns(principal, request)
    return _is_pending_requester(principal, request)


def _can_view_property(principal: Principal, prop: Any) -> bool:
    if _is_admin(principal):
        return True
    # Tenants see the listings of the landlord they are registered with
    return prop.landlord_id in (principal.user_id, principal.landlord_id)


def _can_view_tenants(principal: Principal, landlord_id: str) -> bool:
    return _is_admin(principal) or landlord_id == principal.user_id


OWNERSHIP_RULES: dict[Action, Callable[[Principal, Any], bool]] = {
    A.LEASE_CREATE: lambda p, prop: prop is None or _owns(p, prop),
    A.LEASE_ASSIGN_TENANT: _owns,
    A.LEASE_VIEW: lambda p, lease: _is_admin(p) or _is_lease_party(p, lease),
    A.LEASE_ACCEPT: _is_lease_tenant,
    A.LEASE_REJECT: _is_lease_tenant,
    A.LEASE_TERMINATE: _is_lease_party,
    A.PROPERTY_CREATE: lambda p, _: True,
    A.PROPERTY_VIEW: _can_view_property,
    A.PROPERTY_MANAGE: _owns,
    A.TENANTS_VIEW: _can_view_tenants,
    A.MAINTENANCE_CREATE: _can_file_request,
    A.MAINTENANCE_VIEW: lambda p, request: _is_admin(p) or _is_lease_party(p, request),
    A.MAINTENANCE_EDIT: _is_pending_requester,
    A.MAINTENANCE_MANAGE: _owns,
    A.MAINTENANCE_DELETE: _can_delete_request,
}


def evaluate(principal: Principal, action: Action, resource: Any = None) -> bool:
    """Return True if ``principal`` may perform ``action`` on ``resource``."""
    if action not in ROLE_ACTIONS.get(principal.role, set()):
        return False
    rule = OWNERSHIP_RULES.get(action)
    if rule is None:
        return False
    return rule(principal, resource)


def require(
    principal: Principal,
    action: Action,
    resource: Any = None,
    message: str | None = None,
) -> None:
    """Raise Forbidden unless ``evaluate`` allows the action."""
    if not evaluate(principal, action, resource):
        raise Forbidden(message or f"Not permitted to perform {action.value}")


def is_lease_party(principal: Principal, lease: Any) -> bool:
    """True if the principal is the lease's tenant or its landlord, whatever their role."""
    return _is_lease_party(principal, lease)
