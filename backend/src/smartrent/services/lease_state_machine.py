"""Lease state machine: validates transitions and maps them to permission actions.

pending --tenant accept--> active --sweep--> expired
   |                          |
   +--tenant reject--> terminated <--tenant or landlord--+
"""

from smartrent.domain.enums import Action, LeaseActor, LeaseStatus
from smartrent.domain.errors import InvalidTransition

S = LeaseStatus
A = LeaseActor

# ---------------------------------------------------------------------------
# Transition map: from_status -> {to_status: set_of_allowed_actors}
# ---------------------------------------------------------------------------

TRANSITION_MAP: dict[LeaseStatus, dict[LeaseStatus, set[LeaseActor]]] = {
    S.PENDING: {
        S.ACTIVE: {A.TENANT},
        S.TERMINATED: {A.TENANT},
    },
    S.ACTIVE: {
        S.TERMINATED: {A.TENANT, A.LANDLORD},
        S.EXPIRED: {A.SYSTEM},
    },
}

# Permission action guarding each client-invocable edge
TRANSITION_ACTIONS: dict[tuple[LeaseStatus, LeaseStatus], Action] = {
    (S.PENDING, S.ACTIVE): Action.LEASE_ACCEPT,
    (S.PENDING, S.TERMINATED): Action.LEASE_REJECT,
    (S.ACTIVE, S.TERMINATED): Action.LEASE_TERMINATE,
}

TERMINAL_STATES: set[LeaseStatus] = {S.EXPIRED, S.TERMINATED}


class LeaseStateMachine:
    """Validates lease state transitions."""

    def is_client_transition(self, current_status: LeaseStatus, target_status: LeaseStatus) -> bool:
        """True if some non-system actor may ever take this edge."""
        actors = TRANSITION_MAP.get(current_status, {}).get(target_status)
        return bool(actors) and actors != {A.SYSTEM}

    def action_for(self, current_status: LeaseStatus, target_status: LeaseStatus) -> Action:
        """Return the permission action for a client-requested transition.

        Raises InvalidTransition for edges that do not exist or that only the
        expiry sweep may take.
        """
        if current_status in TERMINAL_STATES:
            raise InvalidTransition(
                current_status.value,
                target_status.value,
                f"{current_status.value} is a terminal state",
            )
        if not self.is_client_transition(current_status, target_status):
            raise InvalidTransition(current_status.value, target_status.value)
        return TRANSITION_ACTIONS[(current_status, target_status)]

    def validate_transition(
        self,
        current_status: LeaseStatus,
        target_status: LeaseStatus,
        actor: LeaseActor,
    ) -> bool:
        """Return True if ``actor`` may move a lease between the two states."""
        allowed_targets = TRANSITION_MAP.get(current_status)
        if allowed_targets is None:
            raise InvalidTransition(
                current_status.value,
                target_status.value,
                f"No transitions allowed from {current_status.value}",
            )
        if target_status not in allowed_targets:
            raise InvalidTransition(current_status.value, target_status.value)

        allowed_actors = allowed_targets[target_status]
        if actor not in allowed_actors:
            raise InvalidTransition(
                current_status.value,
                target_status.value,
                f"Actor {actor.value} is not permitted for this transition "
                f"(allowed: {', '.join(sorted(a.value for a in allowed_actors))})",
            )
        return True
