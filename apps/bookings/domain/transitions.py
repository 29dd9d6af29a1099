"""
Booking Status State Machine

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled
    cancelled, completed -> (terminal)

Which side may request a move:

- host:   accept (pending -> confirmed), decline (pending -> cancelled),
          cancel a confirmed stay, complete it on or after the check-out date
- guest:  cancel a pending request
- system: payment verification and scheduled maintenance, any move in
          the table

Pure functions over status strings; persistence lives in the services module.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
COMPLETED = "completed"

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, CANCELLED}),
    CANCELLED: frozenset(),
    COMPLETED: frozenset(),
}


class Actor(str, Enum):
    HOST = "host"
    GUEST = "guest"
    SYSTEM = "system"


ACTOR_TRANSITIONS: dict[Actor, frozenset[tuple[str, str]]] = {
    Actor.HOST: frozenset(
        {
            (PENDING, CONFIRMED),
            (PENDING, CANCELLED),
            (CONFIRMED, CANCELLED),
            (CONFIRMED, COMPLETED),
        }
    ),
    Actor.GUEST: frozenset({(PENDING, CANCELLED)}),
    Actor.SYSTEM: frozenset(
        (current, target) for current, targets in ALLOWED_TRANSITIONS.items() for target in targets
    ),
}


class InvalidTransitionError(Exception):
    """Raised when a status change is not allowed."""


def is_terminal(status: str) -> bool:
    return status in ALLOWED_TRANSITIONS and not ALLOWED_TRANSITIONS[status]


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(
    current: str,
    target: str,
    *,
    actor: Actor,
    check_out: date | None = None,
    today: date | None = None,
) -> None:
    """Raise InvalidTransitionError unless ``actor`` may move ``current`` to ``target``."""

    if target not in ALLOWED_TRANSITIONS:
        raise InvalidTransitionError(f"Unknown booking status: {target}.")

    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot change booking status from {current} to {target}.")

    if (current, target) not in ACTOR_TRANSITIONS[actor]:
        raise InvalidTransitionError(f"The {actor.value} cannot change booking status from {current} to {target}.")

    if target == COMPLETED and actor is Actor.HOST:
        if check_out is None or today is None or check_out > today:
            raise InvalidTransitionError("A booking can only be completed on or after the check-out date.")
