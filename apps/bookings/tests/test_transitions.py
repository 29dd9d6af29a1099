from datetime import date

import pytest

from apps.bookings.domain.transitions import (
    CANCELLED,
    COMPLETED,
    CONFIRMED,
    PENDING,
    Actor,
    InvalidTransitionError,
    can_transition,
    ensure_transition,
    is_terminal,
)


@pytest.mark.parametrize(
    "current,target",
    [
        (PENDING, CONFIRMED),
        (PENDING, CANCELLED),
        (CONFIRMED, COMPLETED),
        (CONFIRMED, CANCELLED),
    ],
)
def test_allowed_moves(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (PENDING, COMPLETED),
        (CONFIRMED, PENDING),
        (CANCELLED, CONFIRMED),
        (COMPLETED, CANCELLED),
    ],
)
def test_forbidden_moves(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransitionError):
        ensure_transition(current, target, actor=Actor.SYSTEM)


def test_terminal_statuses():
    assert is_terminal(CANCELLED)
    assert is_terminal(COMPLETED)
    assert not is_terminal(PENDING)
    assert not is_terminal(CONFIRMED)


def test_unknown_target_rejected():
    with pytest.raises(InvalidTransitionError):
        ensure_transition(PENDING, "archived", actor=Actor.SYSTEM)


def test_guest_may_only_cancel_pending():
    ensure_transition(PENDING, CANCELLED, actor=Actor.GUEST)
    with pytest.raises(InvalidTransitionError):
        ensure_transition(PENDING, CONFIRMED, actor=Actor.GUEST)
    with pytest.raises(InvalidTransitionError):
        ensure_transition(CONFIRMED, CANCELLED, actor=Actor.GUEST)


def test_host_completion_waits_for_check_out():
    today = date(2030, 5, 10)
    with pytest.raises(InvalidTransitionError):
        ensure_transition(CONFIRMED, COMPLETED, actor=Actor.HOST, check_out=date(2030, 5, 11), today=today)
    ensure_transition(CONFIRMED, COMPLETED, actor=Actor.HOST, check_out=today, today=today)


def test_system_completion_is_not_date_bound():
    ensure_transition(CONFIRMED, COMPLETED, actor=Actor.SYSTEM)
