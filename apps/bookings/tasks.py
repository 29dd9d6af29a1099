"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Mark confirmed stays as completed once their check-out date arrives.

    Runs hourly.

    Returns:
        dict: {"completed": number of bookings completed}
    """
    completed = services.complete_finished_bookings()
    if completed:
        logger.info(f"Completed {completed} bookings")
    return {"completed": completed}


@shared_task(name="bookings.cancel_stale_pending_bookings")
def cancel_stale_pending_bookings() -> dict[str, int]:
    """
    Cancel requests the host never answered before check-in.

    Runs hourly.

    Returns:
        dict: {"cancelled": number of bookings cancelled}
    """
    cancelled = services.cancel_stale_pending_bookings()
    if cancelled:
        logger.info(f"Cancelled {cancelled} stale pending bookings")
    return {"cancelled": cancelled}
