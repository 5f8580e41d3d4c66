"""
Early-access waitlist queue.

Every signup gets a queue position equal to the number of entries still
waiting plus one. Positions are assigned once and never renumbered, so they
stay stable after invites or deletions but may leave gaps.

Lifecycle::

    waiting -> invited -> registered
    waiting -> declined

``invite`` only accepts waiting entries; ``mark_registered`` accepts any.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Literal

from ..errors import DuplicateError, InvalidStateError, ValidationError
from ..storage.collection import Collection, utcnow
from ..storage.pagination import Page, build_page, page_window
from ..taxonomy import WaitlistStatus
from .models import JoinRequest, JoinResult, WaitlistEntry, WaitlistStats, WaitlistUpdate

logger = logging.getLogger(__name__)

# Rough processing-rate assumption used for wait estimates, not calibrated.
INVITES_PER_DAY = 100

MAX_PAGE_LIMIT = 100
MAX_NEXT_LIMIT = 50

WaitlistSort = Literal["position", "created_at", "email"]
SortOrder = Literal["asc", "desc"]

_entries: Collection[WaitlistEntry] = Collection(
    "waitlist", label="Waitlist entry", unique=("email",)
)


def _is_waiting(entry: WaitlistEntry) -> bool:
    return entry.status == WaitlistStatus.waiting


def estimated_wait_days(total_waiting: int) -> int:
    return math.ceil(total_waiting / INVITES_PER_DAY)


def total_waiting() -> int:
    return _entries.count(_is_waiting)


def join(
    request: JoinRequest,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> JoinResult:
    """Add a signup to the back of the queue."""
    email = request.email.strip().lower()
    with _entries.atomic():
        if _entries.find_one(lambda e: e.email == email) is not None:
            raise DuplicateError("Email already exists in waitlist")
        entry = WaitlistEntry(
            email=email,
            name=request.name,
            interests=request.interests,
            cooking_experience=request.cooking_experience,
            referral_source=request.referral_source,
            position=total_waiting() + 1,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        _entries.insert(entry)
        waiting = total_waiting()

    logger.info("Waitlist signup %s at position %d", entry.id, entry.position)
    return JoinResult(
        email=entry.email,
        position=entry.position,
        total_count=waiting,
        estimated_wait_time=estimated_wait_days(waiting),
    )


def get_stats() -> WaitlistStats:
    with _entries.atomic():
        counts = {status.value: 0 for status in WaitlistStatus}
        for entry in _entries.all():
            counts[entry.status.value] += 1
    waiting = counts[WaitlistStatus.waiting.value]
    return WaitlistStats(
        total_count=waiting,
        estimated_wait_time=estimated_wait_days(waiting),
        stats=counts,
    )


def next_in_line(limit: int = 10) -> list[WaitlistEntry]:
    if not 1 <= limit <= MAX_NEXT_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {MAX_NEXT_LIMIT}")
    return _entries.find(_is_waiting, sort=[("position", False)], limit=limit)


def get_entry(entry_id: str) -> WaitlistEntry:
    return _entries.require(entry_id)


def invite(entry_id: str, now: datetime | None = None) -> WaitlistEntry:
    now = now or utcnow()

    def mutate(entry: WaitlistEntry) -> WaitlistEntry:
        if entry.status != WaitlistStatus.waiting:
            raise InvalidStateError("User is not in waiting status")
        return entry.model_copy(update={"status": WaitlistStatus.invited, "invited_at": now})

    entry = _entries.find_one_and_update(entry_id, mutate)
    logger.info("Waitlist entry %s invited", entry_id)
    return entry


def mark_registered(entry_id: str, now: datetime | None = None) -> WaitlistEntry:
    now = now or utcnow()
    entry = _entries.update(
        entry_id, {"status": WaitlistStatus.registered, "registered_at": now}
    )
    logger.info("Waitlist entry %s registered", entry_id)
    return entry


def list_entries(
    status: WaitlistStatus | None = None,
    page: int = 1,
    limit: int = 20,
    sort: WaitlistSort = "position",
    order: SortOrder = "asc",
) -> Page[WaitlistEntry]:
    skip, limit = page_window(page, limit, MAX_PAGE_LIMIT)
    if sort not in ("position", "created_at", "email"):
        raise ValidationError(f"Cannot sort waitlist by {sort!r}")

    def where(entry: WaitlistEntry) -> bool:
        return status is None or entry.status == status

    items = _entries.find(where, sort=[(sort, order == "desc")], skip=skip, limit=limit)
    return build_page(items, _entries.count(where), page, limit)


def update_entry(entry_id: str, changes: WaitlistUpdate) -> WaitlistEntry:
    """Admin edit. A status set here is an override and stamps no timestamps."""
    update = {
        field: getattr(changes, field)
        for field in changes.model_fields_set
        if getattr(changes, field) is not None
    }
    return _entries.update(entry_id, update)


def delete_entry(entry_id: str) -> None:
    _entries.delete(entry_id)
    logger.info("Waitlist entry %s deleted", entry_id)


def clear_waitlist() -> None:
    _entries.clear()
