"""Status timeline reconstruction for Jira Flow Metrics.

A timeline is the chronological sequence of statuses one issue occupied,
rebuilt from the issue's creation timestamp and the status changes recorded
in its changelog.
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .utils import get_tolerant_attr, multi_get, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineEvent:
    """The issue entered `status_id` at `timestamp`."""

    timestamp: datetime.datetime
    status_id: str


@dataclass(frozen=True)
class StatusChange:
    """A single status transition taken from the changelog."""

    timestamp: datetime.datetime
    from_id: str
    to_id: str


@dataclass(frozen=True)
class IssueTimeline:
    """The reconstructed status history of one issue."""

    key: str
    events: Tuple[TimelineEvent, ...]
    current_status_id: Optional[str] = None

    @property
    def created(self):
        """Creation timestamp (the first event)."""
        return self.events[0].timestamp

    def status_at(self, instant):
        """The status occupied at `instant`, or None before creation."""
        for event in reversed(self.events):
            if event.timestamp <= instant:
                return event.status_id
        return None

    def first_event_in(self, status_ids, not_before=None):
        """First event whose status is in `status_ids`.

        If `not_before` is given, events earlier than it are skipped.
        """
        for event in self.events:
            if event.status_id not in status_ids:
                continue
            if not_before is not None and event.timestamp < not_before:
                continue
            return event
        return None


def extract_status_changes(issue):
    """Extract status changes from an issue's changelog, oldest first.

    Only items on the `status` field with both an old and a new value are
    used. A history entry without a valid timestamp is skipped on its own.
    """
    key = get_tolerant_attr(issue, "key")
    histories = multi_get(issue, "changelog.histories") or []
    changes = []

    for history in histories:
        items = get_tolerant_attr(history, "items") or []
        status_items = [
            item
            for item in items
            if get_tolerant_attr(item, "field") == "status"
            and get_tolerant_attr(item, "from", "from_") is not None
            and get_tolerant_attr(item, "to") is not None
        ]
        if not status_items:
            continue

        timestamp = parse_timestamp(get_tolerant_attr(history, "created"))
        if timestamp is None:
            logger.warning(
                "Issue %s has a status change with an invalid timestamp %r; "
                "ignoring it",
                key,
                get_tolerant_attr(history, "created"),
            )
            continue

        for item in status_items:
            changes.append(
                StatusChange(
                    timestamp=timestamp,
                    from_id=str(get_tolerant_attr(item, "from", "from_")),
                    to_id=str(get_tolerant_attr(item, "to")),
                )
            )

    # sorted() is stable, so same-instant changes keep their changelog order
    return sorted(changes, key=lambda c: c.timestamp)


def current_status_id(issue):
    """The issue's current status id as a string, or None."""
    status_id = multi_get(issue, "fields.status.id")
    return str(status_id) if status_id is not None else None


def build_timeline(issue, status_master):
    """Build the status timeline of `issue`.

    `status_master` maps every known status id to its name. Returns None
    when the issue has no parseable creation timestamp or its initial status
    cannot be determined.
    """
    key = get_tolerant_attr(issue, "key")
    created = parse_timestamp(multi_get(issue, "fields.created"))
    if created is None:
        logger.warning(
            "Issue %s has no valid creation timestamp; excluding it", key
        )
        return None

    changes = extract_status_changes(issue)
    current_id = current_status_id(issue)

    initial_id = changes[0].from_id if changes else current_id
    if initial_id is None or initial_id not in status_master:
        logger.warning(
            "Could not determine a valid initial status for issue %s "
            "(got %s); excluding it",
            key,
            initial_id,
        )
        return None

    events = [TimelineEvent(timestamp=created, status_id=initial_id)]
    last_status_id = initial_id

    for change in changes:
        if change.to_id not in status_master:
            logger.warning(
                "Issue %s transitioned to unknown status id %s; ignoring it",
                key,
                change.to_id,
            )
            continue
        if change.to_id == last_status_id:
            continue

        timestamp = change.timestamp
        if timestamp < created:
            logger.warning(
                "Issue %s has a status change at %s, before its creation at %s; "
                "treating it as happening at creation",
                key,
                timestamp.isoformat(),
                created.isoformat(),
            )
            timestamp = created

        events.append(TimelineEvent(timestamp=timestamp, status_id=change.to_id))
        last_status_id = change.to_id

    return IssueTimeline(key=key, events=tuple(events), current_status_id=current_id)
