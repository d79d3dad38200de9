"""Status and status group resolution for Jira Flow Metrics.

Statuses are identified by opaque string ids. This module builds the
per-call lookup tables (status names, group membership, group order) and
resolves flow point selectors - either a named group or a single status -
into sets of status ids.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .utils import get_tolerant_attr

logger = logging.getLogger(__name__)

SELECTOR_GROUP = "group"
SELECTOR_STATUS = "status"
SELECTOR_TYPES = (SELECTOR_GROUP, SELECTOR_STATUS)


@dataclass(frozen=True)
class Selector:
    """A flow point: a named group or a single status id."""

    type: str = SELECTOR_GROUP
    value: Optional[str] = None

    @classmethod
    def coerce(cls, selector):
        """Build a Selector from a Selector, a `{type, value}` dict or None."""
        if selector is None:
            return cls()
        if isinstance(selector, cls):
            return selector
        selector_type = get_tolerant_attr(selector, "type", default=SELECTOR_GROUP)
        value = get_tolerant_attr(selector, "value")
        return cls(
            type=selector_type,
            value=str(value) if value not in (None, "") else None,
        )

    def is_set(self):
        """True when the selector names something."""
        return bool(self.value)


UNSET_SELECTOR = Selector()


@dataclass(frozen=True)
class StatusLookup:
    """Lookup tables built fresh for one metrics computation."""

    status_master: Dict[str, str] = field(default_factory=dict)
    status_to_groups: Dict[str, List[str]] = field(default_factory=dict)
    group_order: List[str] = field(default_factory=list)
    groups: List[dict] = field(default_factory=list)

    def group_names_for(self, status_id):
        """Names of the groups `status_id` belongs to, in group order."""
        return self.status_to_groups.get(status_id, [])

    def first_group_for(self, status_id):
        """The first group `status_id` belongs to, or None."""
        names = self.group_names_for(status_id)
        return names[0] if names else None

    def status_name(self, status_id):
        """Display name of a status."""
        return self.status_master.get(status_id, f"Status {status_id}")


def build_status_master(all_statuses):
    """Map status id (as a string) to status name."""
    status_master = {}
    for status in all_statuses or []:
        status_id = get_tolerant_attr(status, "id")
        if status_id is None:
            continue
        status_id = str(status_id)
        status_master[status_id] = (
            get_tolerant_attr(status, "name") or f"Status {status_id}"
        )
    return status_master


def build_status_lookup(all_statuses, status_groups):
    """Build the status master map and group membership tables.

    Groups without a name or a status list are ignored. Group members that
    are not part of the status universe are dropped. A status may belong to
    several groups.
    """
    status_master = build_status_master(all_statuses)
    status_to_groups = {}
    group_order = []
    groups = []

    for group in status_groups or []:
        name = get_tolerant_attr(group, "name")
        members = get_tolerant_attr(group, "statuses")
        if not name or not isinstance(members, (list, tuple, set)):
            logger.debug("Ignoring malformed status group %r", group)
            continue

        member_ids = []
        for status_id in members:
            if status_id is None:
                continue
            status_id = str(status_id)
            if status_id not in status_master:
                logger.debug(
                    "Status %s in group %s is not a known status", status_id, name
                )
                continue
            member_ids.append(status_id)
            group_names = status_to_groups.setdefault(status_id, [])
            if name not in group_names:
                group_names.append(name)

        if name not in group_order:
            group_order.append(name)
            groups.append({"name": name, "statuses": member_ids})

    return StatusLookup(
        status_master=status_master,
        status_to_groups=status_to_groups,
        group_order=group_order,
        groups=groups,
    )


def resolve_selector(selector, groups, status_master):
    """Resolve a selector into the set of status ids it denotes.

    An unset selector resolves to an empty set silently; an unknown group,
    unknown status or unknown selector type resolves to an empty set with a
    warning. Never raises.
    """
    selector = Selector.coerce(selector)
    ids = set()

    if not selector.is_set():
        return ids

    if selector.type == SELECTOR_GROUP:
        group = next(
            (g for g in groups or [] if get_tolerant_attr(g, "name") == selector.value),
            None,
        )
        members = get_tolerant_attr(group, "statuses")
        if group is None or not isinstance(members, (list, tuple, set)):
            logger.warning(
                "Configured group '%s' not found or invalid", selector.value
            )
            return ids
        for status_id in members:
            if status_id is not None and str(status_id) in status_master:
                ids.add(str(status_id))
    elif selector.type == SELECTOR_STATUS:
        if selector.value in status_master:
            ids.add(selector.value)
        else:
            logger.warning(
                "Configured status id '%s' is not a known status", selector.value
            )
    else:
        logger.warning("Unknown selector type '%s'", selector.type)

    return ids


def default_status_groups(all_statuses):
    """One group per status, named after the status."""
    return [
        {"name": name, "statuses": [status_id]}
        for status_id, name in build_status_master(all_statuses).items()
    ]


def reset_invalid_selectors(selectors, groups):
    """Reset group selectors that name a group which no longer exists.

    `selectors` maps a flow point name (e.g. `triage`) to a selector. Returns
    a new mapping; the input is left untouched.
    """
    group_names = {get_tolerant_attr(g, "name") for g in groups or []}
    result = {}
    for name, selector in selectors.items():
        selector = Selector.coerce(selector)
        if (
            selector.type == SELECTOR_GROUP
            and selector.is_set()
            and selector.value not in group_names
        ):
            logger.warning(
                "%s points at unknown group '%s' and has been reset",
                name,
                selector.value,
            )
            selector = UNSET_SELECTOR
        result[name] = selector
    return result


def map_status_names(groups, all_statuses):
    """Replace status names in group member lists with status ids.

    Members that already are status ids are kept. Names are matched
    case-insensitively. Unknown members are kept as given.
    """
    status_master = build_status_master(all_statuses)
    ids_by_name = {name.lower(): status_id for status_id, name in status_master.items()}

    mapped = copy.deepcopy(list(groups or []))
    for group in mapped:
        members = []
        for member in group.get("statuses", []):
            member = str(member)
            if member not in status_master and member.lower() in ids_by_name:
                member = ids_by_name[member.lower()]
            members.append(member)
        group["statuses"] = members
    return mapped
