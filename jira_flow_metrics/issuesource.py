"""Issue sources for Jira Flow Metrics.

An issue source hands already-fetched issues and the status universe to the
calculators. Fetching from the issue tracker is out of scope: issues are
either passed in directly or loaded from JSON exports of the REST API.
"""

import json
import logging

from .utils import get_tolerant_attr, multi_get

logger = logging.getLogger(__name__)


class IssueSource:
    """Holds issues and the status universe for one metrics run."""

    def __init__(self, issues, statuses):
        self.issues = issues
        self.statuses = statuses

    def __repr__(self):
        return (
            f"<IssueSource issues={_count(self.issues)} "
            f"statuses={_count(self.statuses)}>"
        )


class FileIssueSource(IssueSource):
    """An issue source backed by two JSON files.

    - the issues file holds a list of issues, or an object with an `issues`
      list (the shape of a JIRA search response);
    - the statuses file holds a list of `{id, name}` statuses, a list of issue
      types each with a `statuses` list (the shape of the project statuses
      endpoint), or an object with a `statuses` list.
    """

    def __init__(self, issues_file, statuses_file):
        self.issues_file = issues_file
        self.statuses_file = statuses_file

        issues = _load_json(issues_file)
        if isinstance(issues, dict):
            issues = issues.get("issues", [])

        logger.info("Loaded %d issues from %s", _count(issues), issues_file)
        statuses = normalize_statuses(_load_json(statuses_file))
        logger.info("Loaded %d statuses from %s", len(statuses), statuses_file)

        super().__init__(issues, statuses)

    def __repr__(self):
        return (
            f"<FileIssueSource issues_file={self.issues_file} "
            f"statuses_file={self.statuses_file}>"
        )


def _count(values):
    return len(values) if isinstance(values, list) else 0


def _load_json(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise FileNotFoundError(
            f"Input file not found: {path}. Underlying error: {str(e)}"
        ) from e
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Failed to parse JSON from input file: {path}. "
            f"Error at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def normalize_statuses(data):
    """Flatten, de-duplicate (by id) and sort (by name) a statuses export."""
    if isinstance(data, dict):
        data = data.get("statuses", [])
    if not isinstance(data, list):
        return []

    flattened = []
    for entry in data:
        if isinstance(entry, dict) and "statuses" in entry and "id" not in entry:
            flattened.extend(entry.get("statuses") or [])
        else:
            flattened.append(entry)

    statuses = []
    seen = set()
    for status in flattened:
        status_id = get_tolerant_attr(status, "id")
        if status_id is None or str(status_id) in seen:
            continue
        seen.add(str(status_id))
        statuses.append(
            {"id": str(status_id), "name": get_tolerant_attr(status, "name")}
        )

    return sorted(statuses, key=lambda s: (s["name"] or "").lower())


def _matches(value, wanted):
    if value is None:
        return False
    candidates = {
        str(v)
        for v in (get_tolerant_attr(value, "id"), get_tolerant_attr(value, "name"))
        if v is not None
    }
    return bool(candidates & wanted)


def filter_issues(issues, issue_types=None, priorities=None):
    """Keep issues whose issue type and priority (id or name) are wanted.

    An empty or missing list does not filter on that field.
    """
    issue_types = {str(t) for t in issue_types or []}
    priorities = {str(p) for p in priorities or []}

    if not issue_types and not priorities:
        return list(issues)

    filtered = [
        issue
        for issue in issues
        if (not issue_types or _matches(multi_get(issue, "fields.issuetype"), issue_types))
        and (not priorities or _matches(multi_get(issue, "fields.priority"), priorities))
    ]
    logger.info(
        "Filtered %d issues down to %d by issue type/priority",
        len(issues),
        len(filtered),
    )
    return filtered
