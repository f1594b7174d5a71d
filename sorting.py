"""Sort criteria for aggregated notifications and the controller that chains them.

Every criterion returns a new list and relies on ``sorted`` being stable, so
applying criteria one after another makes each earlier criterion the
tie-break for the later ones.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable

from records import AggregatedNotification, Issue, Label, label_values, parse_timestamp

LOGGER = logging.getLogger("issue_search_service.sorting")

PRIORITY_VALUE_PATTERN = re.compile(r"\d+")

REASON_ORDER = (
    "security_alert",
    "review_requested",
    "mention",
    "manual",
    "assign",
    "approval_requested",
    "author",
)

ORDERINGS = ("normal", "reverse")

Criterion = Callable[[Iterable[AggregatedNotification]], list[AggregatedNotification]]


def label_priority(labels: Iterable[Label]) -> int:
    """Number from the first ``Priority: N`` label, -1 when there is none."""
    for value in label_values(labels, "Priority"):
        match = PRIORITY_VALUE_PATTERN.match(value)
        if match:
            return int(match.group(0))
    return -1


def reason_rank(reason: str) -> int:
    """Position in REASON_ORDER; unknown reasons rank -1 and sort ahead of all known ones."""
    try:
        return REASON_ORDER.index(reason)
    except ValueError:
        return -1


def latest_activity(task: AggregatedNotification) -> float:
    timestamps = [parse_timestamp(task.notification.updated_at), parse_timestamp(task.issue.updated_at)]
    if task.pull_request is not None:
        timestamps.append(parse_timestamp(task.pull_request.updated_at))
    return max(timestamps)


def sort_by_priority(tasks: Iterable[AggregatedNotification]) -> list[AggregatedNotification]:
    """Highest priority first, unlabeled tasks last."""
    return sorted(tasks, key=lambda task: label_priority(task.issue.labels), reverse=True)


def sort_by_freshness(tasks: Iterable[AggregatedNotification]) -> list[AggregatedNotification]:
    """Most recently updated notification first."""
    return sorted(tasks, key=lambda task: parse_timestamp(task.notification.updated_at), reverse=True)


def sort_by_oldest(tasks: Iterable[AggregatedNotification]) -> list[AggregatedNotification]:
    """Least recently updated notification first."""
    return sorted(tasks, key=lambda task: parse_timestamp(task.notification.updated_at))


def sort_by_activity(tasks: Iterable[AggregatedNotification]) -> list[AggregatedNotification]:
    """Most recent activity across notification, issue and pull request first."""
    return sorted(tasks, key=latest_activity, reverse=True)


def sort_by_backlinks(tasks: Iterable[AggregatedNotification]) -> list[AggregatedNotification]:
    return sorted(tasks, key=lambda task: task.backlink_count, reverse=True)


def sort_by_reason(tasks: Iterable[AggregatedNotification]) -> list[AggregatedNotification]:
    return sorted(tasks, key=lambda task: reason_rank(task.notification.reason))


SORT_CRITERIA: dict[str, Criterion] = {
    "priority": sort_by_priority,
    "freshness": sort_by_freshness,
    "oldest": sort_by_oldest,
    "activity": sort_by_activity,
    "backlinks": sort_by_backlinks,
    "reason": sort_by_reason,
}

# Applied in order; the last criterion dominates the final order.
DEFAULT_SORT_CHAIN = ("reason", "freshness", "backlinks", "priority")


def sort_by(tasks: Iterable[AggregatedNotification], sorting: str) -> list[AggregatedNotification]:
    """Apply a single named criterion. Unknown names leave the order unchanged."""
    criterion = SORT_CRITERIA.get(sorting)
    if criterion is None:
        LOGGER.warning("Unknown sort key %r, keeping current order", sorting)
        return list(tasks)
    return criterion(tasks)


def sort_issues_controller(
    tasks: Iterable[AggregatedNotification],
    sorting: str | None = None,
    ordering: str = "normal",
) -> list[AggregatedNotification]:
    """Order tasks by one explicit key, or by the default chain when none is given."""
    sorted_tasks = list(tasks)

    if sorting:
        sorted_tasks = sort_by(sorted_tasks, sorting)
    else:
        for key in DEFAULT_SORT_CHAIN:
            sorted_tasks = SORT_CRITERIA[key](sorted_tasks)

    if ordering == "reverse":
        sorted_tasks.reverse()

    return sorted_tasks


def sort_issues_by_priority(issues: Iterable[Issue]) -> list[Issue]:
    return sorted(issues, key=lambda issue: label_priority(issue.labels), reverse=True)


def sort_issues_by_latest_activity(issues: Iterable[Issue], ordering: str = "normal") -> list[Issue]:
    """Newest ``updated_at`` first, or oldest first when ordering is ``reverse``."""
    return sorted(
        issues,
        key=lambda issue: parse_timestamp(issue.updated_at),
        reverse=ordering != "reverse",
    )
