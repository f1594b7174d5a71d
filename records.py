"""Issue, pull request and notification records handed over by the GitHub fetcher."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable


@dataclass(frozen=True)
class PlainLabel:
    """Label given as a bare string. Never contributes to scoring or sorting."""

    value: str


@dataclass(frozen=True)
class NamedLabel:
    """Label object as returned by the REST API, e.g. ``Priority: 3``."""

    name: str | None
    color: str | None = None
    description: str | None = None


Label = PlainLabel | NamedLabel


@dataclass
class Issue:
    id: int
    number: int
    title: str
    body: str | None = None
    labels: list[Label] = field(default_factory=list)
    repository_url: str = ""
    html_url: str = ""
    updated_at: str | None = None
    user_login: str = ""
    user_type: str = "User"


@dataclass
class PullRequest:
    id: int
    number: int
    body: str | None = None
    draft: bool = False
    state: str = "open"
    issue_url: str = ""
    html_url: str = ""
    updated_at: str | None = None
    user_login: str = ""
    user_type: str = "User"


@dataclass
class Notification:
    id: str
    reason: str
    updated_at: str | None
    subject_type: str
    subject_url: str = ""
    repository_full_name: str = ""


@dataclass
class AggregatedNotification:
    """A pull request notification joined with the pull request and the issue it resolves."""

    issue: Issue
    notification: Notification
    pull_request: PullRequest | None = None
    backlink_count: int = 0


def label_name(label: Label) -> str | None:
    """Name of a label object, ``None`` for bare strings and unnamed objects."""
    if isinstance(label, NamedLabel):
        return label.name or None
    return None


def label_values(labels: Iterable[Label], category: str) -> list[str]:
    """Values of every ``<Category>: <value>`` label, in label order.

    The category must open the label name and is matched case-sensitively,
    so ``priority: 3`` and ``X Priority: 3`` are not ``Priority`` labels.
    """
    pattern = re.compile(rf"^{re.escape(category)}: (.*)")
    values: list[str] = []
    for label in labels:
        name = label_name(label)
        if name is None:
            continue
        match = pattern.match(name)
        if match:
            values.append(match.group(1))
    return values


def label_value(labels: Iterable[Label], category: str) -> str | None:
    values = label_values(labels, category)
    return values[0] if values else None


def parse_timestamp(value: str | None) -> float:
    """Parse an ISO-8601 timestamp into epoch seconds.

    Values without an offset are taken as UTC. Missing or invalid values map to 0.
    """
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def label_from_raw(raw: Any) -> Label:
    if isinstance(raw, dict):
        name = raw.get("name")
        return NamedLabel(
            name=name if isinstance(name, str) else None,
            color=raw.get("color"),
            description=raw.get("description"),
        )
    return PlainLabel(str(raw))


def issue_from_dict(raw: dict[str, Any]) -> Issue:
    """Build an issue from a REST API payload. Raises KeyError/ValueError on a missing id or number."""
    user = raw.get("user") or {}
    return Issue(
        id=int(raw["id"]),
        number=int(raw["number"]),
        title=raw.get("title") or "",
        body=raw.get("body"),
        labels=[label_from_raw(label) for label in raw.get("labels") or []],
        repository_url=raw.get("repository_url") or "",
        html_url=raw.get("html_url") or "",
        updated_at=raw.get("updated_at"),
        user_login=user.get("login") or "",
        user_type=user.get("type") or "User",
    )


def pull_request_from_dict(raw: dict[str, Any]) -> PullRequest:
    user = raw.get("user") or {}
    return PullRequest(
        id=int(raw["id"]),
        number=int(raw["number"]),
        body=raw.get("body"),
        draft=bool(raw.get("draft", False)),
        state=raw.get("state") or "open",
        issue_url=raw.get("issue_url") or "",
        html_url=raw.get("html_url") or "",
        updated_at=raw.get("updated_at"),
        user_login=user.get("login") or "",
        user_type=user.get("type") or "User",
    )


def notification_from_dict(raw: dict[str, Any]) -> Notification:
    subject = raw.get("subject") or {}
    repository = raw.get("repository") or {}
    return Notification(
        id=str(raw["id"]),
        reason=raw.get("reason") or "",
        updated_at=raw.get("updated_at"),
        subject_type=subject.get("type") or "",
        subject_url=subject.get("url") or "",
        repository_full_name=repository.get("full_name") or "",
    )


def aggregated_from_dict(raw: dict[str, Any]) -> AggregatedNotification:
    """Build an aggregated record from ``{issue, notification, pullRequest, backlinkCount}``."""
    pull_request_raw = raw.get("pullRequest")
    return AggregatedNotification(
        issue=issue_from_dict(raw["issue"]),
        notification=notification_from_dict(raw["notification"]),
        pull_request=pull_request_from_dict(pull_request_raw) if pull_request_raw else None,
        backlink_count=int(raw.get("backlinkCount") or 0),
    )
