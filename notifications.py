"""Aggregation of pull request notifications with the issues they resolve."""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Callable, Iterable

from records import AggregatedNotification, Issue, Notification, PullRequest

DEFAULT_ORGANIZATIONS = ("ubiquity", "ubiquity-os", "ubiquity-os-marketplace")
IGNORED_REASONS = frozenset({"ci_activity"})

RESOLVES_URL_PATTERN = re.compile(r"Resolves .*/issues/(\d+)")
RESOLVES_NUMBER_PATTERN = re.compile(r"Resolves #(\d+)")
ISSUE_URL_SUFFIX_PATTERN = re.compile(r"issues/\d+$")


def is_relevant_notification(notification: Notification, organizations: Iterable[str]) -> bool:
    """False for CI activity and for repositories outside the given organizations."""
    if notification.reason in IGNORED_REASONS:
        return False
    return notification.repository_full_name.split("/")[0] in set(organizations)


def pre_filter_notifications(
    notifications: Iterable[Notification],
    organizations: Iterable[str] = DEFAULT_ORGANIZATIONS,
) -> list[Notification]:
    allowed = frozenset(organizations)
    return [
        notification for notification in notifications if is_relevant_notification(notification, allowed)
    ]


def filter_aggregated_notifications(
    tasks: Iterable[AggregatedNotification],
    organizations: Iterable[str] = DEFAULT_ORGANIZATIONS,
) -> list[AggregatedNotification]:
    """Apply the notification pre-filter to already aggregated records."""
    allowed = frozenset(organizations)
    return [task for task in tasks if is_relevant_notification(task.notification, allowed)]


def filter_pull_request_notifications(
    notifications: Iterable[Notification],
    organizations: Iterable[str] = DEFAULT_ORGANIZATIONS,
) -> list[Notification]:
    return [
        notification
        for notification in pre_filter_notifications(notifications, organizations)
        if notification.subject_type == "PullRequest"
    ]


def find_linked_issue_number(pull_request_body: str | None) -> int | None:
    """Issue number from a ``Resolves <url>/issues/N`` or ``Resolves #N`` line."""
    if not pull_request_body:
        return None
    match = RESOLVES_URL_PATTERN.search(pull_request_body) or RESOLVES_NUMBER_PATTERN.search(
        pull_request_body
    )
    if match is None:
        return None
    return int(match.group(1))


def linked_issue_url(pull_request: PullRequest) -> str | None:
    """API URL of the issue a pull request resolves, derived from its own ``issue_url``."""
    issue_number = find_linked_issue_number(pull_request.body)
    if issue_number is None or not pull_request.issue_url:
        return None
    return ISSUE_URL_SUFFIX_PATTERN.sub(f"issues/{issue_number}", pull_request.issue_url)


def aggregate_notifications(
    notifications: Iterable[Notification],
    get_pull_request: Callable[[str], PullRequest | None],
    get_issue: Callable[[str], Issue | None],
    logger: logging.Logger,
    organizations: Iterable[str] = DEFAULT_ORGANIZATIONS,
    include_bots: bool = False,
) -> list[AggregatedNotification]:
    """Join open pull request notifications with their pull requests and resolved issues.

    ``get_pull_request`` and ``get_issue`` resolve API URLs to already fetched
    records. Draft or closed pull requests, pull requests without a linked
    issue and, unless ``include_bots`` is set, bot-authored pull requests are
    skipped. ``backlink_count`` is recomputed on every call as the number of
    aggregated pull requests resolving the same issue.
    """
    aggregated: list[AggregatedNotification] = []
    issue_urls: list[str] = []

    for notification in filter_pull_request_notifications(notifications, organizations):
        pull_request = get_pull_request(notification.subject_url)
        if pull_request is None or pull_request.draft or pull_request.state == "closed":
            continue
        if not include_bots and pull_request.user_type == "Bot":
            continue

        issue_url = linked_issue_url(pull_request)
        issue = get_issue(issue_url) if issue_url else None
        if issue is None:
            logger.debug("No linked issue for pull request %s", notification.subject_url)
            continue

        aggregated.append(
            AggregatedNotification(issue=issue, notification=notification, pull_request=pull_request)
        )
        issue_urls.append(issue_url)

    backlinks = Counter(issue_urls)
    for task, issue_url in zip(aggregated, issue_urls):
        task.backlink_count = backlinks[issue_url]

    logger.info("Aggregated %d pull request notifications", len(aggregated))
    return aggregated
