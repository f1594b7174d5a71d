"""In-memory store for fetched issues and notifications."""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from issue_filters import apply_view_filters
from issue_search import IssueSearch
from records import AggregatedNotification, Issue
from search_scorer import SearchConfig
from sorting import sort_issues_controller


class TaskManager:
    """Owns the current issue snapshot and the search index built from it."""

    def __init__(self, logger: logging.Logger, config: SearchConfig | None = None) -> None:
        self._logger = logger
        self._lock = threading.RLock()
        self._tasks: list[Issue] = []
        self._tasks_by_id: dict[int, Issue] = {}
        self._notifications: list[AggregatedNotification] = []
        self.issue_searcher = IssueSearch(self.get_issue_by_id, logger, config)

    def sync_tasks(self, issues: Iterable[Issue]) -> None:
        """Replace the issue snapshot and rebuild the search index from it."""
        tasks = list(issues)
        with self._lock:
            self._tasks = tasks
            self._tasks_by_id = {issue.id: issue for issue in tasks}
        self.issue_searcher.initialize_issues(tasks)
        self._logger.info("Synced %d issues", len(tasks))

    def sync_notifications(self, notifications: Iterable[AggregatedNotification]) -> None:
        with self._lock:
            self._notifications = list(notifications)
        self._logger.info("Synced %d notifications", len(self._notifications))

    def get_tasks(self) -> list[Issue]:
        with self._lock:
            return list(self._tasks)

    def get_notifications(self) -> list[AggregatedNotification]:
        with self._lock:
            return list(self._notifications)

    def get_issue_by_id(self, issue_id: int) -> Issue | None:
        with self._lock:
            return self._tasks_by_id.get(issue_id)

    def filter_issues_by_search(
        self,
        search_text: str,
        proposals_only: bool | None = None,
        organization: str | None = None,
    ) -> list[Issue]:
        """Issues with a positive score for the query, best match first.

        ``proposals_only`` selects the proposal or the priced view; ``None``
        applies no view filter.
        """
        results = self.issue_searcher.search(search_text)
        ranked = sorted(
            (item for item in results.items() if item[1].score > 0),
            key=lambda item: item[1].score,
            reverse=True,
        )
        issues: list[Issue] = []
        for issue_id, _ in ranked:
            issue = self.get_issue_by_id(issue_id)
            if issue is not None:
                issues.append(issue)
        return apply_view_filters(issues, proposals_only, organization)

    def get_visible_tasks(
        self, proposals_only: bool | None = None, organization: str | None = None
    ) -> list[Issue]:
        return apply_view_filters(self.get_tasks(), proposals_only, organization)

    def sorted_notifications(
        self, sorting: str | None = None, ordering: str = "normal"
    ) -> list[AggregatedNotification]:
        return sort_issues_controller(self.get_notifications(), sorting, ordering)
