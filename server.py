"""Entry point for the issue search HTTP service."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from config_loader import AppConfig, load_config
from issue_filters import apply_view_filters
from notifications import filter_aggregated_notifications
from records import AggregatedNotification, Issue
from records_loader import load_issues, load_notifications
from sorting import ORDERINGS, SORT_CRITERIA, label_priority
from task_manager import TaskManager

PROPOSAL_FLAGS: dict[str, bool | None] = {"": None, "true": True, "false": False}

LOGGER = logging.getLogger("issue_search_service")


class SearchRequestHandler(BaseHTTPRequestHandler):
    """HTTP handler exposing health, search and notification endpoints."""

    task_manager: TaskManager
    logger: logging.Logger

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        path = parsed.path
        query_params = parse_qs(parsed.query)

        if path in ("/health", "/api/v1/health"):
            self._send_json(HTTPStatus.OK, {"status": "ok"})
            return

        try:
            if path in ("/search", "/api/v1/search"):
                self._handle_search(query_params)
                return
            if path in ("/notifications", "/api/v1/notifications"):
                self._handle_notifications(query_params)
                return
        except Exception as exc:
            self.logger.exception("Request failed: %s", self.path)
            self._send_json(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "internal server error", "details": str(exc)},
            )
            return

        self._send_json(
            HTTPStatus.NOT_FOUND,
            {"error": "Not found", "message": "Use GET /api/v1/search?q=<text>"},
        )

    def _handle_search(self, query_params: dict[str, list[str]]) -> None:
        query = (query_params.get("q") or [""])[0].strip()
        if not query:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Missing query parameter 'q'"})
            return

        limit_raw = (query_params.get("limit") or ["10"])[0].strip()
        try:
            limit = max(1, min(int(limit_raw), 50))
        except ValueError:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Invalid query parameter 'limit'"})
            return

        proposals_raw = (query_params.get("proposals") or [""])[0].strip().lower()
        if proposals_raw not in PROPOSAL_FLAGS:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Invalid query parameter 'proposals'"})
            return
        proposals_only = PROPOSAL_FLAGS[proposals_raw]
        organization = (query_params.get("org") or [""])[0].strip() or None

        results = self.task_manager.issue_searcher.search(query)
        ranked = sorted(
            (item for item in results.items() if item[1].visible),
            key=lambda item: item[1].score,
            reverse=True,
        )

        matches = []
        for issue_id, result in ranked:
            issue = self.task_manager.get_issue_by_id(issue_id)
            if issue is not None:
                matches.append((issue, result))

        visible_ids = {
            issue.id
            for issue in apply_view_filters([issue for issue, _ in matches], proposals_only, organization)
        }
        items = [
            _issue_payload(issue, result.score, asdict(result.match_details))
            for issue, result in matches
            if issue.id in visible_ids
        ][:limit]

        self._send_json(HTTPStatus.OK, {"query": query, "total": len(items), "items": items})

    def _handle_notifications(self, query_params: dict[str, list[str]]) -> None:
        sorting = (query_params.get("sort") or [""])[0].strip() or None
        ordering = (query_params.get("ordering") or ["normal"])[0].strip()

        if sorting is not None and sorting not in SORT_CRITERIA:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": f"Unknown sort key '{sorting}'"})
            return
        if ordering not in ORDERINGS:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": f"Unknown ordering '{ordering}'"})
            return

        tasks = self.task_manager.sorted_notifications(sorting, ordering)
        items = [_notification_payload(task) for task in tasks]
        self._send_json(HTTPStatus.OK, {"total": len(items), "items": items})

    def _send_json(self, status: HTTPStatus, payload: dict[str, object]) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status.value)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        self.logger.info("%s - %s", self.client_address[0], format % args)


def _issue_payload(issue: Issue, score: float, match_details: dict[str, object]) -> dict[str, object]:
    return {
        "id": issue.id,
        "number": issue.number,
        "title": issue.title,
        "score": round(score, 6),
        "match_details": match_details,
    }


def _notification_payload(task: AggregatedNotification) -> dict[str, object]:
    return {
        "id": task.notification.id,
        "reason": task.notification.reason,
        "updated_at": task.notification.updated_at,
        "issue_number": task.issue.number,
        "title": task.issue.title,
        "priority": label_priority(task.issue.labels),
        "backlink_count": task.backlink_count,
    }


def build_task_manager(config: AppConfig, logger: logging.Logger) -> TaskManager:
    """Create a task manager populated from the configured snapshots."""
    task_manager = TaskManager(logger, config.search)
    task_manager.sync_tasks(load_issues(config.issues_file, logger) or [])

    if config.notifications_file is not None:
        notifications = load_notifications(config.notifications_file, logger) or []
        task_manager.sync_notifications(
            filter_aggregated_notifications(notifications, config.organizations)
        )

    return task_manager


def main() -> None:
    """Load configuration, build the index, and start HTTP server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    base_dir = Path(__file__).resolve().parent
    config = load_config(base_dir / "config.yml")

    SearchRequestHandler.task_manager = build_task_manager(config, LOGGER)
    SearchRequestHandler.logger = LOGGER

    server_address = (config.host, config.port)
    httpd = ThreadingHTTPServer(server_address, SearchRequestHandler)

    LOGGER.info("Search service started on http://%s:%d", config.host, config.port)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        LOGGER.info("Shutdown signal received")
    finally:
        httpd.server_close()
        LOGGER.info("Server stopped")


if __name__ == "__main__":
    main()
