"""Demonstrates search and sorting over the configured snapshots without the HTTP server."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from config_loader import load_config
from server import build_task_manager
from sorting import label_priority

LOGGER = logging.getLogger("issue_search_service.demo")


def run_demo() -> None:
    """Run a few sample queries and print the default notification order."""
    base_dir = Path(__file__).resolve().parent
    config = load_config(base_dir / "config.yml")
    task_manager = build_task_manager(config, LOGGER)

    demo_queries = [
        "bug",
        "?documentation",
        "priority",
    ]

    for query in demo_queries:
        issues = task_manager.filter_issues_by_search(query)
        payload = {
            "query": query,
            "results": [
                {"id": issue.id, "number": issue.number, "title": issue.title}
                for issue in issues
            ],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    notifications = [
        {
            "issue_number": task.issue.number,
            "reason": task.notification.reason,
            "priority": label_priority(task.issue.labels),
            "backlink_count": task.backlink_count,
        }
        for task in task_manager.sorted_notifications()
    ]
    print(json.dumps({"notifications": notifications}, ensure_ascii=False, indent=2))


def main() -> None:
    """Demo entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_demo()


if __name__ == "__main__":
    main()
