"""Snapshot loading helpers for records written by the GitHub fetcher."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from records import AggregatedNotification, Issue, aggregated_from_dict, issue_from_dict

T = TypeVar("T")


def load_issues(file_path: Path, logger: logging.Logger) -> list[Issue] | None:
    """Load issues from a JSON array. Returns None for unreadable snapshots."""
    return _load_records(file_path, issue_from_dict, logger)


def load_notifications(file_path: Path, logger: logging.Logger) -> list[AggregatedNotification] | None:
    """Load aggregated notifications from a JSON array. Returns None for unreadable snapshots."""
    return _load_records(file_path, aggregated_from_dict, logger)


def _load_records(
    file_path: Path, parse: Callable[[dict[str, Any]], T], logger: logging.Logger
) -> list[T] | None:
    try:
        with file_path.open("r", encoding="utf-8") as file:
            raw = json.load(file)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to read snapshot %s: %s", file_path, exc)
        return None

    if not isinstance(raw, list):
        logger.warning("Snapshot %s must contain a JSON array", file_path)
        return None

    records: list[T] = []
    for position, item in enumerate(raw):
        try:
            records.append(parse(item))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed record #%d in %s: %s", position, file_path, exc)

    return records
