"""Normalized edit-distance similarity between two tokens."""

from __future__ import annotations


def levenshtein_distance(first: str, second: str) -> int:
    """Number of single-character inserts, deletes, or substitutions between two strings."""
    if len(first) < len(second):
        return levenshtein_distance(second, first)
    if not second:
        return len(first)

    previous_row = list(range(len(second) + 1))
    for i, first_char in enumerate(first):
        current_row = [i + 1]
        for j, second_char in enumerate(second):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (first_char != second_char)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def calculate(first: str, second: str) -> float:
    """Return similarity in [0, 1]; two empty strings are identical."""
    max_len = max(len(first), len(second))
    if max_len == 0:
        return 1.0

    return 1 - levenshtein_distance(first, second) / max_len
