"""View filters for the issue directory."""

from __future__ import annotations

from typing import Iterable

from records import Issue, label_value


def has_price_label(issue: Issue) -> bool:
    return label_value(issue.labels, "Price") is not None


def filter_issues_by_proposal_view(issues: Iterable[Issue], proposals_only: bool) -> list[Issue]:
    """Unpriced issues when showing proposals, priced issues otherwise."""
    return [issue for issue in issues if has_price_label(issue) != proposals_only]


def repository_owner(issue: Issue) -> str:
    parts = issue.repository_url.rstrip("/").split("/")
    return parts[-2] if len(parts) > 1 else ""


def filter_issues_by_organization(issues: Iterable[Issue], organization: str | None) -> list[Issue]:
    """Issues whose repository belongs to ``organization``; everything when no organization is given."""
    if not organization:
        return list(issues)
    return [issue for issue in issues if repository_owner(issue) == organization]


def apply_view_filters(
    issues: Iterable[Issue], proposals_only: bool | None, organization: str | None
) -> list[Issue]:
    """Apply the proposal view (when ``proposals_only`` is set) and the organization filter."""
    if proposals_only is not None:
        issues = filter_issues_by_proposal_view(issues, proposals_only)
    return filter_issues_by_organization(issues, organization)
