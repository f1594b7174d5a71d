from issue_filters import (
    apply_view_filters,
    filter_issues_by_organization,
    filter_issues_by_proposal_view,
    has_price_label,
    repository_owner,
)
from records import Issue, NamedLabel, PlainLabel


def _issue(issue_id: int, labels=None, repository_url: str = "") -> Issue:
    return Issue(
        id=issue_id,
        number=issue_id,
        title=f"Issue {issue_id}",
        labels=labels or [],
        repository_url=repository_url,
    )


def test_has_price_label_needs_named_price_prefix() -> None:
    assert has_price_label(_issue(1, [NamedLabel("Price: 100 USD")])) is True
    assert has_price_label(_issue(2, [NamedLabel("price: 100 USD")])) is False
    assert has_price_label(_issue(3, [NamedLabel("Time: <1 Hour")])) is False
    assert has_price_label(_issue(4, [PlainLabel("Price: 100 USD")])) is False


def test_filter_issues_by_proposal_view_splits_priced_and_unpriced() -> None:
    priced = _issue(1, [NamedLabel("Priority: 1"), NamedLabel("Price: 25 USD")])
    unpriced = _issue(2, [NamedLabel("Priority: 1")])
    bare = _issue(3)

    assert filter_issues_by_proposal_view([priced, unpriced, bare], True) == [unpriced, bare]
    assert filter_issues_by_proposal_view([priced, unpriced, bare], False) == [priced]


def test_repository_owner_reads_owner_segment() -> None:
    assert repository_owner(_issue(1, repository_url="https://api.github.com/repos/ubiquity/work.ubq.fi")) == "ubiquity"
    assert repository_owner(_issue(2, repository_url="https://api.github.com/repos/ubiquity/work.ubq.fi/")) == "ubiquity"
    assert repository_owner(_issue(3)) == ""


def test_filter_issues_by_organization_matches_owner_exactly() -> None:
    ubiquity = _issue(1, repository_url="https://api.github.com/repos/ubiquity/work.ubq.fi")
    ubiquibot = _issue(2, repository_url="https://api.github.com/repos/ubiquibot/plugin")
    issues = [ubiquity, ubiquibot]

    assert filter_issues_by_organization(issues, "ubiquity") == [ubiquity]
    assert filter_issues_by_organization(issues, "ubiqui") == []
    assert filter_issues_by_organization(issues, None) == issues
    assert filter_issues_by_organization(issues, "") == issues


def test_apply_view_filters_combines_both_filters() -> None:
    priced = _issue(1, [NamedLabel("Price: 25 USD")], "https://api.github.com/repos/ubiquity/a")
    proposal = _issue(2, [], "https://api.github.com/repos/ubiquity/a")
    elsewhere = _issue(3, [], "https://api.github.com/repos/other/b")
    issues = [priced, proposal, elsewhere]

    assert apply_view_filters(issues, None, None) == issues
    assert apply_view_filters(issues, True, "ubiquity") == [proposal]
    assert apply_view_filters(issues, False, "other") == []
