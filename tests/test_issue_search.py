import math

import pytest

from issue_search import IssueSearch, SearchWeights, calculate_ndcg, searchable_content
from records import Issue, NamedLabel, PlainLabel


class DummyLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, msg: str, *args: object) -> None:
        self.records.append(("info", msg % args if args else msg))

    def warning(self, msg: str, *args: object) -> None:
        self.records.append(("warning", msg % args if args else msg))

    def debug(self, msg: str, *args: object) -> None:
        self.records.append(("debug", msg % args if args else msg))


def _issues() -> list[Issue]:
    return [
        Issue(id=1, number=10, title="Fix login bug", labels=[NamedLabel("Priority: 3")]),
        Issue(id=2, number=20, title="Update docs", labels=[]),
    ]


def _build_search(issues: list[Issue]) -> tuple[IssueSearch, DummyLogger]:
    by_id = {issue.id: issue for issue in issues}
    logger = DummyLogger()
    search = IssueSearch(by_id.get, logger)
    search.initialize_issues(issues)
    return search, logger


def test_search_scores_title_match_only() -> None:
    search, _ = _build_search(_issues())

    results = search.search("login")

    assert results[1].visible is True
    assert results[1].score == pytest.approx(0.375 * (1.0 + math.exp(-1)))
    assert results[1].match_details.title_matches == ["login"]
    assert results[1].match_details.body_matches == []
    assert results[2].visible is False
    assert results[2].score == 0.0


def test_empty_query_shows_everything_with_score_one() -> None:
    search, _ = _build_search(_issues())

    for query in ("", "   ", "?", " ? "):
        results = search.search(query)
        assert set(results) == {1, 2}
        assert all(result.visible and result.score == 1.0 for result in results.values())


def test_fuzzy_prefix_enables_near_miss_matches() -> None:
    issues = [
        Issue(
            id=7,
            number=70,
            title="Broken label rendering",
            repository_url="https://api.github.com/repos/ubiquity/devpool-directory",
        )
    ]
    search, _ = _build_search(issues)

    exact = search.search("labek")
    fuzzy = search.search("?labek")

    assert exact[7].visible is False
    assert fuzzy[7].visible is True
    assert fuzzy[7].score == pytest.approx(0.25 * 0.8 * 0.7)
    assert fuzzy[7].match_details.fuzzy_matches[0].matched == "label"


def test_number_match_is_visible_without_other_matches() -> None:
    issues = [Issue(id=5, number=42, title="Something unrelated")]
    search, _ = _build_search(issues)

    result = search.search("42")[5]

    assert result.match_details.number_match is True
    assert result.visible is True


def test_number_match_visible_even_when_meta_weight_is_zero() -> None:
    issue = Issue(id=5, number=42, title="Something unrelated")
    search = IssueSearch({5: issue}.get, DummyLogger(), weights=SearchWeights(meta=0.0))
    search.initialize_issues([issue])

    result = search.search("42")[5]

    assert result.visible is True
    assert result.score == 0.0


def test_unresolved_ids_are_not_visible() -> None:
    issues = _issues()
    logger = DummyLogger()
    search = IssueSearch({1: issues[0]}.get, logger)
    search.initialize_issues(issues)

    results = search.search("docs")

    assert results[2].visible is False
    assert results[2].score == 0.0
    assert any(level == "warning" for level, _ in logger.records)


def test_initialize_issues_replaces_previous_index() -> None:
    search, _ = _build_search(_issues())
    search.initialize_issues([Issue(id=3, number=30, title="Another")])

    assert set(search.search("")) == {3}


def test_initialize_issues_is_idempotent() -> None:
    issues = _issues()
    search, _ = _build_search(issues)
    first = search.search("?login docs")

    search.initialize_issues(issues)
    second = search.search("?login docs")

    assert first == second


def test_search_tracks_ndcg_of_visible_results() -> None:
    search, _ = _build_search(_issues())

    search.search("login")
    assert search.last_ndcg == pytest.approx(1.0)

    search.search("nothing-matches-this")
    assert search.last_ndcg == 0.0


def test_calculate_ndcg_is_one_for_any_scores() -> None:
    assert calculate_ndcg([0.2, 1.5, 0.7]) == pytest.approx(1.0)
    assert calculate_ndcg([]) == 0.0
    assert calculate_ndcg([0.0]) == 0.0


def test_searchable_content_strips_urls_and_joins_labels() -> None:
    issue = Issue(
        id=1,
        number=1,
        title="Crash",
        body="See https://example.com/trace and www.example.org too",
        labels=[NamedLabel("Priority: 1"), PlainLabel("ignored")],
    )

    content = searchable_content(issue)

    assert "example" not in content
    assert content.startswith("crash see")
    assert content.endswith("priority: 1 ")
