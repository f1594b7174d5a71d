"""Relevance-ranked search over the in-memory issue index."""

from __future__ import annotations

import logging
import math
import re
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable

from records import Issue, label_name
from search_scorer import MatchDetails, SearchConfig, SearchScorer

URL_PATTERN = re.compile(r"(?:https?://|www\.)\S+")
FUZZY_PREFIX = "?"

IssueLookup = Callable[[int], Issue | None]


@dataclass(frozen=True)
class SearchWeights:
    """Contribution of each field score to the total."""

    title: float = 0.375
    body: float = 0.25
    fuzzy: float = 0.25
    meta: float = 0.125
    repo: float = 0.1


@dataclass
class SearchResult:
    visible: bool
    score: float
    match_details: MatchDetails = field(default_factory=MatchDetails)


class IssueSearch:
    """Owns the id -> searchable content index and scores every indexed issue per query."""

    def __init__(
        self,
        get_issue_by_id: IssueLookup,
        logger: logging.Logger,
        config: SearchConfig | None = None,
        weights: SearchWeights | None = None,
    ) -> None:
        self._get_issue_by_id = get_issue_by_id
        self._logger = logger
        self._config = config or SearchConfig()
        self._weights = weights or SearchWeights()
        self._scorer = SearchScorer(self._config)
        self._searchable_issues: dict[int, str] = {}
        self._lock = threading.RLock()
        self.last_ndcg = 0.0

    def initialize_issues(self, issues: Iterable[Issue]) -> None:
        """Replace the whole index with the given issues."""
        searchable = {issue.id: searchable_content(issue) for issue in issues}
        with self._lock:
            self._searchable_issues = searchable
        self._logger.info("Indexed %d issues for search", len(searchable))

    def search(self, search_text: str) -> dict[int, SearchResult]:
        """Score every indexed issue against the query.

        A leading ``?`` enables fuzzy matching. An empty query shows every
        issue unranked with score 1.
        """
        with self._lock:
            searchable_issues = self._searchable_issues

        filter_text = search_text.lower().strip()
        is_fuzzy = filter_text.startswith(FUZZY_PREFIX)
        if is_fuzzy:
            filter_text = filter_text[len(FUZZY_PREFIX):].strip()

        if not filter_text:
            return {issue_id: _empty_result() for issue_id in searchable_issues}

        search_terms = [term.lower() for term in filter_text.split() if term]
        results: dict[int, SearchResult] = {}
        unresolved = 0

        for issue_id, content in searchable_issues.items():
            issue = self._get_issue_by_id(issue_id)
            if issue is None:
                results[issue_id] = _empty_result(visible=False)
                unresolved += 1
                continue
            results[issue_id] = self._calculate_issue_relevance(
                issue, content, search_terms, is_fuzzy
            )

        if unresolved:
            self._logger.warning("%d indexed issues could not be resolved", unresolved)

        visible_scores = [result.score for result in results.values() if result.visible]
        self.last_ndcg = calculate_ndcg(visible_scores)
        self._logger.debug(
            "Query terms=%d fuzzy=%s visible=%d ndcg=%.4f",
            len(search_terms),
            is_fuzzy,
            len(visible_scores),
            self.last_ndcg,
        )
        return results

    def _calculate_issue_relevance(
        self, issue: Issue, content: str, search_terms: list[str], enable_fuzzy: bool
    ) -> SearchResult:
        details = MatchDetails()
        scorer = self._scorer
        weights = self._weights

        total_score = (
            weights.title * scorer.calculate_title_score(issue, search_terms, details)
            + weights.body * scorer.calculate_body_score(issue, search_terms, details)
            + weights.meta * scorer.calculate_meta_score(issue, search_terms, details)
            + weights.repo * scorer.calculate_repo_score(issue, search_terms, details)
        )
        if enable_fuzzy:
            total_score += weights.fuzzy * scorer.calculate_fuzzy_score(
                content, search_terms, details
            )

        visible = total_score > 0 or details.number_match
        return SearchResult(
            visible=visible,
            score=total_score if visible else 0.0,
            match_details=details,
        )


def searchable_content(issue: Issue) -> str:
    """Title, URL-free body and label names, lower-cased."""
    body = URL_PATTERN.sub("", issue.body or "")
    labels = " ".join(label_name(label) or "" for label in issue.labels)
    return f"{issue.title} {body} {labels}".lower()


def calculate_ndcg(scores: list[float]) -> float:
    """Normalized discounted cumulative gain of scores in ranked order."""
    if not scores:
        return 0.0

    ranked = sorted(scores, reverse=True)
    dcg = _discounted_gain(ranked)
    idcg = _discounted_gain(sorted(ranked, reverse=True))
    if idcg == 0:
        return 0.0
    return dcg / idcg


def _discounted_gain(scores: list[float]) -> float:
    return sum((2**score - 1) / math.log2(index + 2) for index, score in enumerate(scores))


def _empty_result(visible: bool = True) -> SearchResult:
    return SearchResult(visible=visible, score=1.0 if visible else 0.0)
