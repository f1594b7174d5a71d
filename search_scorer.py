"""Per-field relevance scoring for issue search."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

import string_similarity
from records import Issue, label_name

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
NUMBER_PATTERN = re.compile(r"[0-9]+")
PUNCTUATION_PATTERN = re.compile(r"[^\w\s]", re.ASCII)

TITLE_SCORE_CAP = 3.0
BODY_SCORE_CAP = 2.0
FUZZY_SCORE_CAP = 2.0


@dataclass(frozen=True)
class SearchConfig:
    """Tunables shared by the scoring functions."""

    fuzzy_search_threshold: float = 0.7
    exact_match_bonus: float = 1.0
    fuzzy_match_weight: float = 0.7


@dataclass(frozen=True)
class FuzzyMatch:
    original: str
    matched: str
    score: float


@dataclass
class MatchDetails:
    """Evidence of which query terms matched where, filled in while scoring."""

    title_matches: list[str] = field(default_factory=list)
    body_matches: list[str] = field(default_factory=list)
    label_matches: list[str] = field(default_factory=list)
    number_match: bool = False
    repo_match: bool = False
    fuzzy_matches: list[FuzzyMatch] = field(default_factory=list)


def word_start_boost(term: str, word: str) -> float:
    """exp(-len(term)/len(word)): short terms opening a long word score highest."""
    return math.exp(-len(term) / len(word))


class SearchScorer:
    """Stateless scoring functions; each returns a non-negative field score."""

    def __init__(self, config: SearchConfig) -> None:
        self._config = config

    def calculate_title_score(
        self, issue: Issue, search_terms: list[str], match_details: MatchDetails
    ) -> float:
        score = 0.0
        title = issue.title.lower()
        words = title.split()

        for term in search_terms:
            if term not in title:
                continue
            match_details.title_matches.append(term)
            score += self._config.exact_match_bonus
            for word in words:
                if word.startswith(term):
                    score += word_start_boost(term, word)

        if len(search_terms) > 1 and " ".join(search_terms) in title:
            score += 1

        return min(score, TITLE_SCORE_CAP)

    def calculate_body_score(
        self, issue: Issue, search_terms: list[str], match_details: MatchDetails
    ) -> float:
        score = 0.0
        body = (issue.body or "").lower()
        words = body.split()
        code_blocks = CODE_BLOCK_PATTERN.findall(body)

        for term in search_terms:
            term_score = sum(word_start_boost(term, word) for word in words if word.startswith(term))
            if term_score > 0:
                match_details.body_matches.append(term)
                score += min(term_score, 1.0)

            for block in code_blocks:
                if term in block:
                    score += 0.5

        return min(score, BODY_SCORE_CAP)

    def calculate_meta_score(
        self, issue: Issue, search_terms: list[str], match_details: MatchDetails
    ) -> float:
        score = 0.0
        number = str(issue.number)
        if any(NUMBER_PATTERN.fullmatch(term) and term == number for term in search_terms):
            match_details.number_match = True
            score += 2

        for term in search_terms:
            for label in issue.labels:
                name = label_name(label)
                if name is None:
                    continue
                lowered = name.lower()
                if term not in lowered:
                    continue
                match_details.label_matches.append(name)
                score += 0.8 if lowered.startswith(term) else 0.5

        return score

    def calculate_repo_score(
        self, issue: Issue, search_terms: list[str], match_details: MatchDetails
    ) -> float:
        if not issue.repository_url:
            return 0.0

        owner, repo = _split_repository_url(issue.repository_url)
        score = 0.0
        for term in search_terms:
            term = term.lower()
            if repo and repo.startswith(term):
                match_details.repo_match = True
                score += len(term) / len(repo)
            if owner and owner.startswith(term):
                score += len(term) / len(owner)

        return score

    def calculate_fuzzy_score(
        self, content: str, search_terms: list[str], match_details: MatchDetails
    ) -> float:
        score = 0.0
        tokens = tokenize_content(content)

        for term in search_terms:
            best_word = ""
            best_score = 0.0
            best_is_word_start = False

            for token in tokens:
                is_word_start = token.startswith(term)
                adjusted = string_similarity.calculate(term, token)
                if is_word_start:
                    adjusted += word_start_boost(term, token)
                if adjusted > self._config.fuzzy_search_threshold and adjusted > best_score:
                    best_word, best_score, best_is_word_start = token, adjusted, is_word_start

            if best_score <= 0:
                continue

            match_details.fuzzy_matches.append(
                FuzzyMatch(original=term, matched=best_word, score=best_score)
            )
            if best_is_word_start:
                score += best_score * math.exp(self._config.fuzzy_match_weight)
            else:
                score += best_score * self._config.fuzzy_match_weight

        return min(score, FUZZY_SCORE_CAP)


def tokenize_content(content: str) -> list[str]:
    """Lower-cased words longer than two characters, punctuation treated as whitespace."""
    cleaned = PUNCTUATION_PATTERN.sub(" ", content.lower())
    return [word for word in cleaned.split() if len(word) > 2]


def _split_repository_url(url: str) -> tuple[str, str]:
    parts = url.rstrip("/").split("/")
    repo = parts[-1].lower()
    owner = parts[-2].lower() if len(parts) > 1 else ""
    return owner, repo
