import pytest

from string_similarity import calculate, levenshtein_distance


def test_levenshtein_distance_classic_example() -> None:
    assert levenshtein_distance("kitten", "sitting") == 3


def test_levenshtein_distance_against_empty_string() -> None:
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("abc", "") == 3


def test_calculate_identical_strings_is_one() -> None:
    assert calculate("label", "label") == 1.0


def test_calculate_two_empty_strings_is_one() -> None:
    assert calculate("", "") == 1.0


def test_calculate_normalizes_by_longer_string() -> None:
    assert calculate("kitten", "sitting") == pytest.approx(1 - 3 / 7)
    assert calculate("labek", "label") == pytest.approx(0.8)


@pytest.mark.parametrize(
    ("first", "second"),
    [("", "x"), ("abc", "xyz"), ("issue", "issues"), ("a", "abcdefgh")],
)
def test_calculate_stays_within_bounds(first: str, second: str) -> None:
    value = calculate(first, second)

    assert 0.0 <= value <= 1.0
    assert value == calculate(second, first)
