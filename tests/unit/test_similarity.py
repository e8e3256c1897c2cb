# ABOUTME: Unit tests for normalization and Levenshtein similarity scoring.
# ABOUTME: Covers Unicode handling, vacuous empty matches, symmetry, and dedup keys.

import pytest

from bookclub.metadata.similarity import levenshtein, match_key, normalize, similarity


class TestNormalize:
    """Tests for normalize()."""

    def test_lowercases_and_strips_punctuation(self) -> None:
        """Punctuation is removed and letters lowercased."""
        assert normalize("Dune: Messiah!") == "dune messiah"

    def test_keeps_cyrillic_letters(self) -> None:
        """Letters from non-Latin scripts survive normalization."""
        assert normalize("«Дюна»!") == "дюна"

    def test_collapses_whitespace(self) -> None:
        """Runs of whitespace become one space and the ends are trimmed."""
        assert normalize("  The   Hobbit \t or\nThere ") == "the hobbit or there"

    def test_keeps_digits_drops_underscores(self) -> None:
        """Digits are letters-or-digits; underscores are not."""
        assert normalize("Catch_22") == "catch22"

    def test_symbols_only_becomes_empty(self) -> None:
        """A string of symbols normalizes to the empty string."""
        assert normalize("?!…—") == ""


class TestLevenshtein:
    """Tests for levenshtein()."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("kitten", "sitting", 3),
            ("", "abc", 3),
            ("abc", "", 3),
            ("дюна", "дюна", 0),
            ("херберт", "герберт", 1),
        ],
    )
    def test_edit_distance(self, a: str, b: str, expected: int) -> None:
        """Counts insertions, deletions, and substitutions."""
        assert levenshtein(a, b) == expected


class TestSimilarity:
    """Tests for similarity()."""

    def test_identical_after_normalization(self) -> None:
        """Case and punctuation differences still score 1.0."""
        assert similarity("DUNE!", "dune") == 1.0

    def test_empty_side_is_vacuous_match(self) -> None:
        """If either side normalizes to empty, the score is 1.0."""
        assert similarity("", "Dune") == 1.0
        assert similarity("Dune", "!!!") == 1.0

    def test_one_substitution_in_author(self) -> None:
        """A single letter off in a 13-character name scores 12/13."""
        assert similarity("Фрэнк Херберт", "Фрэнк Герберт") == pytest.approx(12 / 13)

    def test_surname_only_is_far_from_full_name(self) -> None:
        """Missing the first name costs far more than the threshold allows."""
        assert similarity("Херберт", "Фрэнк Герберт") < 0.5

    def test_symmetric(self) -> None:
        """similarity(a, b) == similarity(b, a)."""
        pairs = [("Dune", "Dune Messiah"), ("Дюна", "Дюнa"), ("abc", "xyz")]
        for a, b in pairs:
            assert similarity(a, b) == similarity(b, a)

    def test_result_within_unit_interval(self) -> None:
        """Completely different strings score 0.0, never below."""
        assert similarity("abc", "xyz") == 0.0


class TestMatchKey:
    """Tests for match_key()."""

    def test_title_and_author(self) -> None:
        assert match_key("Dune!", "Frank  Herbert") == "dune|||frank herbert"

    def test_missing_author_uses_placeholder(self) -> None:
        assert match_key("Дюна", None) == "дюна|||no-author"
