"""
Tests for name pattern handling.
"""

from __future__ import annotations

import pytest

from shardstore.patterns import build_like_pattern, escape_like, like_to_regex, matches


class TestBuildLikePattern:
    """Tests for LIKE pattern construction."""

    def test_plain(self) -> None:
        assert build_like_pattern("ab", "") == "ab%"
        assert build_like_pattern("", "c") == "%c"
        assert build_like_pattern("a", "d") == "a%d"

    def test_wildcards_pass_through_unescaped(self) -> None:
        """Test that % and _ in arguments stay wildcards by default."""
        assert build_like_pattern("a_", "%") == "a_%%"

    def test_escaped(self) -> None:
        """Test that escaping makes wildcards literal."""
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
        assert build_like_pattern("a_", "%", escape=True) == "a\\_%\\%"


class TestMatches:
    """Tests for the regex rendition of LIKE."""

    @pytest.mark.parametrize(
        ("prefix", "postfix", "expected"),
        [
            ("ab", "", {"abc", "abd"}),
            ("", "c", {"abc", "xbc"}),
            ("a", "d", {"abd"}),
            ("", "", {"abc", "abd", "xbc"}),
        ],
    )
    def test_prefix_postfix(self, prefix: str, postfix: str, expected: set[str]) -> None:
        names = {"abc", "abd", "xbc"}
        assert {n for n in names if matches(n, prefix, postfix)} == expected

    def test_prefix_and_postfix_may_not_overlap(self) -> None:
        """Test that the name must be at least as long as prefix plus postfix."""
        assert not matches("ab", "ab", "b")
        assert matches("abb", "ab", "b")

    def test_ascii_case_insensitive(self) -> None:
        """Test SQLite-compatible case folding."""
        assert matches("ABC", "ab", "")
        assert not matches("Äb", "ä", "")

    def test_unescaped_underscore_is_wildcard(self) -> None:
        assert matches("axc", "a_", "")
        assert matches("a_c", "a_", "")

    def test_escaped_underscore_is_literal(self) -> None:
        assert not matches("axc", "a_", "", escape=True)
        assert matches("a_c", "a_", "", escape=True)

    def test_escaped_percent_is_literal(self) -> None:
        assert matches("100%", "", "0%", escape=True)
        assert not matches("1000", "", "0%", escape=True)
        assert matches("1000", "", "0%")

    def test_regex_metacharacters_are_literal(self) -> None:
        """Test that regex syntax in names has no special meaning."""
        regex = like_to_regex(build_like_pattern("a.b", "(x)"))
        assert regex.fullmatch("a.b--(x)")
        assert not regex.fullmatch("azb--(x)")

    def test_newlines_match_run_wildcard(self) -> None:
        assert matches("a\nb", "a", "b")
