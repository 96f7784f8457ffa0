"""Tests for ignore-file loading and glob filtering."""

import itertools
import logging

import pytest

from fcstd_preview.errors import IgnorePatternError
from fcstd_preview.ingest.ignore import (
    compile_ignore_pattern,
    filter_ignored,
    is_ignored,
    load_ignore_patterns,
)


@pytest.fixture
def root(tmp_path):
    return tmp_path / "project"


@pytest.fixture
def candidates(root):
    return [
        root / "model1.FCStd",
        root / "model2.FCStd",
        root / "archived" / "old-model.FCStd",
        root / "archived" / "deep" / "older.FCStd",
        root / "backup" / "temp.FCStd",
        root / "subdir" / "nested.FCStd",
        root / ".cache" / "hidden.FCStd",
    ]


def _relative(paths, root):
    return [path.relative_to(root).as_posix() for path in paths]


def test_load_ignore_patterns_skips_comments_and_blanks(tmp_path):
    """Comments and empty lines are dropped; patterns are stripped."""
    ignore_file = tmp_path / ".fcignore"
    ignore_file.write_text(
        "# Ignore archived files\narchived/*.FCStd\n\n  backup/*.FCStd  \n# trailing comment\nmodel2.FCStd\n",
        encoding="utf-8",
    )

    assert load_ignore_patterns(ignore_file) == ["archived/*.FCStd", "backup/*.FCStd", "model2.FCStd"]


def test_load_ignore_patterns_missing_file_warns(tmp_path, caplog):
    """A missing ignore file is not an error."""
    with caplog.at_level(logging.WARNING):
        patterns = load_ignore_patterns(tmp_path / "absent.fcignore")

    assert patterns == []
    assert "ignore.file_missing" in caplog.text


def test_empty_patterns_are_identity(root, candidates):
    """No patterns means nothing is filtered."""
    assert filter_ignored(candidates, root, []) == candidates
    assert filter_ignored(candidates, root, None) == candidates


def test_zero_candidates_are_identity(root):
    """Filtering an empty candidate list yields an empty list."""
    assert filter_ignored([], root, []) == []
    assert filter_ignored([], root, ["*.FCStd"]) == []


def test_disabled_filter_is_identity(root, candidates):
    """A disabled filter ignores its patterns."""
    assert filter_ignored(candidates, root, ["**"], enabled=False) == candidates
    assert not is_ignored(candidates[0], root, ["**"], enabled=False)


def test_directory_pattern_matches_one_level(root, candidates):
    """A single star does not cross directory separators."""
    surviving = filter_ignored(candidates, root, ["archived/*.FCStd"])

    assert "archived/old-model.FCStd" not in _relative(surviving, root)
    assert "archived/deep/older.FCStd" in _relative(surviving, root)
    assert "model1.FCStd" in _relative(surviving, root)


def test_bare_file_name_matches_only_at_root(root, candidates):
    """Patterns are anchored to the scan root."""
    assert is_ignored(root / "model2.FCStd", root, ["model2.FCStd"])
    assert not is_ignored(root / "subdir" / "model2.FCStd", root, ["model2.FCStd"])


def test_globstar_matches_any_depth(root, candidates):
    """A ** segment spans zero or more directories."""
    surviving = filter_ignored(candidates, root, ["**/*older.FCStd", "backup/**"])

    assert _relative(surviving, root) == [
        "model1.FCStd",
        "model2.FCStd",
        "archived/old-model.FCStd",
        "subdir/nested.FCStd",
        ".cache/hidden.FCStd",
    ]
    assert is_ignored(root / "top.FCStd", root, ["**/top.FCStd"])


def test_dotfiles_match_literally(root, candidates):
    """Hidden directories are not skipped by wildcards."""
    assert is_ignored(root / ".cache" / "hidden.FCStd", root, ["*/hidden.FCStd"])
    assert is_ignored(root / ".cache" / "hidden.FCStd", root, [".cache/**"])
    assert is_ignored(root / ".hidden.FCStd", root, ["*.FCStd"])


def test_matching_is_case_sensitive(root):
    """Pattern case must match the path."""
    assert not is_ignored(root / "archived" / "a.FCStd", root, ["archived/*.fcstd"])


def test_character_classes(root):
    """Bracket classes and negated classes match one character."""
    assert is_ignored(root / "model1.FCStd", root, ["model[12].FCStd"])
    assert not is_ignored(root / "model3.FCStd", root, ["model[12].FCStd"])
    assert is_ignored(root / "model3.FCStd", root, ["model[!12].FCStd"])
    assert is_ignored(root / "model7.FCStd", root, ["model?.FCStd"])


def test_any_pattern_excludes(root, candidates):
    """Exclusion is a logical OR over patterns."""
    surviving = filter_ignored(candidates, root, ["model2.FCStd", "backup/*.FCStd", "archived/**"])

    assert _relative(surviving, root) == ["model1.FCStd", "subdir/nested.FCStd", ".cache/hidden.FCStd"]


def test_pattern_order_does_not_matter(root, candidates):
    """Every ordering of the same patterns gives the same result."""
    patterns = ["model2.FCStd", "backup/*.FCStd", "archived/**", "[z-a]"]
    expected = filter_ignored(candidates, root, patterns)

    for ordering in itertools.permutations(patterns):
        assert filter_ignored(candidates, root, list(ordering)) == expected


@pytest.mark.parametrize("pattern", ["archived/[z-a].FCStd", "model[.FCStd", "[]"])
def test_compile_rejects_malformed_patterns(pattern):
    """Unterminated classes and reversed ranges are malformed."""
    with pytest.raises(IgnorePatternError) as exc_info:
        compile_ignore_pattern(pattern)

    assert exc_info.value.kind == "malformed_pattern"
    assert exc_info.value.pattern == pattern


def test_malformed_pattern_does_not_suppress_valid_ones(root, candidates, caplog):
    """A malformed pattern warns, never matches, and valid patterns still apply."""
    with caplog.at_level(logging.WARNING):
        surviving = filter_ignored(candidates, root, ["model[", "model2.FCStd"])

    assert "model2.FCStd" not in _relative(surviving, root)
    assert len(surviving) == len(candidates) - 1
    assert "ignore.pattern_malformed" in caplog.text


def test_only_malformed_patterns_filter_nothing(root, candidates):
    """A candidate is never excluded solely because a pattern is malformed."""
    assert filter_ignored(candidates, root, ["[z-a]", "model["]) == candidates
    assert not is_ignored(candidates[0], root, ["[z-a]"])


def test_brace_alternation(root, candidates):
    """``{a,b}`` matches either alternative, including across segments."""
    surviving = filter_ignored(candidates, root, ["{archived,backup}/*.FCStd"])

    assert _relative(surviving, root) == [
        "model1.FCStd",
        "model2.FCStd",
        "archived/deep/older.FCStd",
        "subdir/nested.FCStd",
        ".cache/hidden.FCStd",
    ]
    assert is_ignored(root / "archived" / "deep" / "older.FCStd", root, ["{backup,archived/deep}/*.FCStd"])


def test_nested_braces_and_ranges(root):
    """Braces nest, and ``{1..3}`` expands to a numeric sequence."""
    pattern = ["model{1,{7,9}}.FCStd"]
    assert is_ignored(root / "model1.FCStd", root, pattern)
    assert is_ignored(root / "model9.FCStd", root, pattern)
    assert not is_ignored(root / "model2.FCStd", root, pattern)

    assert is_ignored(root / "part2.FCStd", root, ["part{1..3}.FCStd"])
    assert not is_ignored(root / "part4.FCStd", root, ["part{1..3}.FCStd"])


def test_single_item_and_unbalanced_braces_stay_literal(root):
    assert is_ignored(root / "{draft}.FCStd", root, ["{draft}.FCStd"])
    assert is_ignored(root / "{a,b.FCStd", root, ["{a,b.FCStd"])
    assert not is_ignored(root / "a.FCStd", root, ["{a,b.FCStd"])


def test_posix_character_classes(root):
    """``[[:digit:]]`` and friends match inside bracket classes."""
    assert is_ignored(root / "a1.FCStd", root, ["a[[:digit:]].FCStd"])
    assert not is_ignored(root / "ab.FCStd", root, ["a[[:digit:]].FCStd"])
    assert is_ignored(root / "aB.FCStd", root, ["a[[:upper:][:digit:]].FCStd"])
    assert is_ignored(root / "ab.FCStd", root, ["a[![:digit:]].FCStd"])
    assert not is_ignored(root / "a5.FCStd", root, ["a[![:digit:]].FCStd"])


def test_unknown_posix_class_is_malformed(root, caplog):
    with pytest.raises(IgnorePatternError):
        compile_ignore_pattern("a[[:digits:]].FCStd")

    with caplog.at_level(logging.WARNING):
        assert not is_ignored(root / "a1.FCStd", root, ["a[[:digits:]].FCStd"])
    assert "ignore.pattern_malformed" in caplog.text


def test_oversized_brace_range_is_malformed():
    with pytest.raises(IgnorePatternError):
        compile_ignore_pattern("part{1..99999999}.FCStd")
