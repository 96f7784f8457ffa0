"""Ignore-file loading and glob-style path filtering.

Patterns are matched against the candidate path relative to the scan root,
using forward slashes. Supported syntax:

* ``*`` matches any run of characters within one path segment.
* ``?`` matches a single character other than ``/``.
* ``[abc]``, ``[a-z]`` and ``[!abc]`` match one character from a class;
  POSIX classes such as ``[[:digit:]]`` are accepted inside a class.
* ``{a,b}`` (nestable) and ``{1..3}`` expand to alternatives before matching.
* ``**`` as a whole segment matches zero or more directories.

Matching is anchored to the whole relative path and case-sensitive. Leading
dots get no special treatment, so ``*`` also matches hidden names.
"""

from __future__ import annotations

import itertools
import logging
import re
import string
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Sequence

from fcstd_preview.errors import IgnorePatternError
from fcstd_preview.utils.paths import relative_posix

LOGGER = logging.getLogger(__name__)

COMMENT_PREFIX = "#"

MAX_BRACE_EXPANSION = 1024

_BRACE_RANGE = re.compile(r"(-?\d+)\.\.(-?\d+)")

_CLASS_ESCAPES = {"\\": "\\\\", "[": "\\[", "]": "\\]", "^": "\\^"}

POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "ascii": "\\x00-\\x7f",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": "".join("\\" + char for char in string.punctuation),
    "space": " \\t\\n\\r\\f\\v",
    "upper": "A-Z",
    "word": "\\w",
    "xdigit": "0-9A-Fa-f",
}


def load_ignore_patterns(ignore_file: Path, logger: logging.Logger | None = None) -> list[str]:
    """Read one pattern per line, skipping blanks and ``#`` comments.

    A missing or unreadable file yields no patterns rather than an error.
    """

    effective_logger = logger or LOGGER
    if not ignore_file.exists():
        effective_logger.warning("ignore.file_missing path=%s", ignore_file)
        return []
    try:
        content = ignore_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        effective_logger.warning("ignore.file_unreadable path=%s error=%s", ignore_file, exc)
        return []

    patterns = [
        line.strip()
        for line in content.splitlines()
        if line.strip() and not line.strip().startswith(COMMENT_PREFIX)
    ]
    effective_logger.info("ignore.loaded path=%s patterns=%s", ignore_file, len(patterns))
    return patterns


def _matching_brace(pattern: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(pattern)):
        if pattern[index] == "{":
            depth += 1
        elif pattern[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _brace_alternatives(body: str) -> list[str] | None:
    """Split a brace body on top-level commas, or expand a numeric range.

    Returns None when the body is not an expansion (``{}`` or ``{a}``).
    """

    sequence = _BRACE_RANGE.fullmatch(body)
    if sequence:
        first, last = int(sequence.group(1)), int(sequence.group(2))
        step = 1 if last >= first else -1
        # One past the cap is enough for expand_braces to reject it.
        values = itertools.islice(range(first, last + step, step), MAX_BRACE_EXPANSION + 1)
        return [str(value) for value in values]

    alternatives: list[str] = []
    depth = 0
    current: list[str] = []
    for char in body:
        if char == "," and depth == 0:
            alternatives.append("".join(current))
            current = []
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current.append(char)
    alternatives.append("".join(current))
    return alternatives if len(alternatives) > 1 else None


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternation and ``{1..3}`` ranges, left to right.

    Unbalanced braces and single-item groups stay literal.
    """

    for open_index, char in enumerate(pattern):
        if char != "{":
            continue
        close_index = _matching_brace(pattern, open_index)
        if close_index is None:
            continue
        alternatives = _brace_alternatives(pattern[open_index + 1 : close_index])
        if alternatives is None:
            continue

        prefix, suffix = pattern[:open_index], pattern[close_index + 1 :]
        expanded: list[str] = []
        for alternative in alternatives:
            expanded.extend(expand_braces(prefix + alternative + suffix))
            if len(expanded) > MAX_BRACE_EXPANSION:
                raise IgnorePatternError(pattern, f"brace expansion exceeds {MAX_BRACE_EXPANSION} patterns")
        return list(dict.fromkeys(expanded))
    return [pattern]


def _translate_class(segment: str, start: int, pattern: str) -> tuple[str, int]:
    """Translate the ``[...]`` class opening at ``start``; return regex and next index."""

    index = start + 1
    negate = index < len(segment) and segment[index] in "!^"
    if negate:
        index += 1
    body_start = index
    members: list[str] = []
    while index < len(segment):
        char = segment[index]
        # A ']' right after the opening bracket is a literal member.
        if char == "]" and index > body_start:
            if members and members[0] == "-":
                members[0] = "\\-"
            if members and members[-1] == "-":
                members[-1] = "\\-"
            body = "".join(members)
            if negate:
                return f"[^{body}/]", index + 1
            return f"[{body}]", index + 1
        if segment.startswith("[:", index):
            end = segment.find(":]", index + 2)
            if end != -1:
                name = segment[index + 2 : end]
                if name not in POSIX_CLASSES:
                    raise IgnorePatternError(pattern, f"unknown character class [:{name}:]")
                members.append(POSIX_CLASSES[name])
                index = end + 2
                continue
        members.append(_CLASS_ESCAPES.get(char, char))
        index += 1
    raise IgnorePatternError(pattern, "unterminated character class")


def _translate_segment(segment: str, pattern: str) -> str:
    parts: list[str] = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == "*":
            while index < len(segment) and segment[index] == "*":
                index += 1
            parts.append("[^/]*")
            continue
        if char == "?":
            parts.append("[^/]")
        elif char == "[":
            translated, index = _translate_class(segment, index, pattern)
            parts.append(translated)
            continue
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


def _translate_path(expanded: str, pattern: str) -> str:
    segments = expanded.split("/")
    regex_parts: list[str] = []
    for position, segment in enumerate(segments):
        is_last = position == len(segments) - 1
        if segment == "**":
            regex_parts.append(".*" if is_last else "(?:[^/]*/)*")
            continue
        regex_parts.append(_translate_segment(segment, pattern))
        if not is_last:
            regex_parts.append("/")
    return "".join(regex_parts)


@lru_cache(maxsize=256)
def compile_ignore_pattern(pattern: str) -> re.Pattern[str]:
    """Compile one glob pattern into an anchored regular expression.

    Raises ``IgnorePatternError`` when the pattern cannot be compiled.
    """

    if pattern == "":
        raise IgnorePatternError(pattern, "empty pattern")

    alternatives = [_translate_path(expanded, pattern) for expanded in expand_braces(pattern)]
    regex = "|".join(f"(?:{alternative})" for alternative in alternatives)
    try:
        return re.compile(regex)
    except re.error as exc:
        raise IgnorePatternError(pattern, str(exc)) from exc


def _compiled_patterns(
    patterns: Sequence[str],
    logger: logging.Logger,
) -> list[re.Pattern[str]]:
    """Compile patterns, dropping (and warning about) malformed ones."""

    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(compile_ignore_pattern(pattern))
        except IgnorePatternError as exc:
            logger.warning("ignore.pattern_malformed pattern=%r error=%s", pattern, exc)
    return compiled


def _matches_any(path: Path, root_dir: Path, compiled: Sequence[re.Pattern[str]]) -> bool:
    relative = relative_posix(path, root_dir)
    return any(regex.fullmatch(relative) for regex in compiled)


def is_ignored(
    path: Path,
    root_dir: Path,
    patterns: Sequence[str] | None = None,
    enabled: bool = True,
    logger: logging.Logger | None = None,
) -> bool:
    """Return True when ``path`` relative to ``root_dir`` matches any pattern."""

    if not enabled or not patterns:
        return False
    compiled = _compiled_patterns(patterns, logger or LOGGER)
    return _matches_any(path, root_dir, compiled)


def filter_ignored(
    paths: Iterable[Path],
    root_dir: Path,
    patterns: Sequence[str] | None = None,
    enabled: bool = True,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """Return the paths not excluded by any pattern, preserving input order."""

    candidates = list(paths)
    if not enabled or not patterns:
        return candidates
    compiled = _compiled_patterns(patterns, logger or LOGGER)
    if not compiled:
        return candidates
    return [path for path in candidates if not _matches_any(path, root_dir, compiled)]
