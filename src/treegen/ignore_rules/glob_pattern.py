"""Translation of gitignore-style glob patterns into anchored regular expressions."""

import logging
import re
from typing import List, Optional, Tuple

from pathspec.pattern import RegexPattern

from treegen.exceptions import PatternCompileError

logger = logging.getLogger(__name__)

DOUBLE_STAR = "**"


class GlobPattern(RegexPattern):
    """A single ignore rule compiled from a gitignore-style glob.

    The pattern is translated once, at construction, into a regular expression that
    is matched against slash-separated paths relative to the scanned root. The class
    plugs into pathspec the same way pathspec's own GitWildMatchPattern does, so
    compiled rules can be combined in a ``pathspec.PathSpec``.

    Supported syntax:
    - ``*`` matches any run of characters within one path segment
    - ``**`` matches zero or more whole segments (``**/logs`` also matches ``logs``)
    - ``?`` matches exactly one character other than ``/``
    - ``[0-9]``, ``[abc]`` and negated ``[!01]`` character classes
    - a leading ``/`` anchors the rule to the root, as does a ``/`` in the middle
    - a pattern without ``/`` matches the basename at any depth
    - a trailing ``/`` (and any match in general) covers everything below the match
    - a leading ``!`` negates the rule; ``include`` is then False
    - ``\\`` escapes the following character

    Empty patterns, ``#`` comments and patterns reduced to nothing (``!``, ``/``)
    compile to a null rule that matches nothing.

    Example:
        >>> rule = GlobPattern("*.log")
        >>> rule.test("logs/debug.log")
        True
        >>> rule.test("trace-log")
        False
        >>> GlobPattern("/debug.log").test("logs/debug.log")
        False
        >>> GlobPattern("!important.log").test("important.log")
        False
    """

    __slots__ = ()

    @classmethod
    def pattern_to_regex(cls, pattern: str) -> Tuple[Optional[str], Optional[bool]]:
        """Convert a glob pattern into a regular expression.

        Args:
            pattern: The glob pattern to convert.

        Returns:
            A ``(regex, include)`` pair. ``include`` is True for an excluding rule,
            False for a negated (``!``) rule and None, together with a None regex,
            for a rule that matches nothing.

        Raises:
            PatternCompileError: If the pattern has an unterminated character class
                or ends with a dangling backslash.

        Example:
            >>> GlobPattern.pattern_to_regex("logs/*.txt")
            ('^/?logs/[^/]*\\\\.txt(?:/.*)?$', True)
            >>> GlobPattern.pattern_to_regex("")
            (None, None)
        """
        if not pattern or pattern.startswith("#"):
            return None, None

        include = True
        body = pattern
        if body.startswith("!"):
            include = False
            body = body[1:]

        segments = _collapse_segments(body.split("/"))
        if not segments:
            return None, None

        # A leading slash or a slash between segments pins the rule to the root
        anchored = body.startswith("/") or len(segments) > 1

        parts = ["^/?" if anchored else "^(?:.*/)?"]
        last_index = len(segments) - 1
        for index, segment in enumerate(segments):
            if segment == DOUBLE_STAR:
                if index == 0 and index == last_index:
                    parts.append(".*")
                elif index == 0:
                    parts.append("(?:[^/]+/)*")
                elif index == last_index:
                    parts.append("(?:/.*)?")
                else:
                    parts.append("(?:/[^/]+)*/")
                continue

            if index > 0 and segments[index - 1] != DOUBLE_STAR:
                parts.append("/")
            parts.append(_translate_segment(segment, pattern))

        if segments[-1] != DOUBLE_STAR:
            parts.append("(?:/.*)?")
        parts.append("$")

        regex = "".join(parts)
        logger.debug("Compiled ignore pattern %r to %r (include=%s)", pattern, regex, include)
        return regex, include

    @property
    def negated(self) -> bool:
        """Whether this rule re-includes paths (``!pattern``) instead of excluding them."""
        return self.include is False

    def test(self, path: str) -> bool:
        """Check whether this rule, taken on its own, excludes a path.

        Negated and null rules never exclude anything; what a negated rule does in
        combination with other rules is decided by the ignore set holding it.

        Args:
            path: Slash-separated path relative to the scanned root.

        Returns:
            bool: True if the rule excludes the path.
        """
        return self.include is True and self.match_file(path) is not None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.pattern!r})"


def compile_pattern(pattern: str) -> GlobPattern:
    """Compile a glob pattern into a matcher.

    Args:
        pattern: A gitignore-style glob pattern.

    Returns:
        GlobPattern: The compiled rule.

    Raises:
        PatternCompileError: If the pattern cannot be translated.

    Example:
        >>> matcher = compile_pattern("**/logs")
        >>> [matcher.test(p) for p in ("logs", "build/logs/debug.log", "source/code.js")]
        [True, True, False]
    """
    return GlobPattern(pattern)


def _collapse_segments(raw_segments: List[str]) -> List[str]:
    """Drop empty segments and fold runs of ``*`` (and repeated ``**``) into one ``**``."""
    segments: List[str] = []
    for segment in raw_segments:
        if not segment:
            continue
        if len(segment) > 1 and set(segment) == {"*"}:
            segment = DOUBLE_STAR
        if segment == DOUBLE_STAR and segments and segments[-1] == DOUBLE_STAR:
            continue
        segments.append(segment)
    return segments


def _translate_segment(segment: str, pattern: str) -> str:
    """Translate one path segment (no slashes) into a regex fragment."""
    parts: List[str] = []
    index = 0
    length = len(segment)
    while index < length:
        char = segment[index]
        if char == "\\":
            if index + 1 >= length:
                raise PatternCompileError(pattern, "trailing backslash escapes nothing")
            parts.append(re.escape(segment[index + 1]))
            index += 2
        elif char == "*":
            end = index
            while end < length and segment[end] == "*":
                end += 1
            parts.append("[^/]*" if end - index == 1 else ".*")
            index = end
        elif char == "?":
            parts.append("[^/]")
            index += 1
        elif char == "[":
            fragment, index = _translate_class(segment, index, pattern)
            parts.append(fragment)
        else:
            parts.append(re.escape(char))
            index += 1
    return "".join(parts)


def _translate_class(segment: str, start: int, pattern: str) -> Tuple[str, int]:
    """Translate the bracket expression opening at ``segment[start]``.

    Returns:
        The regex character class and the index just past the closing bracket.
    """
    index = start + 1
    negate = index < len(segment) and segment[index] in "!^"
    if negate:
        index += 1
    members_start = index

    # A closing bracket right after the opening one is a literal member
    if index < len(segment) and segment[index] == "]":
        index += 1

    end = segment.find("]", index)
    if end == -1:
        raise PatternCompileError(pattern, "unterminated character class")

    members = segment[members_start:end].replace("\\", "\\\\").replace("[", "\\[")
    if negate:
        # Classes never match the path separator
        return f"[^{members}/]", end + 1
    return f"[{members}]", end + 1
