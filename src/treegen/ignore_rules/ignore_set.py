"""Ordered collection of ignore rules with a selectable resolution strategy."""

import logging
import re
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Iterable, Iterator, List, Match, Optional, Pattern, Sequence, Union

from pathspec.pattern import RegexPattern

from treegen.types import PathType

from .glob_pattern import GlobPattern

logger = logging.getLogger(__name__)

# Anything add_rule() accepts: a glob, a precompiled regex or a ready pathspec pattern
IgnoreRule = Union[str, Pattern[str], RegexPattern]

# Unescaped trailing spaces are not part of a rule read from a file
TRAILING_SPACES = re.compile(r"(?<!\\)( +)$")


class PrefixRegexPattern(RegexPattern):
    """A precompiled regular expression that must match from the start of the path.

    Example:
        >>> rule = PrefixRegexPattern(re.compile(r"cli\\.ts"), include=True)
        >>> rule.match_file("cli.ts") is not None
        True
        >>> rule.match_file("src/cli.ts") is None
        True
    """

    __slots__ = ()

    def match_file(self, file: str) -> Optional[Match[str]]:  # type: ignore[override]
        if self.include is None or self.regex is None:
            return None
        return self.regex.match(file)


class RuleResolution(str, Enum):
    """How the rules of an ignore set combine into one answer.

    Values:
        ANY_MATCH: A path is ignored if any non-negated rule matches it (default).
            Negated rules are inert.
        LAST_MATCH: Rules are evaluated in declaration order and the last matching
            rule decides; a matching negated rule re-includes the path.
    """

    ANY_MATCH = "any"
    LAST_MATCH = "last"


class IgnoreSet:
    """Ordered set of ignore rules answering whether a path should be skipped.

    Rules are kept in the order they were added. Paths are expected to be
    slash-separated and relative to the root being scanned or parsed; a bare name
    is simply a path at depth one.

    Attributes:
        resolution (RuleResolution): How matching rules are combined.

    Example:
        >>> rules = IgnoreSet(["*.log", "!important.log"])
        >>> rules.should_ignore("debug.log")
        True
        >>> rules.should_ignore("important.log")
        True
        >>> rules.resolution = RuleResolution.LAST_MATCH
        >>> rules.should_ignore("important.log")
        False
    """

    def __init__(
        self,
        rules: Optional[Iterable[IgnoreRule]] = None,
        resolution: Union[str, RuleResolution] = RuleResolution.ANY_MATCH,
    ) -> None:
        """Initialize the set, optionally with a first batch of rules.

        Args:
            rules: Rules to add, in order.
            resolution: Resolution strategy, either a RuleResolution or its value
                ("any" or "last").

        Raises:
            ValueError: If the resolution is not recognised.
            PatternCompileError: If a glob rule cannot be compiled.
        """
        self.resolution = RuleResolution(resolution)
        self._patterns: List[RegexPattern] = []
        if rules is not None:
            for rule in rules:
                self.add_rule(rule)

    @property
    def patterns(self) -> List[RegexPattern]:
        """The compiled rules, in declaration order."""
        return list(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[RegexPattern]:
        return iter(self._patterns)

    def add_rule(self, rule: IgnoreRule) -> None:
        """Add a single rule at the end of the set.

        Args:
            rule: A gitignore-style glob (e.g. ``"*.pyc"``, ``"build/"``,
                ``"!keep.pyc"``), a precompiled regular expression matched from the
                start of the path, or an existing pathspec pattern.

        Raises:
            PatternCompileError: If a glob rule cannot be compiled.
            TypeError: If the rule is of an unsupported type.
        """
        if isinstance(rule, RegexPattern):
            pattern = rule
        elif isinstance(rule, str):
            pattern = GlobPattern(rule)
        elif hasattr(rule, "match"):
            pattern = PrefixRegexPattern(rule, include=True)
        else:
            raise TypeError(f"Expected a pattern string, regex or pathspec pattern, got {type(rule).__name__}")
        self._patterns.append(pattern)

    def load_rules(self, rules_files: Union[PathType, Sequence[PathType]]) -> None:
        """Add every rule from one or more ``.gitignore``-style files.

        Blank lines and ``#`` comments are skipped and trailing spaces are dropped
        unless escaped with a backslash. Files are read in order and their rules
        appended after the existing ones.

        Args:
            rules_files: Path or sequence of paths to rule files.

        Raises:
            FileNotFoundError: If any rules file does not exist.
            PatternCompileError: If a line cannot be compiled.
        """
        if isinstance(rules_files, (str, PathLike)):
            rules_files = [rules_files]

        for rules_file in rules_files:
            path = Path(rules_file)
            if not path.exists():
                raise FileNotFoundError(f"Rules file not found: {path}")

            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()

            loaded = 0
            for line in lines:
                if not line.strip() or line.startswith("#"):
                    continue
                self.add_rule(TRAILING_SPACES.sub("", line))
                loaded += 1
            logger.debug("Loaded %d ignore rules from %s", loaded, path)

    def should_ignore(self, path: str) -> bool:
        """Check whether a path is excluded by this set.

        Args:
            path: Slash-separated path relative to the root.

        Returns:
            bool: True if the path should be left out.
        """
        if not self._patterns:
            return False
        if self.resolution is RuleResolution.LAST_MATCH:
            ignored = False
            for pattern in self._patterns:
                if pattern.include is not None and pattern.match_file(path) is not None:
                    ignored = pattern.include
            return ignored
        return any(pattern.include is True and pattern.match_file(path) is not None for pattern in self._patterns)


def should_ignore(path: str, rules: Union[IgnoreSet, Iterable[IgnoreRule], None] = None) -> bool:
    """Check a path against rules that may not be wrapped in an IgnoreSet yet.

    Args:
        path: Slash-separated path relative to the root.
        rules: An IgnoreSet, any iterable of rules, or None for no rules.

    Returns:
        bool: True if any rule excludes the path.

    Example:
        >>> should_ignore("build/out.js", ["build/"])
        True
        >>> should_ignore("src/main.py", None)
        False
    """
    return as_ignore_set(rules).should_ignore(path)


def as_ignore_set(rules: Union[IgnoreSet, Iterable[IgnoreRule], None]) -> IgnoreSet:
    """Return ``rules`` unchanged if it is an IgnoreSet, otherwise wrap it in one."""
    if isinstance(rules, IgnoreSet):
        return rules
    if isinstance(rules, str):
        return IgnoreSet([rules])
    return IgnoreSet(rules)
