"""Gitignore-style rules for leaving entries out of structures and trees."""

from .glob_pattern import GlobPattern, compile_pattern
from .ignore_set import IgnoreRule, IgnoreSet, RuleResolution, as_ignore_set, should_ignore

__all__ = [
    "GlobPattern",
    "IgnoreRule",
    "IgnoreSet",
    "RuleResolution",
    "as_ignore_set",
    "compile_pattern",
    "should_ignore",
]
