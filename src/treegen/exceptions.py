from typing import Optional


class MalformedStructureError(ValueError):
    """
    Exception raised when a structure text does not belong to the expected root.

    Every non-empty line of a structure text must start with the root label followed
    by ``>`` and at least one more character. The first line that breaks this rule is
    reported.

    Attributes:
        root_label (str): The root label the structure was validated against.
        line (Optional[str]): The first offending line, stripped.
        line_number (Optional[int]): 1-based number of the offending line.

    Example:
        >>> error = MalformedStructureError("root", "other>x", 1)
        >>> str(error)
        "The given structure is not a valid treegen structure: line 1 ('other>x') does not start with 'root>'"
    """

    def __init__(self, root_label: str, line: Optional[str] = None, line_number: Optional[int] = None) -> None:
        """
        Initialize the exception with the expected root and the offending line.

        Args:
            root_label (str): The root label every line was expected to start with.
            line (str, optional): The first line that failed validation.
            line_number (int, optional): 1-based position of that line.
        """
        self.root_label = root_label
        self.line = line
        self.line_number = line_number
        message = "The given structure is not a valid treegen structure"
        if line is not None and line_number is not None:
            message += f": line {line_number} ({line!r}) does not start with '{root_label}>'"
        else:
            message += f": expected lines starting with '{root_label}>'"
        super().__init__(message)


class PatternCompileError(ValueError):
    """
    Exception raised when an ignore pattern cannot be translated into a matcher.

    Patterns are compiled eagerly, so a malformed pattern fails when it is added to
    an ignore set rather than when the first path is tested.

    Attributes:
        pattern (str): The pattern that failed to compile.
        reason (str): Short description of the problem.

    Example:
        >>> error = PatternCompileError("debug[0-9.log", "unterminated character class")
        >>> str(error)
        "Invalid ignore pattern 'debug[0-9.log': unterminated character class"
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid ignore pattern {pattern!r}: {reason}")
