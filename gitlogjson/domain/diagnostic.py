"""
Non-fatal problems found while reading tags and log lines.

Invalid tags and malformed log lines are raised as exceptions where they are
detected, caught by the loop that is reading them, and kept as Diagnostic
entries so the run can report them as warnings without aborting.
"""

from dataclasses import dataclass


class InvalidTagSyntax(ValueError):
    """A tag label is not a semantic version."""

    def __init__(self, label: str):
        super().__init__(f"Not a semantic version tag: {label!r}")
        self.label = label


class MalformedRecord(ValueError):
    """A log line does not hold the sha, author and date fields."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Malformed log line ({reason}): {line!r}")
        self.line = line
        self.reason = reason


@dataclass(frozen=True)
class Diagnostic:
    """A warning about an input that was skipped."""
    kind: str
    subject: str
    message: str

    @classmethod
    def from_error(cls, error: ValueError) -> 'Diagnostic':
        if isinstance(error, InvalidTagSyntax):
            return cls(kind="InvalidTagSyntax", subject=error.label, message=str(error))
        if isinstance(error, MalformedRecord):
            return cls(kind="MalformedRecord", subject=error.line, message=str(error))
        return cls(kind=type(error).__name__, subject="", message=str(error))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'kind': self.kind,
            'subject': self.subject,
            'message': self.message,
        }

    def __str__(self) -> str:
        return self.message
