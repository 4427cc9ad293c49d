"""
Commit records parsed from delimiter-joined `git log` lines.

Each line holds the sha, the author, the date and the commit subject joined
by one delimiter character. The subject is free text and may contain the
delimiter itself, so a line is split at most three times: everything after
the third delimiter is the message, exactly as git printed it.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .diagnostic import Diagnostic, MalformedRecord

logger = logging.getLogger(__name__)

# ASCII unit separator; git emits it for %x1f
DEFAULT_DELIMITER = '\x1f'

_LEADING_FIELDS = 3


def check_delimiter(delimiter: str) -> str:
    """
    Return the delimiter unchanged if git can emit it as one %xNN escape.

    Raises:
        ValueError: not a single ASCII character, or a newline
    """
    if not isinstance(delimiter, str) or len(delimiter) != 1 or delimiter == '\n':
        raise ValueError(f"delimiter must be a single character other than newline, got {delimiter!r}")
    # %xNN emits one raw byte; anything above 0x7f is not valid UTF-8 on its own
    if ord(delimiter) > 0x7f:
        raise ValueError(f"delimiter must be an ASCII character, got {delimiter!r}")
    return delimiter


@dataclass(frozen=True)
class CommitRecord:
    """A single commit as it appears in the changelog."""
    sha: str
    author: str
    date: str
    message: str

    @classmethod
    def from_line(cls, line: str, delimiter: str = DEFAULT_DELIMITER) -> 'CommitRecord':
        """
        Parse one log line.

        Raises:
            MalformedRecord: if the sha, author or date field is missing
        """
        parts = line.split(delimiter, _LEADING_FIELDS)
        if len(parts) < _LEADING_FIELDS:
            raise MalformedRecord(
                line, f"expected at least {_LEADING_FIELDS} fields, found {len(parts)}"
            )

        sha, author, date = parts[0], parts[1], parts[2]
        if not sha.strip():
            raise MalformedRecord(line, "empty commit id")

        message = parts[3] if len(parts) > _LEADING_FIELDS else ''
        return cls(sha=sha.strip(), author=author, date=date, message=message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'sha': self.sha,
            'author': self.author,
            'date': self.date,
            'message': self.message,
        }


def format_record_line(record: CommitRecord, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Join a record back into the line shape `git log` produces."""
    return delimiter.join([record.sha, record.author, record.date, record.message])


@dataclass
class RecordParser:
    """
    Turns raw `git log` output into CommitRecords.

    Blank lines are ignored. Lines that cannot be parsed are skipped and
    kept in `diagnostics`; they never abort the parse.

    Example:
        parser = RecordParser(delimiter=",")
        records = parser.parse("abc123,A <a@x.com>,2020-01-01,fix: a, b, and c\\n")
        records[0].message  # 'fix: a, b, and c'
    """
    delimiter: str = DEFAULT_DELIMITER
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def __post_init__(self):
        check_delimiter(self.delimiter)

    def parse(self, raw_text: str) -> List[CommitRecord]:
        records = []
        # str.splitlines() would also break on \x1c-\x1e, \x85 and \u2028,
        # all of which may legally occur inside a commit subject.
        for line in raw_text.split('\n'):
            if not line.strip():
                continue
            try:
                records.append(CommitRecord.from_line(line, self.delimiter))
            except MalformedRecord as e:
                logger.warning(f"Skipping log line: {e}")
                self.diagnostics.append(Diagnostic.from_error(e))
        return records
