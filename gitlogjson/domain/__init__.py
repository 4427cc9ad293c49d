"""
Domain layer for gitlogjson.

Contains pure domain objects with no I/O or side effects:
- Tag / TagCatalog: Validated, precedence-ordered release tags
- Window: The commit range between two consecutive tags
- CommitRecord / RecordParser: Structured commits from `git log` lines
- Changelog / ChangelogBuilder: The ordered tag -> commits document

These objects are immutable where possible and provide
serialization methods for JSON output.
"""

from .diagnostic import Diagnostic, InvalidTagSyntax, MalformedRecord
from .tag import Tag, TagCatalog
from .window import Window, build_windows
from .record import CommitRecord, RecordParser, DEFAULT_DELIMITER, check_delimiter, format_record_line
from .changelog import (
    Changelog,
    ChangelogBuilder,
    DuplicateWindowError,
    NEWEST_FIRST,
    OLDEST_FIRST,
    ORDERS,
)

__all__ = [
    'Diagnostic',
    'InvalidTagSyntax',
    'MalformedRecord',
    'Tag',
    'TagCatalog',
    'Window',
    'build_windows',
    'CommitRecord',
    'RecordParser',
    'DEFAULT_DELIMITER',
    'check_delimiter',
    'format_record_line',
    'Changelog',
    'ChangelogBuilder',
    'DuplicateWindowError',
    'NEWEST_FIRST',
    'OLDEST_FIRST',
    'ORDERS',
]
