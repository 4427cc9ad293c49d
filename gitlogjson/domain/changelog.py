"""
The changelog document: an ordered mapping from tag label to its commits.

The document is built in memory and serialized once with `json.dumps`, which
escapes quotes, backslashes, control characters and non-ASCII text
consistently.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple

from .record import CommitRecord
from ..exit_codes import SerializationFailure

NEWEST_FIRST = "newest-first"
OLDEST_FIRST = "oldest-first"
ORDERS = (NEWEST_FIRST, OLDEST_FIRST)


class DuplicateWindowError(RuntimeError):
    """A tag was added to the changelog twice (windows are built unique)."""


@dataclass(frozen=True)
class Changelog:
    """Finished changelog entries, in presentation order."""
    entries: Tuple[Tuple[str, Tuple[CommitRecord, ...]], ...] = ()

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.entries]

    def commits(self, label: str) -> Tuple[CommitRecord, ...]:
        for entry_label, records in self.entries:
            if entry_label == label:
                return records
        raise KeyError(label)

    def to_dict(self) -> Dict[str, List[dict]]:
        """The JSON document tree; dicts keep insertion order."""
        return {
            label: [record.to_dict() for record in records]
            for label, records in self.entries
        }

    def serialize(self, pretty: bool = False) -> str:
        """
        Render the changelog as a JSON document.

        Raises:
            SerializationFailure: if the document cannot be encoded
        """
        try:
            return json.dumps(
                self.to_dict(),
                indent=2 if pretty else None,
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as e:
            raise SerializationFailure(str(e)) from e

    def __iter__(self) -> Iterator[Tuple[str, Tuple[CommitRecord, ...]]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class ChangelogBuilder:
    """
    Accumulates one entry per tag, in the order the windows are processed.

    Example:
        builder = ChangelogBuilder()
        builder.add("v1.0.0", records_v1)
        builder.add("v1.1.0", records_v11)
        changelog = builder.finalize(newest_first=True)
        changelog.labels  # ['v1.1.0', 'v1.0.0']
    """
    _entries: Dict[str, Tuple[CommitRecord, ...]] = field(default_factory=dict)
    _finalized: bool = False

    def add(self, tag_label: str, records: Iterable[CommitRecord]) -> None:
        if self._finalized:
            raise RuntimeError("Changelog already finalized")
        if tag_label in self._entries:
            raise DuplicateWindowError(f"Tag {tag_label!r} added twice")
        self._entries[tag_label] = tuple(records)

    def finalize(self, newest_first: bool = False) -> Changelog:
        """
        Freeze the accumulated entries.

        Args:
            newest_first: Reverse insertion order (latest tag first)
        """
        self._finalized = True
        entries = list(self._entries.items())
        if newest_first:
            entries.reverse()
        return Changelog(entries=tuple(entries))

    def __len__(self) -> int:
        return len(self._entries)
