"""
History windows between consecutive release tags.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .tag import Tag


@dataclass(frozen=True)
class Window:
    """
    Commits reachable from `to_tag` but not from `from_tag`.

    The first window of a history has no `from_tag` and covers everything
    reachable from its tag.
    """
    to_tag: Tag
    from_tag: Optional[Tag] = None

    @property
    def revision_range(self) -> str:
        """The git revision range selecting this window's commits."""
        if self.from_tag is None:
            return self.to_tag.label
        return f"{self.from_tag.label}..{self.to_tag.label}"

    def __str__(self) -> str:
        return self.revision_range


def build_windows(ordered_tags: Iterable[Tag]) -> List[Window]:
    """
    Pair each tag with its predecessor.

    [t0, t1, ..., tn] -> [(None, t0), (t0, t1), ..., (t(n-1), tn)]

    Commits after the newest tag belong to no window.
    """
    windows = []
    previous: Optional[Tag] = None
    for tag in ordered_tags:
        windows.append(Window(to_tag=tag, from_tag=previous))
        previous = tag
    return windows
