"""
Tag domain object for gitlogjson.

Release tags are expected to carry a semantic version, optionally prefixed
with "v":
- "v1.2.3", "1.2.3"
- "v2.0.0-rc.1" (prerelease)
- "v1.0.0+build.5" (build metadata, ignored for ordering)

Tags order by semantic-version precedence, so "v1.9.0" sorts before
"v1.10.0". The TagCatalog turns raw `git tag` output into the validated,
ordered and de-duplicated sequence the rest of the run works from.
"""

import fnmatch
import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .diagnostic import Diagnostic, InvalidTagSyntax

logger = logging.getLogger(__name__)

_IDENT = r'(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)'

SEMVER_TAG_RE = re.compile(
    r'^[vV]?'
    r'(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)'
    r'(?:-(' + _IDENT + r'(?:\.' + _IDENT + r')*))?'
    r'(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$'
)


def _prerelease_key(prerelease: Tuple[str, ...]) -> tuple:
    # A release sorts after every prerelease of the same version.
    if not prerelease:
        return (1,)
    idents = []
    for ident in prerelease:
        if ident.isdigit():
            idents.append((0, int(ident), ''))
        else:
            idents.append((1, 0, ident))
    return (0, tuple(idents))


@dataclass(frozen=True)
class Tag:
    """
    A release tag whose label parses as a semantic version.

    Examples:
        Tag.parse("v1.2.3")        -> Tag(label="v1.2.3", major=1, minor=2, patch=3)
        Tag.parse("2.0.0-rc.1")    -> Tag(..., prerelease=("rc", "1"))
        Tag.parse("not-a-tag")     -> raises InvalidTagSyntax

    Attributes:
        label: The tag exactly as git reports it
        major, minor, patch: Numeric version core
        prerelease: Dot-separated prerelease identifiers
        build: Dot-separated build metadata identifiers
    """

    label: str
    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()
    build: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, label: str) -> 'Tag':
        """
        Parse a tag label.

        Raises:
            InvalidTagSyntax: if the label is not a semantic version
        """
        match = SEMVER_TAG_RE.match(label)
        if not match:
            raise InvalidTagSyntax(label)

        major, minor, patch, prerelease, build = match.groups()
        return cls(
            label=label,
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            prerelease=tuple(prerelease.split('.')) if prerelease else (),
            build=tuple(build.split('.')) if build else (),
        )

    @property
    def precedence(self) -> tuple:
        """Sort key implementing semantic-version precedence."""
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    @property
    def version(self) -> str:
        """The version without the "v" prefix or build metadata."""
        core = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            core += '-' + '.'.join(self.prerelease)
        return core

    def matches(self, pattern: str) -> bool:
        """Check the label against a shell-style glob, as `git tag -l` does."""
        return fnmatch.fnmatchcase(self.label, pattern)

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"Tag({self.label!r})"


@dataclass(frozen=True)
class TagCatalog:
    """
    Validated release tags in ascending semantic-version order.

    Example:
        catalog = TagCatalog.load("v1.10.0\\nv1.9.0\\nnightly\\n")
        catalog.labels       # ['v1.9.0', 'v1.10.0']
        catalog.diagnostics  # [Diagnostic(kind='InvalidTagSyntax', ...)]
    """

    tags: Tuple[Tag, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = field(default=(), compare=False)

    @classmethod
    def load(cls, raw_text: str, filter_pattern: Optional[str] = None) -> 'TagCatalog':
        """
        Build a catalog from `git tag --list` output.

        Args:
            raw_text: One tag label per line
            filter_pattern: Optional glob; only matching tags are kept

        Returns:
            TagCatalog sorted by precedence; invalid labels are reported in
            `diagnostics` and left out.
        """
        diagnostics: List[Diagnostic] = []
        tags: List[Tag] = []

        for line in raw_text.split('\n'):
            label = line.strip()
            if not label:
                continue
            try:
                tag = Tag.parse(label)
            except InvalidTagSyntax as e:
                logger.warning(f"Skipping tag: {e}")
                diagnostics.append(Diagnostic.from_error(e))
                continue

            if filter_pattern and not tag.matches(filter_pattern):
                logger.debug(f"Tag {label} does not match filter {filter_pattern!r}")
                continue
            tags.append(tag)

        # Stable sort, so the first of several equal-precedence labels wins
        tags.sort(key=lambda t: t.precedence)

        unique: List[Tag] = []
        for tag in tags:
            if unique and unique[-1].precedence == tag.precedence:
                message = (
                    f"Tag {tag.label!r} has the same version as "
                    f"{unique[-1].label!r}; skipping it"
                )
                logger.warning(message)
                diagnostics.append(
                    Diagnostic(kind="DuplicateVersion", subject=tag.label, message=message)
                )
                continue
            unique.append(tag)

        return cls(tags=tuple(unique), diagnostics=tuple(diagnostics))

    @property
    def labels(self) -> List[str]:
        return [tag.label for tag in self.tags]

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)
