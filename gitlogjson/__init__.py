"""
gitlogjson - A JSON changelog of the commits in each release tag.

gitlogjson reads a repository's semantic-version tags, orders them by
version precedence, and lists for every tag the commits it introduced
since the previous tag.

Quick Start:
    from gitlogjson import ChangelogService, load_config

    config = load_config(repo="~/projects/myapp", overrides={"pretty": True})
    result = ChangelogService(config).generate()
    print(result.changelog.labels)   # ['v2.0.0', 'v1.1.0', 'v1.0.0']

    # Build without writing
    changelog = ChangelogService(config).run()
    for tag, commits in changelog:
        print(tag, len(commits))

Domain Objects:
    Tag, TagCatalog - Validated, precedence-ordered release tags
    Window - Commit range between two consecutive tags
    CommitRecord, RecordParser - Structured commits from git log lines
    Changelog, ChangelogBuilder - The ordered tag -> commits document
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    Tag,
    TagCatalog,
    Window,
    build_windows,
    CommitRecord,
    RecordParser,
    Changelog,
    ChangelogBuilder,
    Diagnostic,
)

# Services
from .services import ChangelogService, GenerateResult

# Configuration
from .config import ChangelogConfig, load_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Tag",
    "TagCatalog",
    "Window",
    "build_windows",
    "CommitRecord",
    "RecordParser",
    "Changelog",
    "ChangelogBuilder",
    "Diagnostic",
    # Services
    "ChangelogService",
    "GenerateResult",
    # Configuration
    "ChangelogConfig",
    "load_config",
]
