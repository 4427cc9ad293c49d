"""
Changelog service for gitlogjson.

Runs the whole transform for one repository:

    INIT -> LISTING_TAGS -> (per window: FETCHING -> PARSING -> AGGREGATING) -> DONE

Any fatal error moves the run to FAILED and stops it. Windows are processed
one at a time, oldest first, and nothing is written unless every window
succeeded.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..config import ChangelogConfig
from ..domain import (
    Changelog,
    ChangelogBuilder,
    Diagnostic,
    RecordParser,
    TagCatalog,
    Window,
    build_windows,
)
from ..exit_codes import (
    ExternalToolMissing,
    LogFetchFailed,
    NotARepository,
    TagListUnavailable,
)
from ..infra import GitClient, JsonFileWriter, log_format

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Where a run currently is."""
    INIT = "init"
    LISTING_TAGS = "listing_tags"
    FETCHING = "fetching"
    PARSING = "parsing"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GenerateResult:
    """Result of a completed generate() call."""
    changelog: Changelog
    dest: str
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def commit_count(self) -> int:
        return sum(len(records) for _, records in self.changelog)


class ChangelogService:
    """
    Builds a changelog from a repository's tags and commit log.

    Example:
        config = load_config(repo="/path/to/repo")
        service = ChangelogService(config)
        result = service.generate()
        print(f"Wrote {len(result.changelog)} tags to {result.dest}")
    """

    def __init__(
        self,
        config: Optional[ChangelogConfig] = None,
        git_client: Optional[GitClient] = None,
        writer: Optional[JsonFileWriter] = None,
    ):
        """
        Initialize ChangelogService.

        Args:
            config: Run options (defaults if None)
            git_client: Git access (built from config if None)
            writer: Output writer (atomic file writer if None)
        """
        self.config = config or ChangelogConfig()
        self.git = git_client or GitClient(git=self.config.git, timeout=self.config.timeout)
        self.writer = writer or JsonFileWriter()
        self.state = RunState.INIT
        self.diagnostics: List[Diagnostic] = []

    def _enter(self, state: RunState, detail: str = "") -> None:
        logger.debug(f"{self.state.value} -> {state.value} {detail}".rstrip())
        self.state = state

    def check_prerequisites(self) -> None:
        """
        Raises:
            ExternalToolMissing: git is not installed
            NotARepository: the configured repo is not a work tree
        """
        if not self.git.is_available():
            raise ExternalToolMissing(self.git.git)
        if not self.git.is_work_tree(self.config.repo):
            raise NotARepository(self.config.repo)

    def load_tags(self) -> TagCatalog:
        """
        Read and validate the repository's tags.

        Raises:
            TagListUnavailable: git could not list the tags
        """
        result = self.git.list_tags(self.config.repo)
        if not result.ok:
            raise TagListUnavailable(result.detail, result.returncode)

        catalog = TagCatalog.load(result.stdout, self.config.filter)
        self.diagnostics.extend(catalog.diagnostics)
        logger.debug(f"{len(catalog)} release tags: {catalog.labels}")
        return catalog

    def _process_window(self, window: Window, format_spec: str, builder: ChangelogBuilder) -> None:
        self._enter(RunState.FETCHING, str(window))
        result = self.git.fetch_log(self.config.repo, window, format_spec)
        if not result.ok:
            raise LogFetchFailed(window.revision_range, result.detail, result.returncode)

        self._enter(RunState.PARSING, str(window))
        parser = RecordParser(delimiter=self.config.delimiter)
        records = parser.parse(result.stdout)
        self.diagnostics.extend(parser.diagnostics)
        if parser.diagnostics:
            logger.debug(f"Raw log for {window}:\n{result.stdout}")

        self._enter(RunState.AGGREGATING, str(window))
        builder.add(window.to_tag.label, records)
        logger.debug(f"{window.to_tag.label}: {len(records)} commits")

    def run(self) -> Changelog:
        """
        Build the changelog without writing it.

        Returns:
            The complete Changelog

        Raises:
            CommandError: on any fatal error; no partial changelog is returned
        """
        self.state = RunState.INIT
        self.diagnostics = []
        try:
            self.check_prerequisites()

            self._enter(RunState.LISTING_TAGS)
            catalog = self.load_tags()
            windows = build_windows(catalog)

            format_spec = log_format(self.config.short_hash, self.config.delimiter)
            builder = ChangelogBuilder()
            for window in windows:
                self._process_window(window, format_spec, builder)

            changelog = builder.finalize(newest_first=self.config.newest_first)
        except Exception:
            self._enter(RunState.FAILED)
            raise

        self._enter(RunState.DONE)
        return changelog

    def generate(self) -> GenerateResult:
        """
        Build, serialize and write the changelog.

        The document is fully serialized before the destination is touched,
        so a failure at any stage leaves an existing file unchanged.
        """
        changelog = self.run()
        try:
            document = changelog.serialize(pretty=self.config.pretty)
            self.writer.write(document, self.config.dest)
        except Exception:
            self._enter(RunState.FAILED)
            raise

        return GenerateResult(
            changelog=changelog,
            dest=self.config.dest,
            diagnostics=list(self.diagnostics),
        )
