"""
Git client infrastructure for gitlogjson.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Bounded by a timeout, so an unresponsive git never stalls a run
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List

from ..domain.record import DEFAULT_DELIMITER, check_delimiter
from ..domain.window import Window

logger = logging.getLogger(__name__)


@dataclass
class GitResult:
    """Captured output of one git invocation."""
    stdout: str = ""
    returncode: int = 0
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def detail(self) -> str:
        """Best available description of a failure."""
        return (self.stderr or self.stdout).strip() or "no output"


def log_format(short_hash: bool = False, delimiter: str = DEFAULT_DELIMITER) -> str:
    """
    Build the `git log --format` string for one commit per line.

    Fields: commit id, "author <email>", author date, subject.
    """
    sep = f"%x{ord(check_delimiter(delimiter)):02x}"
    commit_hash = '%h' if short_hash else '%H'
    return sep.join([commit_hash, '%an <%ae>', '%ad', '%s'])


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient(timeout=10)
        client.ensure_available()
        result = client.list_tags("/path/to/repo")
        if result.ok:
            print(result.stdout)
    """

    def __init__(self, git: str = "git", timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            git: git executable name or path
            timeout: Per-command timeout in seconds (default: 30)
        """
        self.git = git
        self.timeout = timeout

    def _run(self, args: List[str], cwd: str) -> GitResult:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory

        Returns:
            GitResult; spawn failures and timeouts report returncode -1
        """
        argv = [self.git] + args
        logger.debug(f"Running {argv} in {cwd}")
        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out after {self.timeout}s: {argv}")
            return GitResult(returncode=-1, stderr=f"timed out after {self.timeout}s")
        except OSError as e:
            logger.error(f"Git command failed to start: {argv} - {e}")
            return GitResult(returncode=-1, stderr=str(e))

        # stdout is not stripped: whitespace at the end of a subject is content
        return GitResult(
            stdout=result.stdout or "",
            returncode=result.returncode,
            stderr=result.stderr or ""
        )

    def is_available(self) -> bool:
        """Check that the git executable can be found."""
        return shutil.which(self.git) is not None

    def is_work_tree(self, path: str) -> bool:
        """Check if path is inside a git work tree."""
        result = self._run(["rev-parse", "--is-inside-work-tree"], cwd=path)
        return result.ok and result.stdout.strip() == "true"

    def list_tags(self, path: str) -> GitResult:
        """
        List tag names, one per line.

        Args:
            path: Path to git repository
        """
        return self._run(["tag", "--list"], cwd=path)

    def fetch_log(self, path: str, window: Window, format_spec: str) -> GitResult:
        """
        Get one line per commit in a window, newest commit first.

        Args:
            path: Path to git repository
            window: Tag range to list
            format_spec: Value for `git log --format`
        """
        return self._run(
            ["log", f"--format={format_spec}", window.revision_range, "--"],
            cwd=path
        )
