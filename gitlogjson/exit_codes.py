"""
Standard exit codes for gitlogjson.

Following Unix/POSIX conventions for command-line tools.
"""
import sys
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
GIT_ERROR = 65           # A git invocation failed or timed out
CONFIG_ERROR = 66        # Configuration file error
DATA_ERROR = 70          # Changelog could not be serialized
TOOL_MISSING = 72        # git executable not found
NOT_A_REPOSITORY = 73    # Working directory is not a git work tree
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


def exit_with_code(code: int, message: Optional[str] = None):
    """
    Exit with a specific code and optional message.

    Args:
        code: Exit code
        message: Optional message to print to stderr
    """
    if message:
        print(message, file=sys.stderr)
    sys.exit(code)


class CommandError(Exception):
    """
    Exception that carries the exit code the command should terminate with.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ExternalToolMissing(CommandError):
    """Raised when the git executable cannot be found."""
    def __init__(self, tool: str = "git"):
        super().__init__(f"Required tool not found on PATH: {tool}", TOOL_MISSING)
        self.tool = tool


class NotARepository(CommandError):
    """Raised when the target directory is not inside a git work tree."""
    def __init__(self, path: str):
        super().__init__(f"Not a git repository: {path}", NOT_A_REPOSITORY)
        self.path = path


class TagListUnavailable(CommandError):
    """Raised when the tag list could not be read at all."""
    def __init__(self, detail: str, returncode: int = -1):
        super().__init__(f"Could not list tags (exit {returncode}): {detail}", GIT_ERROR)
        self.returncode = returncode


class LogFetchFailed(CommandError):
    """Raised when git log fails for one window; aborts the whole run."""
    def __init__(self, revision_range: str, detail: str, returncode: int = -1):
        super().__init__(
            f"git log {revision_range} failed (exit {returncode}): {detail}",
            GIT_ERROR
        )
        self.revision_range = revision_range
        self.returncode = returncode


class SerializationFailure(CommandError):
    """Raised when the changelog cannot be rendered as JSON."""
    def __init__(self, message: str):
        super().__init__(f"Could not serialize changelog: {message}", DATA_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class PersistError(CommandError):
    """Raised when the output document cannot be written."""
    def __init__(self, dest: str, detail: str):
        super().__init__(f"Could not write {dest}: {detail}", GENERAL_ERROR)
        self.dest = dest
