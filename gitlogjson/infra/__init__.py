"""
Infrastructure layer for gitlogjson.

Contains abstractions for external systems:
- GitClient: Git command execution
- JsonFileWriter: Atomic changelog file output

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitResult, log_format
from .file_store import JsonFileWriter, STDOUT

__all__ = [
    'GitClient',
    'GitResult',
    'log_format',
    'JsonFileWriter',
    'STDOUT',
]
