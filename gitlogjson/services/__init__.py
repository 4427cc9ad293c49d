"""
Service layer for gitlogjson.

Services sit between the CLI and the domain/infrastructure layers and
own the sequencing of a run.
"""

from .changelog_service import ChangelogService, GenerateResult, RunState

__all__ = [
    'ChangelogService',
    'GenerateResult',
    'RunState',
]
