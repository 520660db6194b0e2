"""Git Operations Package"""

from acommit.git.inspector import (
    GitInspector, GitError, NotAGitRepository, GitCommandError, RepoStatus, DiffPayload,
)
from acommit.git.diff_processor import DiffProcessor, ProcessedDiff, ProcessorConfig

__all__ = [
    "GitInspector",
    "GitError",
    "NotAGitRepository",
    "GitCommandError",
    "RepoStatus",
    "DiffPayload",
    "DiffProcessor",
    "ProcessedDiff",
    "ProcessorConfig",
]
