"""Git Operations Package"""

from smart_commits.git.errors import (
    GitError,
    GitOperation,
    InvalidDiffError,
    MalformedDiffHeaderError,
    MissingHunkHeaderError,
    EmptyContentError,
    EmptyFilePathError,
    NegativeLineNumberError,
    InvalidComplexityError,
    NoActualChangesError,
)
from smart_commits.git.hunk import DiffHunk, detect_language, calculate_complexity
from smart_commits.git.parser import parse_hunk, parse_all_hunks, unquote_path
from smart_commits.git.patch import to_applicable_patch, to_full_diff, extract_added_lines
from smart_commits.git.repository import GitRepository, CommitInfo
from smart_commits.git.diff_processor import DiffProcessor, ProcessedDiff, ProcessorConfig, Priority

__all__ = [
    "GitError",
    "GitOperation",
    "InvalidDiffError",
    "MalformedDiffHeaderError",
    "MissingHunkHeaderError",
    "EmptyContentError",
    "EmptyFilePathError",
    "NegativeLineNumberError",
    "InvalidComplexityError",
    "NoActualChangesError",
    "DiffHunk",
    "detect_language",
    "calculate_complexity",
    "parse_hunk",
    "parse_all_hunks",
    "unquote_path",
    "to_applicable_patch",
    "to_full_diff",
    "extract_added_lines",
    "GitRepository",
    "CommitInfo",
    "DiffProcessor",
    "ProcessedDiff",
    "ProcessorConfig",
    "Priority",
]
