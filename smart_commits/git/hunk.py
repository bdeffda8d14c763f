"""DiffHunk - one parsed hunk plus the metadata derived from it."""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from smart_commits.git.errors import EmptyContentError, EmptyFilePathError, InvalidComplexityError, NegativeLineNumberError

LANGUAGES: dict[str, str] = {
    'php': 'php',
    'js': 'javascript',
    'ts': 'javascript',
    'py': 'python',
    'java': 'java',
    'go': 'go',
    'rb': 'ruby',
    'rs': 'rust',
    'cpp': 'c++',
    'c': 'c++',
    'h': 'c++',
    'swift': 'swift',
    'kt': 'kotlin',
    'kts': 'kotlin',
}

COMPLEX_KEYWORDS = ('if', 'for', 'while', '=>', 'return')
COMPLEX_CHARS = re.compile(r'[{}();]')


def detect_language(file_path: str) -> str:
    """Map a file extension to a language tag. Case-sensitive, no sniffing."""
    suffix = PurePosixPath(file_path).suffix
    return LANGUAGES.get(suffix[1:], 'text') if suffix else 'text'


def calculate_complexity(lines: list[str]) -> float:
    """Share of added lines that look like control flow or structure (0-1)."""
    added = 0
    complex_lines = 0

    for line in lines:
        if not line.startswith('+'):
            continue

        added += 1
        clean = line[1:].strip()
        if any(k in clean for k in COMPLEX_KEYWORDS) or COMPLEX_CHARS.search(clean):
            complex_lines += 1

    if added == 0:
        return 0.0
    return min(1.0, complex_lines / added)


@dataclass(frozen=True)
class DiffHunk:
    """A single hunk of a unified diff.

    Built by the parser (or directly in tests) and never mutated. ``language``
    and ``complexity`` are derived from ``file_path`` and ``content`` when not
    given explicitly.
    """
    file_path: str
    old_path: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str
    content: str
    language: str = field(default='')
    complexity: float = field(default=-1.0)

    def __post_init__(self):
        if not self.file_path:
            raise EmptyFilePathError("File path cannot be empty")
        if self.old_start < 0 or self.new_start < 0:
            raise NegativeLineNumberError("Line numbers cannot be negative")
        if not self.content:
            raise EmptyContentError("Diff content cannot be empty")
        if self.complexity > 1.0:
            raise InvalidComplexityError(f"Complexity must be between 0 and 1, got {self.complexity}")

        if not self.language:
            object.__setattr__(self, 'language', detect_language(self.file_path))
        if self.complexity < 0:
            object.__setattr__(self, 'complexity', calculate_complexity(self.content.split('\n')))

    @property
    def lines(self) -> list[str]:
        return self.content.split('\n')

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.startswith('+'))

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.startswith('-'))

    @property
    def paths(self) -> list[str]:
        """Every path the hunk touches: old and new for a rename, else just the one."""
        return [self.old_path, self.file_path] if self.is_rename() else [self.file_path]

    def is_rename(self) -> bool:
        return self.old_path != self.file_path

    def is_new_file(self) -> bool:
        return self.old_start == 0 and self.old_lines == 0

    def is_deleted_file(self) -> bool:
        return self.new_start == 0 and self.new_lines == 0
