"""Conventional Commits message model and LLM response cleanup."""

import re
from dataclasses import dataclass, replace
from enum import Enum

from smart_commits import COMMIT_TYPES, COMMIT_TYPE_NAMES

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

SUBJECT_RE = re.compile(r'^(?P<type>\w+)(?:\((?P<scope>[^)]+)\))?(?P<breaking>!)?:\s(?P<description>.+)$')
SCOPE_RE = re.compile(r'^[a-z0-9-]+$')
TRAILER_RE = re.compile(r'^(BREAKING CHANGE|BREAKING-CHANGE|[A-Za-z][A-Za-z-]*)(: | #)\S.*$')
JUNK_RE = re.compile(r'^(diff --git |@@\s|[+-]{3}\s[ab]/|index [0-9a-f]|```)')


class InvalidCommitMessageError(ValueError):
    """Raised when text is not a valid Conventional Commits message."""
    pass


class CommitType(str, Enum):
    FEAT = 'feat'
    FIX = 'fix'
    DOCS = 'docs'
    STYLE = 'style'
    REFACTOR = 'refactor'
    TEST = 'test'
    CHORE = 'chore'
    PERF = 'perf'
    BUILD = 'build'
    CI = 'ci'
    REVERT = 'revert'

    @property
    def description(self) -> str:
        return COMMIT_TYPES[self.value]

    @property
    def is_significant(self) -> bool:
        """Whether this type belongs in release notes."""
        return self in (CommitType.FEAT, CommitType.FIX, CommitType.PERF, CommitType.REVERT)

    @classmethod
    def from_string(cls, value: str | None) -> 'CommitType':
        """Lenient lookup; unknown or missing types become chore."""
        try:
            return cls((value or '').lower())
        except ValueError:
            return cls.CHORE


@dataclass(frozen=True)
class CommitMessage:
    """type(scope)!: description, with optional body and footer."""
    type: CommitType
    description: str
    scope: str | None = None
    breaking: bool = False
    body: str | None = None
    footer: str | None = None

    def __post_init__(self):
        if not self.description or not self.description.strip():
            raise InvalidCommitMessageError("Commit description cannot be empty")
        if self.scope and not SCOPE_RE.match(self.scope):
            raise InvalidCommitMessageError("Scope can only contain lowercase letters, numbers and hyphens")

    @classmethod
    def from_string(cls, message: str) -> 'CommitMessage':
        """Parse a full commit message (subject, then optional paragraphs)."""
        text = message.strip().replace('\r\n', '\n')
        subject, _, rest = text.partition('\n')

        match = SUBJECT_RE.match(subject.strip())
        if not match:
            raise InvalidCommitMessageError(f"Invalid commit message format: {subject[:50]}")

        paragraphs = [p.strip() for p in re.split(r'\n\s*\n', rest.strip()) if p.strip()]
        footer = None
        if paragraphs and all(TRAILER_RE.match(line) for line in paragraphs[-1].split('\n')):
            footer = paragraphs.pop()

        breaking = bool(match.group('breaking')) or bool(footer and 'BREAKING' in footer)

        return cls(
            type=CommitType.from_string(match.group('type')),
            description=match.group('description').strip(),
            scope=match.group('scope'),
            breaking=breaking,
            body='\n\n'.join(paragraphs) or None,
            footer=footer,
        )

    @property
    def subject(self) -> str:
        scope = f"({self.scope})" if self.scope else ''
        bang = '!' if self.breaking else ''
        return f"{self.type.value}{scope}{bang}: {self.description}"

    def __str__(self) -> str:
        parts = [self.subject]
        if self.body:
            parts.append(self.body)
        if self.footer:
            parts.append(self.footer)
        return '\n\n'.join(parts)

    def with_description(self, description: str) -> 'CommitMessage':
        return replace(self, description=description)

    def with_breaking_change(self, breaking: bool = True) -> 'CommitMessage':
        return replace(self, breaking=breaking)


def is_valid_commit_message(message: str) -> bool:
    try:
        CommitMessage.from_string(message)
        return True
    except InvalidCommitMessageError:
        return False


def clean_commit_message(text: str) -> str:
    """Clean up LLM response to extract just the commit message."""
    lines = text.strip().split('\n')
    start_idx = 0
    for i, line in enumerate(lines):
        if re.match(rf'^[`\s]*({TYPES_PATTERN})[\(!:]', line):
            start_idx = i
            break

    # Cut off diff output, code blocks, etc. that follow the message
    end_idx = len(lines)
    for i in range(start_idx + 1, len(lines)):
        if JUNK_RE.match(lines[i]):
            end_idx = i
            break

    cleaned = '\n'.join(lines[start_idx:end_idx]).rstrip()
    lines = cleaned.split('\n')
    if lines:
        lines[0] = lines[0].strip('`').strip()

    return '\n'.join(lines)
