"""Diff Processor - Turn parsed hunks into LLM-friendly context."""

from dataclasses import dataclass, field
from enum import IntEnum
import re

from smart_commits.git.hunk import DiffHunk
from smart_commits.git.patch import to_full_diff


class Priority(IntEnum):
    """File priority for inclusion in LLM context."""
    SOURCE = 1
    TEST = 2
    CONFIG = 3
    DOCS = 4
    NOISE = 99


PRIORITY_LABELS = {
    Priority.SOURCE: "Source",
    Priority.TEST: "Tests",
    Priority.CONFIG: "Config",
    Priority.DOCS: "Docs",
}


@dataclass
class ProcessedDiff:
    """LLM-ready representation of a set of hunks."""
    summary: str
    detailed_diff: str
    total_files: int = 0
    included_files: int = 0
    filtered_files: int = 0
    truncated: bool = False
    new_files: list[str] = field(default_factory=list)
    file_details: list[tuple[str, int, int]] = field(default_factory=list)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (~4 chars per token)."""
        return (len(self.summary) + len(self.detailed_diff)) // 4


@dataclass
class ProcessorConfig:
    """Tunable settings for diff processing."""
    max_tokens: int = 3000
    max_lines_per_file: int = 200


class DiffProcessor:
    """Orders, filters and trims hunks into prompt context."""

    NOISE_PATTERNS: list[str] = [
        r'package-lock\.json$', r'yarn\.lock$', r'pnpm-lock\.yaml$',
        r'poetry\.lock$', r'Cargo\.lock$', r'Gemfile\.lock$', r'composer\.lock$',
        r'\.min\.js$', r'\.min\.css$', r'\.map$', r'\.pyc$', r'__pycache__',
        r'\.class$', r'dist/', r'build/', r'\.egg-info/',
        r'\.idea/', r'\.vscode/', r'\.DS_Store$',
        r'node_modules/', r'vendor/', r'venv/', r'\.venv/',
    ]

    TEST_PATTERNS: list[str] = [
        r'test[s]?/', r'spec[s]?/', r'__tests__/',
        r'\.test\.', r'\.spec\.', r'_test\.', r'_spec\.',
        r'Test\.java$', r'Tests\.java$', r'(^|/)test_[^/]+\.py$',
    ]

    CONFIG_PATTERNS: list[str] = [
        r'\.json$', r'\.ya?ml$', r'\.toml$', r'\.ini$', r'\.env',
        r'\.config\.', r'config/', r'settings/',
        r'Makefile$', r'Dockerfile$', r'docker-compose',
    ]

    DOCS_PATTERNS: list[str] = [
        r'\.md$', r'\.rst$', r'\.txt$', r'docs/',
        r'README', r'CHANGELOG', r'LICENSE',
    ]

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._noise_re = [re.compile(p, re.IGNORECASE) for p in self.NOISE_PATTERNS]
        self._test_re = [re.compile(p, re.IGNORECASE) for p in self.TEST_PATTERNS]
        self._config_re = [re.compile(p, re.IGNORECASE) for p in self.CONFIG_PATTERNS]
        self._docs_re = [re.compile(p, re.IGNORECASE) for p in self.DOCS_PATTERNS]

    def process(self, hunks: list[DiffHunk], new_files: list[str] | None = None) -> ProcessedDiff:
        """Main entry point: hunks (+ untracked paths) -> LLM-ready context."""
        new_files = list(new_files or [])
        classified = [(h, self.get_priority(h.file_path)) for h in hunks]
        filtered = [(h, p) for h, p in classified if p != Priority.NOISE]
        noise_paths = {h.file_path for h, p in classified if p == Priority.NOISE}

        filtered.sort(key=lambda x: (x[1], -(x[0].additions + x[0].deletions)))

        summary = self._build_summary(filtered, new_files, len(noise_paths))
        detailed_diff, included_count, truncated = self._build_detailed_diff(filtered)

        file_details = [(h.file_path, h.additions, h.deletions) for h, _ in filtered]

        all_paths = {h.file_path for h in hunks} | set(new_files)
        return ProcessedDiff(
            summary=summary,
            detailed_diff=detailed_diff,
            total_files=len(all_paths),
            included_files=included_count,
            filtered_files=len(noise_paths),
            truncated=truncated,
            new_files=new_files,
            file_details=file_details,
        )

    def get_priority(self, path: str) -> Priority:
        if any(p.search(path) for p in self._noise_re):
            return Priority.NOISE
        if any(p.search(path) for p in self._test_re):
            return Priority.TEST
        if any(p.search(path) for p in self._docs_re):
            return Priority.DOCS
        if any(p.search(path) for p in self._config_re):
            return Priority.CONFIG
        return Priority.SOURCE

    def _build_summary(self, hunks: list[tuple[DiffHunk, Priority]], new_files: list[str], noise_count: int) -> str:
        lines = ["FILES CHANGED:"]
        current_priority = None

        for hunk, priority in hunks:
            if priority != current_priority:
                current_priority = priority
                lines.append(f"\n[{PRIORITY_LABELS.get(priority, 'Other')}]")
            tags = f"{hunk.language}, complexity {hunk.complexity:.2f}"
            if hunk.is_rename():
                tags += f", renamed from {hunk.old_path}"
            lines.append(f"  {hunk.file_path} (+{hunk.additions} -{hunk.deletions}) [{tags}]")

        if new_files:
            lines.append("\n[New files]")
            lines.extend(f"  {path}" for path in new_files)

        if noise_count > 0:
            lines.append(f"\n[Filtered: {noise_count} files (lock files, generated code)]")

        return "\n".join(lines)

    def _build_detailed_diff(self, hunks: list[tuple[DiffHunk, Priority]]) -> tuple[str, int, bool]:
        result_parts = []
        tokens_used = 0
        files_included = 0
        truncated = False

        for hunk, _ in hunks:
            file_diff = self._truncate_file_diff(to_full_diff(hunk), hunk.file_path)
            diff_tokens = len(file_diff) // 4

            if tokens_used + diff_tokens > self.config.max_tokens:
                truncated = True
                break

            result_parts.append(file_diff)
            tokens_used += diff_tokens
            files_included += 1

        return "\n".join(result_parts), files_included, truncated

    def _truncate_file_diff(self, diff: str, path: str) -> str:
        lines = diff.split('\n')
        if len(lines) <= self.config.max_lines_per_file:
            return diff

        truncated_lines = lines[:self.config.max_lines_per_file]
        truncated_lines.append(f"\n... [{len(lines) - self.config.max_lines_per_file} more lines truncated from {path}]")
        return '\n'.join(truncated_lines)
