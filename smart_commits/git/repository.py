"""Git Repository - Run git for diffs, staging, commits and pushes."""

import logging
import os
import re
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from smart_commits.git.errors import GitError, GitOperation, InvalidDiffError
from smart_commits.git.hunk import DiffHunk
from smart_commits.git.parser import parse_all_hunks
from smart_commits.git.patch import to_applicable_patch

logger = logging.getLogger(__name__)

REMOTE_LINE_RE = re.compile(r'^(\S+)\s+(.*?)\s+\((fetch|push)\)$')
LOG_FORMAT = '%H%x1f%an%x1f%ae%x1f%ad%x1f%s'
# Raw UTF-8 paths instead of C-quoted ones in diff and ls-files output
GIT_CONFIG = ('-c', 'core.quotePath=false')


@dataclass
class CommitInfo:
    """One entry of `git log`."""
    hash: str
    author_name: str
    author_email: str
    date: str
    subject: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class GitRepository:
    """Thin wrapper over the git CLI for one working directory."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else Path.cwd()
        self._verify_git_available()

    def _run_git(self, operation: GitOperation, *args: str) -> str:
        """Run a git command and return stdout."""
        command = ['git', *GIT_CONFIG, operation.value, *args]
        try:
            result = subprocess.run(
                command,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError.command_failed(operation, command, e.returncode, e.stderr or '')
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            subprocess.run(['git', '--version'], capture_output=True, check=True)
        except (subprocess.CalledProcessError, FileNotFoundError, OSError):
            raise GitError("Git is not installed or not in PATH")

    def is_repository(self) -> bool:
        try:
            self._run_git(GitOperation.REV_PARSE, '--git-dir')
            return True
        except GitError:
            return False

    def init(self) -> None:
        self._run_git(GitOperation.INIT)

    def get_diff_hunks(self, staged: bool = False, strict: bool = False) -> list[DiffHunk]:
        """Uncommitted changes as hunks (working tree by default, index if staged)."""
        args = ['--patch', '--no-color', '--no-ext-diff', '--src-prefix=a/', '--dst-prefix=b/']
        if staged:
            args.append('--cached')
        return parse_all_hunks(self._run_git(GitOperation.DIFF, *args), strict=strict)

    def get_untracked_files(self) -> list[str]:
        output = self._run_git(GitOperation.LS_FILES, '--others', '--exclude-standard')
        return [line for line in output.split('\n') if line.strip()]

    def stage_hunk(self, hunk: DiffHunk) -> None:
        """Stage only this hunk, falling back to staging its whole file."""
        if hunk.is_deleted_file():
            self._run_git(GitOperation.RM, '--cached', '--quiet', '--', hunk.file_path)
            return

        try:
            patch = to_applicable_patch(hunk)
            self._apply_cached(patch)
        except (InvalidDiffError, GitError) as e:
            logger.warning("Could not stage hunk of %s on its own (%s); staging the whole file", hunk.file_path, e)
            self.stage_paths(hunk.paths, include_removals=hunk.is_rename())

    def _apply_cached(self, patch: str) -> None:
        fd, patch_file = tempfile.mkstemp(prefix='hunk_', suffix='.patch')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(patch)
            self._run_git(GitOperation.APPLY, '--cached', '--whitespace=nowarn', patch_file)
        finally:
            os.unlink(patch_file)

    def stage_paths(self, paths: list[str], include_removals: bool = False) -> None:
        if not paths:
            return
        args = ['-A'] if include_removals else []
        self._run_git(GitOperation.ADD, *args, '--', *paths)

    def stage_all(self) -> None:
        self._run_git(GitOperation.ADD, '-A')

    def unstage(self, paths: list[str] | None = None) -> None:
        """Move staged changes back to the working tree; everything when no paths are given."""
        args = ['--', *paths] if paths else []
        self._run_git(GitOperation.RESET, '-q', *args)

    def commit(self, message: str) -> None:
        self._run_git(GitOperation.COMMIT, '-m', message)

    def push(self, branch: str, set_upstream: bool = False, remote: str = 'origin') -> None:
        args = ['--set-upstream', remote, branch] if set_upstream else []
        self._run_git(GitOperation.PUSH, *args)

    def add_remote(self, name: str, url: str) -> None:
        self._run_git(GitOperation.REMOTE, 'add', name, url)

    def get_current_branch(self) -> str:
        return self._run_git(GitOperation.BRANCH, '--show-current').strip()

    def has_upstream(self, branch: str) -> bool:
        try:
            self._run_git(GitOperation.REV_PARSE, '--abbrev-ref', f'{branch}@{{upstream}}')
            return True
        except GitError:
            return False

    def get_remotes(self) -> dict[str, str]:
        """Remote name -> URL."""
        output = self._run_git(GitOperation.REMOTE, '-v')
        remotes = {}
        for line in output.split('\n'):
            match = REMOTE_LINE_RE.match(line.strip())
            if match:
                remotes[match.group(1)] = match.group(2)
        return remotes

    def get_commit_history(self, limit: int = 10) -> list[CommitInfo]:
        output = self._run_git(
            GitOperation.LOG,
            f'--pretty=format:{LOG_FORMAT}',
            '--date=iso',
            f'--max-count={limit}',
        )
        commits = []
        for line in output.split('\n'):
            if not line.strip():
                continue
            parts = line.split('\x1f', 4)
            parts += [''] * (5 - len(parts))
            commits.append(CommitInfo(*parts))
        return commits
