"""Git and diff error types."""

from enum import Enum


class InvalidDiffError(Exception):
    """Raised when diff text cannot be turned into a usable hunk or patch."""

    def __init__(self, message: str):
        super().__init__(f"Invalid diff hunk: {message}")


class MalformedDiffHeaderError(InvalidDiffError):
    """File header line present but its paths could not be read."""


class MissingHunkHeaderError(InvalidDiffError):
    """No '@@ -a,b +c,d @@' line found."""


class EmptyContentError(InvalidDiffError):
    pass


class EmptyFilePathError(InvalidDiffError):
    pass


class NegativeLineNumberError(InvalidDiffError):
    pass


class InvalidComplexityError(InvalidDiffError):
    """Explicit complexity outside 0.0 to 1.0."""


class NoActualChangesError(InvalidDiffError):
    """Patch body has no '+' or '-' lines, so there is nothing to stage."""


class GitOperation(str, Enum):
    """Git subcommands the repository wrapper runs."""
    INIT = 'init'
    DIFF = 'diff'
    LS_FILES = 'ls-files'
    APPLY = 'apply'
    ADD = 'add'
    RM = 'rm'
    COMMIT = 'commit'
    PUSH = 'push'
    REMOTE = 'remote'
    BRANCH = 'branch'
    REV_PARSE = 'rev-parse'
    LOG = 'log'
    RESET = 'reset'


class GitError(Exception):
    """Raised when git operations fail."""

    def __init__(self, message: str, operation: GitOperation | None = None,
                 exit_code: int | None = None, output: str = ""):
        self.operation = operation
        self.exit_code = exit_code
        self.output = output
        prefix = f"[git {operation.value}] " if operation else ""
        super().__init__(f"{prefix}{message}")

    @classmethod
    def command_failed(cls, operation: GitOperation, command: list[str],
                       exit_code: int, output: str = "") -> 'GitError':
        detail = f"\n{output.strip()}" if output.strip() else ""
        return cls(
            f"Command failed with exit code {exit_code}: {' '.join(command)}{detail}",
            operation=operation,
            exit_code=exit_code,
            output=output,
        )

    @property
    def is_not_repository_error(self) -> bool:
        return self.exit_code == 128 and 'not a git repository' in self.output.lower()
