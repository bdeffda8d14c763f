"""
Tests for the commit flow: one change set at a time, failures isolated, index left clean.

Run with:
    pytest tests/test_commit_flow.py -v
"""

import importlib
from argparse import Namespace

import pytest

from smart_commits.config import Config
from smart_commits.generator import CommitMessageGenerator
from smart_commits.git import GitError, GitOperation, parse_hunk
from smart_commits.llm import AIProvider, AIService, LLMClient, LLMError, LLMResponse

cli = importlib.import_module("smart_commits.cli.main")


def make_hunk(path):
    return parse_hunk(f"diff --git a/{path} b/{path}\n@@ -1 +1 @@\n-old\n+new")


class FixedClient(LLMClient):
    """Answers every prompt with the same text, or raises the given error."""

    provider = AIProvider.LOCAL
    DEFAULT_MODEL = "fixed"

    def __init__(self, answer="fix: adjust value"):
        self.answer = answer
        self.model = self.DEFAULT_MODEL

    def generate(self, prompt, model=None):
        if isinstance(self.answer, Exception):
            raise self.answer
        return LLMResponse(content=self.answer, model=self.model)

    @property
    def name(self):
        return "Fixed"


class RecordingRepository:
    """Stands in for GitRepository and records what reaches the index and history."""

    def __init__(self, hunks=(), new_files=(), unstageable=(), failing_commits=0):
        self.hunks = list(hunks)
        self.new_files = list(new_files)
        self.unstageable = set(unstageable)
        self.failing_commits = failing_commits
        self.index = []
        self.commits = []
        self.unstaged = []

    def is_repository(self):
        return True

    def get_diff_hunks(self, staged=False, strict=False):
        return list(self.hunks)

    def get_untracked_files(self):
        return list(self.new_files)

    def stage_hunk(self, hunk):
        if hunk.file_path in self.unstageable:
            raise GitError("patch does not apply", GitOperation.APPLY, 1)
        self.index.extend(hunk.paths)

    def stage_paths(self, paths, include_removals=False):
        self.index.extend(paths)

    def stage_all(self):
        self.index.append("<all>")

    def unstage(self, paths=None):
        self.unstaged.append(paths)
        self.index = [] if paths is None else [p for p in self.index if p not in paths]

    def commit(self, message):
        if self.failing_commits:
            self.failing_commits -= 1
            raise GitError("hook rejected commit", GitOperation.COMMIT, 1)
        self.commits.append((message, list(self.index)))
        self.index = []


@pytest.fixture
def make_session():
    """Return a factory for a non-interactive Session over a RecordingRepository."""
    def _make(repo, answer="fix: adjust value", **flags):
        args = Namespace(dry_run=False, no_ai=False, all=False, push=False, hint=None, type=None)
        for name, value in flags.items():
            setattr(args, name, value)
        session = cli.Session(args=args, config=Config(auto_accept=True), repo=repo)
        session.generator = CommitMessageGenerator(AIService({AIProvider.LOCAL: FixedClient(answer)}), AIProvider.LOCAL)
        return session
    return _make


@pytest.fixture
def keep_generator(monkeypatch):
    """Make _run reuse the session's generator instead of building a real provider."""
    monkeypatch.setattr(cli, "_build_generator", lambda session: session.generator)


# ---------------------------------------------------------------------------
# Per change set
# ---------------------------------------------------------------------------

class TestPerChangeSet:

    def test_each_hunk_committed_separately(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py"), make_hunk("two.py")])
        session = make_session(repo)
        cli._commit_per_hunk(session)

        assert [paths for _, paths in repo.commits] == [["one.py"], ["two.py"]]
        assert session.committed == 2

    def test_new_files_committed_first(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py")], new_files=["notes.md"])
        cli._commit_per_hunk(make_session(repo, answer="docs: add notes"))

        assert [paths for _, paths in repo.commits] == [["notes.md"], ["one.py"]]

    def test_failure_on_one_change_set_lets_the_rest_continue(self, make_session, keep_generator, capsys):
        repo = RecordingRepository(hunks=[make_hunk("one.py"), make_hunk("two.py")], unstageable={"one.py"})
        session = make_session(repo)

        assert cli._run(session) == 1
        assert session.failed == 1
        assert session.committed == 1
        assert [paths for _, paths in repo.commits] == [["two.py"]]

        captured = capsys.readouterr()
        assert "Failed to commit change set #1" in captured.err
        assert "Committed change set #2" in captured.out

    def test_clean_run_exits_zero(self, make_session, keep_generator):
        repo = RecordingRepository(hunks=[make_hunk("one.py")])
        assert cli._run(make_session(repo)) == 0

    def test_failed_commit_unstages_its_hunk(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py"), make_hunk("two.py")], failing_commits=1)
        session = make_session(repo)
        cli._commit_per_hunk(session)

        assert repo.unstaged == [["one.py"]]
        # The second commit carries only its own file
        assert repo.commits == [("fix: adjust value", ["two.py"])]
        assert session.failed == 1

    def test_generation_error_is_isolated(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py")])
        session = make_session(repo, answer=LLMError.rate_limited(AIProvider.LOCAL))
        cli._commit_per_hunk(session)

        assert session.failed == 1
        assert repo.index == []

    def test_dry_run_touches_nothing(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py")], new_files=["notes.md"])
        session = make_session(repo, dry_run=True)
        cli._commit_per_hunk(session)

        assert repo.commits == []
        assert repo.index == []


# ---------------------------------------------------------------------------
# --all
# ---------------------------------------------------------------------------

class TestAllChanges:

    def test_commits_everything_once(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py"), make_hunk("two.py")])
        cli._commit_all_changes(make_session(repo, all=True))

        assert repo.commits == [("fix: adjust value", ["<all>"])]
        assert repo.unstaged == []

    def test_skip_unstages_everything(self, make_session, monkeypatch):
        repo = RecordingRepository(hunks=[make_hunk("one.py")])
        session = make_session(repo, all=True)
        monkeypatch.setattr(cli.Session, "interactive", property(lambda self: True))
        monkeypatch.setattr("builtins.input", lambda prompt="": "s")

        cli._commit_all_changes(session)

        assert repo.commits == []
        assert repo.unstaged == [None]
        assert repo.index == []

    def test_generation_error_unstages_everything(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py")])
        session = make_session(repo, answer=LLMError.connection_failed(AIProvider.LOCAL, "down"), all=True)

        with pytest.raises(LLMError):
            cli._commit_all_changes(session)
        assert repo.unstaged == [None]

    def test_dry_run_never_stages(self, make_session):
        repo = RecordingRepository(hunks=[make_hunk("one.py")])
        cli._commit_all_changes(make_session(repo, all=True, dry_run=True))

        assert repo.index == []
        assert repo.unstaged == []
