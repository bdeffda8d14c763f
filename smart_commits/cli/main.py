"""CLI Main Entry Point"""

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from smart_commits.commit import CommitMessage, InvalidCommitMessageError
from smart_commits.config import Config, load_config
from smart_commits.generator import CommitMessageGenerator
from smart_commits.git import DiffHunk, DiffProcessor, GitError, GitRepository, InvalidDiffError, ProcessedDiff
from smart_commits.llm import LLMError, OllamaClient, build_ai_service
from smart_commits.output import (
    success, warning, info, dim, bold, print_error, print_success, print_warning, CHECK, Spinner,
    change_set_heading, colorize_commit_type,
)
from smart_commits.prompts import PromptConfig
from smart_commits.vcs import VCSError, VCSProvider, build_vcs_service

from smart_commits.cli.args import parse_args
from smart_commits.cli.commands import display_config, run_setup, run_install_completion, run_warmup
from smart_commits.cli.utils import ask, choose, confirm, configure_logging, edit_message

logger = logging.getLogger(__name__)

RECENT_COMMITS = 5
DEFAULT_NO_AI_MESSAGE = "chore: update files"


@dataclass
class Session:
    """Everything one run of the commit flow needs."""
    args: object
    config: Config
    repo: GitRepository
    generator: CommitMessageGenerator | None = None
    committed: int = 0
    failed: int = 0

    @property
    def interactive(self) -> bool:
        return not (self.args.dry_run or self.config.auto_accept) and sys.stdin.isatty()


def _display_file_list(processed: ProcessedDiff, max_shown: int = 8):
    """Show which files will be analyzed, collapsing long lists.

    Args:
        processed: ProcessedDiff with file_details
        max_shown: Maximum files to display before collapsing (from config)
    """
    if not processed.file_details and not processed.new_files:
        return
    print(bold("Changes:"))
    shown = processed.file_details[:max_shown]
    remaining = len(processed.file_details) - len(shown)
    for path, additions, deletions in shown:
        print(dim(f"  {path} (+{additions} -{deletions})"))
    if remaining > 0:
        print(dim(f"  ... and {remaining} more files"))
    if processed.new_files:
        print(dim(f"  {len(processed.new_files)} new files"))
    if processed.filtered_files > 0:
        print(dim(f"  {processed.filtered_files} noise files filtered"))


def _display_message(message: str):
    """Display commit message with horizontal rules and colored type."""
    colored = colorize_commit_type(message)
    lines = colored.split('\n')
    # Use raw message for width calculation (no ANSI codes)
    raw_lines = message.split('\n')
    width = max((len(line) for line in raw_lines), default=40)
    print(f"\n{dim('─' * width)}")
    print(bold(lines[0]))
    for line in lines[1:]:
        print(line)
    print(dim('─' * width))


def _handle_subcommands(args):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(), True
    if args.setup:
        return run_setup(), True
    return 0, False


def _apply_cli_overrides(args, config: Config) -> Config:
    """CLI flags win over env and file values."""
    if args.provider:
        config.provider = args.provider
    if args.model:
        config.model = args.model
    if args.vcs:
        config.vcs = args.vcs
    if args.style:
        config.style = args.style
    if args.no_body:
        config.include_body = False
    if args.auto:
        config.auto_accept = True
    if args.strict:
        config.strict = True
    return config


# ---------------------------------------------------------------------------
# Repository setup
# ---------------------------------------------------------------------------

def _ensure_repository(session: Session) -> None:
    if session.repo.is_repository():
        return

    print(info("Initializing new Git repository..."))
    if session.args.dry_run:
        print(dim("[Dry run] Would run git init"))
        return
    session.repo.init()

    if sys.stdin.isatty() and confirm("Would you like to set up a remote repository?", False):
        _setup_remote(session)


def _setup_remote(session: Session) -> None:
    choice = choose("How would you like to set up the remote?", [
        "Create new repository",
        "Connect existing repository",
        "Skip for now",
    ])

    if choice == 0:
        _create_remote(session)
    elif choice == 1:
        url = ask("Enter repository URL")
        if url:
            session.repo.add_remote('origin', url)
            print_success("Remote repository added")


def _create_remote(session: Session) -> None:
    provider = VCSProvider(session.config.vcs)
    vcs = build_vcs_service()
    if not vcs.is_provider_supported(provider):
        print_warning(f"No credentials for {provider.display_name}; set them in the environment first")
        return

    name = ask("Repository name", Path.cwd().name)
    options: dict = {}

    if provider is VCSProvider.GITHUB:
        orgs = [org.get('login', '') for org in vcs.client(provider).list_organizations()]
        owners = ["Personal account", *orgs]
        selected = choose("Select organization", owners)
        if selected > 0:
            options['organization'] = owners[selected]

    options['description'] = ask("Repository description", "Created by smart-commits")
    options['private'] = confirm("Is this repository private?", False)

    repo = vcs.create_repository(provider, name, options)
    session.repo.add_remote('origin', repo.preferred_clone_url())
    print_success(f"Created repository: {repo.url}")


# ---------------------------------------------------------------------------
# Commit flows
# ---------------------------------------------------------------------------

def _build_generator(session: Session) -> CommitMessageGenerator:
    config = session.config
    ai_service, provider = build_ai_service(config.provider, config.model)
    client = ai_service.client(provider)
    print(f"Using {info(client.name)}")

    if isinstance(client, OllamaClient) and not client.is_model_loaded():
        print(dim("Loading model... "), end='', flush=True)
        if not client.warmup():
            print(warning("warmup failed, generation may be slow"))
        else:
            print(success("ready"))

    try:
        recent = [c.subject for c in session.repo.get_commit_history(RECENT_COMMITS)]
    except GitError:
        # No commits yet
        recent = []

    prompt_config = PromptConfig(
        hint=session.args.hint,
        forced_type=session.args.type,
        style=config.style,
        include_body=config.include_body,
        max_subject_length=config.max_subject_length,
        recent_commits=recent,
    )
    return CommitMessageGenerator(ai_service, provider, config.model, prompt_config)


def _generate(produce) -> CommitMessage:
    t0 = time.time()
    with Spinner("Generating commit message"):
        message = produce()
    logger.debug("Generated message in %.2fs", time.time() - t0)
    return message


def _confirm_message(session: Session, message: CommitMessage, regenerate) -> CommitMessage | None:
    """Show message; let the user accept, edit, regenerate or skip. None means skip."""
    while True:
        _display_message(str(message))
        if not session.interactive:
            return message

        try:
            action = input(f"\n{dim('(e)dit, (r)egenerate, (s)kip, or Enter to accept: ')}").strip().lower()
        except EOFError:
            return message

        if action == 's':
            return None
        if action == 'r':
            print("Regenerating... ", end='', flush=True)
            message = _generate(regenerate)
            continue
        if action == 'e':
            edited = edit_message(str(message))
            if not edited:
                return message
            try:
                return CommitMessage.from_string(edited)
            except InvalidCommitMessageError:
                print_warning("Not a conventional commit; asking for an improved version")
            try:
                message = _generate(lambda: session.generator.suggest_improvement(edited))
            except InvalidCommitMessageError:
                print_warning("Could not repair the edited message; keeping the generated one")
            continue
        return message


def _commit(session: Session, message: CommitMessage, label: str) -> None:
    if session.args.dry_run:
        print(dim(f"[Dry run] Would commit {label}"))
        return
    session.repo.commit(str(message))
    session.committed += 1
    print(f"{success(CHECK)} Committed {label}")


def _commit_without_ai(session: Session) -> None:
    if session.args.dry_run:
        print(dim(f"[Dry run] Would stage everything and commit with: {DEFAULT_NO_AI_MESSAGE}"))
        return

    text = ask("Enter commit message", DEFAULT_NO_AI_MESSAGE) if sys.stdin.isatty() else DEFAULT_NO_AI_MESSAGE
    session.repo.stage_all()
    session.repo.commit(text)
    session.committed += 1
    print(f"{success(CHECK)} Committed all changes")


def _commit_all_changes(session: Session) -> None:
    print(info("\nProcessing all changes together:"))
    repo = session.repo
    new_files = repo.get_untracked_files()
    if session.args.dry_run:
        _offer_all_changes(session, repo.get_diff_hunks(strict=session.config.strict), new_files)
        return

    repo.stage_all()
    committed = False
    try:
        hunks = repo.get_diff_hunks(staged=True, strict=session.config.strict)
        committed = _offer_all_changes(session, hunks, new_files)
    finally:
        # Nothing committed: take back what stage_all put in the index
        if not committed:
            repo.unstage()


def _offer_all_changes(session: Session, hunks: list[DiffHunk], new_files: list[str]) -> bool:
    """Generate, confirm and commit one message for everything. True once committed."""
    if not hunks and not new_files:
        print("No changes detected.")
        return False

    _display_file_list(DiffProcessor().process(hunks, new_files), session.config.max_file_display)
    produce = lambda: session.generator.generate_for_all_changes(hunks, new_files)
    message = _confirm_message(session, _generate(produce), produce)
    if message is None:
        print(dim("Skipped."))
        return False
    _commit(session, message, "all changes")
    return True


def _commit_staged(session: Session, message: CommitMessage, label: str, paths: list[str]) -> None:
    """Commit what was just staged for paths; a failed commit unstages them again."""
    try:
        _commit(session, message, label)
    except GitError:
        session.repo.unstage(paths)
        raise


def _commit_new_files(session: Session, paths: list[str]) -> None:
    print(info(f"\nStaging {len(paths)} new files:"))
    produce = lambda: session.generator.generate_for_new_files(paths)
    message = _confirm_message(session, _generate(produce), produce)
    if message is None:
        print(dim("Skipped new files."))
        return
    if session.args.dry_run:
        _commit(session, message, "new files")
        return
    session.repo.stage_paths(paths)
    _commit_staged(session, message, "new files", paths)


def _commit_hunk(session: Session, hunk: DiffHunk, index: int, total: int) -> None:
    print("\n" + change_set_heading(index, hunk.file_path, total))
    produce = lambda: session.generator.generate_for_hunk(hunk)
    message = _confirm_message(session, _generate(produce), produce)
    if message is None:
        print(dim(f"Skipped change set #{index}."))
        return
    if session.args.dry_run:
        _commit(session, message, f"change set #{index}")
        return
    session.repo.stage_hunk(hunk)
    _commit_staged(session, message, f"change set #{index}", hunk.paths)


def _commit_per_hunk(session: Session) -> None:
    repo = session.repo
    hunks = repo.get_diff_hunks(strict=session.config.strict)
    new_files = repo.get_untracked_files()

    if not hunks and not new_files:
        print("No changes detected.")
        return

    _display_file_list(DiffProcessor().process(hunks, new_files), session.config.max_file_display)

    if new_files:
        _guarded(session, "new files", lambda: _commit_new_files(session, new_files))

    for i, hunk in enumerate(hunks, 1):
        _guarded(session, f"change set #{i}", lambda: _commit_hunk(session, hunk, i, len(hunks)))


def _guarded(session: Session, label: str, step) -> None:
    """Run one commit step; report a failure and let the rest continue."""
    try:
        step()
    except (LLMError, GitError, InvalidDiffError) as e:
        session.failed += 1
        print()
        print_error(f"Failed to commit {label}: {e}")


def _push(session: Session) -> None:
    repo = session.repo
    branch = repo.get_current_branch()
    print(info(f"\nPushing changes to {branch}..."))

    if session.args.dry_run:
        print(dim(f"[Dry run] Would push to {branch}"))
        return
    if not repo.get_remotes():
        print_warning("No remote configured; skipping push")
        return

    repo.push(branch, set_upstream=not repo.has_upstream(branch))
    print_success("Pushed changes")


def _run(session: Session) -> int:
    _ensure_repository(session)

    if session.args.no_ai:
        _commit_without_ai(session)
    else:
        session.generator = _build_generator(session)
        if session.args.all:
            _commit_all_changes(session)
        else:
            _commit_per_hunk(session)

    if session.args.push:
        _push(session)

    if session.failed:
        print_warning(f"{session.failed} change sets failed, {session.committed} committed")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    # Handle subcommands that exit early
    exit_code, should_exit = _handle_subcommands(args)
    if should_exit:
        return exit_code

    config = _apply_cli_overrides(args, load_config())

    # Handle warmup subcommand (needs provider/model)
    if args.warmup:
        return run_warmup(config.provider, config.model)

    try:
        session = Session(args=args, config=config, repo=GitRepository())
        return _run(session)
    except GitError as e:
        print_error(f"Git error: {e}")
    except VCSError as e:
        print_error(f"VCS error: {e}")
    except (LLMError, InvalidDiffError) as e:
        print_error(str(e))
    except KeyboardInterrupt:
        print(dim("\nCancelled."))
        return 130
    return 1


if __name__ == "__main__":
    sys.exit(main())
