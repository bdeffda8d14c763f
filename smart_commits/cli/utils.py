"""CLI Utility Functions"""

import logging
import os
import subprocess
import sys
import tempfile

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send library logging to stderr; DEBUG with --verbose, WARNING otherwise."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("smart_commits")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def ask(question: str, default: str = "") -> str:
    """Prompt for a line of input; Enter (or EOF) returns the default."""
    suffix = f" [{default}]" if default else ""
    try:
        answer = input(f"{question}{suffix}: ").strip()
    except EOFError:
        return default
    return answer or default


def confirm(question: str, default: bool = True) -> bool:
    hint = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{question} {hint}: ").strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer in ('y', 'yes')


def choose(question: str, options: list[str], default: int = 0) -> int:
    """Numbered menu. Returns the index of the chosen option."""
    print(question)
    for i, option in enumerate(options, 1):
        marker = " (default)" if i - 1 == default else ""
        print(f"  {i}. {option}{marker}")
    while True:
        try:
            choice = input(f"Select [1-{len(options)}]: ").strip()
        except EOFError:
            return default
        if not choice:
            return default
        if choice.isdigit() and 1 <= int(choice) <= len(options):
            return int(choice) - 1
        print(f"Enter 1-{len(options)}")


def edit_message(message: str) -> str | None:
    """Open message in user's editor. Returns edited text or None on failure."""
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'

    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.gitcommit', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([editor, tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            edited = f.read().strip()
        return edited if edited else None
    except (subprocess.CalledProcessError, OSError):
        return None
    finally:
        try:
            os.unlink(tmp.name)
        except OSError as e:
            # Log to stderr so temp files don't silently accumulate
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)
