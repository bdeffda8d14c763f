"""Terminal Output Formatting Package"""

import re
import sys
import os
import threading


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'
    MAGENTA = '\033[35m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False
    if sys.platform == 'win32':
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
            return True
        except Exception:
            return False
    return True


def _supports_unicode() -> bool:
    if sys.platform == 'win32':
        try:
            '✓'.encode(sys.stdout.encoding or 'utf-8')
            return True
        except (UnicodeEncodeError, LookupError):
            return False
    return True


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


def success(text: str) -> str:
    return _colorize(text, Colors.GREEN)


def error(text: str) -> str:
    return _colorize(text, Colors.RED)


def warning(text: str) -> str:
    return _colorize(text, Colors.YELLOW)


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_warning(message: str) -> None:
    print(f"{warning('⚠')} {warning(message)}" if UNICODE_ENABLED else f"[!] {message}", file=sys.stderr)


def change_set_heading(index: int, path: str, total: int | None = None) -> str:
    """'Change set #2/5: src/app.py' with the counter highlighted."""
    counter = f"#{index}/{total}" if total else f"#{index}"
    return f"{info(f'Change set {counter}:')} {bold(path)}"


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'fix': Colors.RED,
    'refactor': Colors.YELLOW,
    'docs': Colors.CYAN,
    'test': Colors.MAGENTA,
    'perf': Colors.GREEN,
    'chore': Colors.DIM,
    'style': Colors.DIM,
    'ci': Colors.CYAN,
    'build': Colors.CYAN,
    'revert': Colors.MAGENTA,
}

SUBJECT_PREFIX_RE = re.compile(r'^(?P<type>\w+)(?P<scope>\([^)]*\))?(?P<bang>!)?:')


def colorize_commit_type(message: str) -> str:
    """Color the type(scope) prefix of the subject; a breaking '!' is shown in red."""
    if not COLORS_ENABLED:
        return message
    subject, sep, rest = message.partition('\n')
    match = SUBJECT_PREFIX_RE.match(subject)
    if not match or match.group('type') not in COMMIT_TYPE_COLORS:
        return message

    color = COMMIT_TYPE_COLORS[match.group('type')]
    prefix = _colorize(match.group('type') + (match.group('scope') or ''), Colors.BOLD, color)
    if match.group('bang'):
        prefix += _colorize('!', Colors.BOLD, Colors.RED)
    return prefix + ':' + subject[match.end():] + sep + rest


class Spinner:
    """Animated spinner with a label for long operations. Use as context manager."""
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, label: str = ""):
        self.label = label
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII

    def _spin(self):
        idx = 0
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{frame} {dim(self.label)}', end='', flush=True)
            idx += 1
            self._stop_event.wait(0.08)

    def __enter__(self):
        if sys.stdout.isatty():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
        if sys.stdout.isatty():
            print('\r\033[K', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS",
    "success", "error", "warning", "info", "dim", "bold",
    "print_success", "print_error", "print_warning", "change_set_heading",
    "colorize_commit_type", "Spinner", "COMMIT_TYPE_COLORS",
]
