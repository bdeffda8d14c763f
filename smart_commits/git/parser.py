"""Diff Parser - Split raw `git diff` output into DiffHunk values."""

import logging
import re

from smart_commits.git.errors import InvalidDiffError, MalformedDiffHeaderError, MissingHunkHeaderError
from smart_commits.git.hunk import DiffHunk, calculate_complexity, detect_language

logger = logging.getLogger(__name__)

FILE_HEADER_MARKER = 'diff --git'
FILE_HEADER_RE = re.compile(r'^diff --git a/(.+?) b/(.+)$')
QUOTED_NAME = r'"(?:[^"\\]|\\.)*"'
QUOTED_HEADER_RE = re.compile(rf'^diff --git (?:({QUOTED_NAME}) (.+)|(.+?) ({QUOTED_NAME}))$')
# Counts are optional: "@@ -5 +5 @@" means one line on each side.
HUNK_HEADER_RE = re.compile(r'^\s*@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(?:\s.*)?$')
FILE_SPLIT_RE = re.compile(r'^diff --git', re.MULTILINE)
OCTAL_ESCAPE_RE = re.compile(r'[0-7]{3}')

C_ESCAPES = {'a': 7, 'b': 8, 't': 9, 'n': 10, 'v': 11, 'f': 12, 'r': 13, '"': 34, '\\': 92}

# Extended header lines that name a side of the change, in the order git writes them.
PATH_LINES = (
    ('rename from ', 'old'),
    ('copy from ', 'old'),
    ('--- ', 'old'),
    ('rename to ', 'new'),
    ('copy to ', 'new'),
    ('+++ ', 'new'),
)


def unquote_path(name: str) -> str:
    """Undo git's C-style path quoting: '"caf\\303\\251.py"' -> 'café.py'."""
    if len(name) < 2 or not (name.startswith('"') and name.endswith('"')):
        return name

    raw = bytearray()
    pos, end = 1, len(name) - 1
    while pos < end:
        char = name[pos]
        if char != '\\':
            raw += char.encode('utf-8')
            pos += 1
            continue
        escape = name[pos + 1:pos + 2]
        if escape in C_ESCAPES:
            raw.append(C_ESCAPES[escape])
            pos += 2
        elif OCTAL_ESCAPE_RE.fullmatch(name[pos + 1:pos + 4]):
            raw.append(int(name[pos + 1:pos + 4], 8) & 0xFF)
            pos += 4
        else:
            raise MalformedDiffHeaderError(f"Bad escape in quoted path: {name[:80]}")
    return raw.decode('utf-8', errors='replace')


def _strip_prefix(name: str, prefix: str) -> str:
    if not name.startswith(prefix):
        raise MalformedDiffHeaderError(f"Path without '{prefix}' prefix: {name[:80]}")
    return name[len(prefix):]


def _parse_file_header(line: str) -> tuple[str, str, bool]:
    """Return (old_path, new_path, exact).

    Non-header lines give empty paths. ``exact`` is False when unquoted paths
    contain ' b/' and the split point is a guess; the extended header lines
    then decide.
    """
    if not line.startswith(FILE_HEADER_MARKER):
        return '', '', True

    quoted = QUOTED_HEADER_RE.match(line)
    if quoted:
        first, second = (quoted.group(1), quoted.group(2)) if quoted.group(1) else (quoted.group(3), quoted.group(4))
        return (_strip_prefix(unquote_path(first), 'a/'),
                _strip_prefix(unquote_path(second), 'b/'), True)

    # "a/P b/P": git splits an unquoted header in the middle when both sides match
    names = line[len(FILE_HEADER_MARKER) + 1:]
    half = (len(names) - 5) // 2
    if len(names) % 2 == 1 and names.startswith('a/') and names[half + 2:half + 5] == ' b/':
        if names[2:half + 2] == names[half + 5:]:
            return names[2:half + 2], names[half + 5:], True

    match = FILE_HEADER_RE.match(line)
    if not match:
        raise MalformedDiffHeaderError(f"Unreadable file header: {line[:80]}")
    return match.group(1), match.group(2), ' b/' not in match.group(2)


def _extended_header_path(line: str) -> tuple[str, str] | None:
    """('old' | 'new', path) for rename/copy and ---/+++ lines, else None."""
    for prefix, side in PATH_LINES:
        if not line.startswith(prefix):
            continue
        name = unquote_path(line[len(prefix):].rstrip('\t'))
        if prefix in ('--- ', '+++ '):
            if name == '/dev/null':
                return None
            name = name[2:] if name.startswith('a/' if side == 'old' else 'b/') else name
        return side, name
    return None


def parse_hunk(raw_text: str) -> DiffHunk:
    """Parse one file fragment (file header, then a hunk header and body).

    Lines between the file header and the first hunk header (blank padding,
    ``index``, ``---``/``+++``, mode lines) are skipped. Everything after the
    hunk header is kept verbatim as the hunk content.
    """
    lines = raw_text.split('\n')
    pos = 0
    while pos < len(lines) and not lines[pos].strip():
        pos += 1

    header = lines[pos].strip() if pos < len(lines) else ''
    old_path, file_path, exact = _parse_file_header(header)
    pos += 1

    named = {}
    match = None
    while pos < len(lines):
        candidate = lines[pos].strip()
        pos += 1
        if not candidate:
            continue
        match = HUNK_HEADER_RE.match(candidate)
        if match:
            hunk_header = candidate
            break
        named_path = _extended_header_path(candidate)
        if named_path:
            named.setdefault(*named_path)

    if match is None:
        raise MissingHunkHeaderError("No valid hunk header found")

    if not exact:
        old_path = named.get('old', old_path)
        file_path = named.get('new', file_path)

    old_start, old_lines, new_start, new_lines = match.groups()
    body = lines[pos:]

    return DiffHunk(
        file_path=file_path,
        old_path=old_path,
        old_start=int(old_start),
        old_lines=int(old_lines) if old_lines is not None else 1,
        new_start=int(new_start),
        new_lines=int(new_lines) if new_lines is not None else 1,
        header=hunk_header,
        content='\n'.join(body),
        language=detect_language(file_path),
        complexity=calculate_complexity(body),
    )


def parse_all_hunks(raw_diff: str, strict: bool = False) -> list[DiffHunk]:
    """Parse a multi-file diff into hunks, in the order they appear.

    Fragments that fail to parse are skipped unless ``strict`` is set, in
    which case the first failure is raised.
    """
    hunks = []
    fragments = [f for f in FILE_SPLIT_RE.split(raw_diff) if f]

    for index, fragment in enumerate(fragments):
        if not fragment.strip():
            continue
        try:
            hunks.append(parse_hunk(FILE_HEADER_MARKER + fragment))
        except InvalidDiffError as e:
            if strict:
                raise
            logger.debug("Skipping diff fragment %d: %s", index + 1, e)

    return hunks
