"""Patch Serializer - Turn a DiffHunk back into text git can consume."""

import re

from smart_commits.git.errors import NoActualChangesError
from smart_commits.git.hunk import DiffHunk

LINE_ENDING_RE = re.compile(r'\r\n?')


def to_applicable_patch(hunk: DiffHunk) -> str:
    """Minimal standalone patch for `git apply --cached`.

    Counts are always written out, even when the parsed header omitted them.
    """
    content = LINE_ENDING_RE.sub('\n', hunk.content).rstrip('\n')

    if not any(line.startswith(('+', '-')) for line in content.split('\n')):
        raise NoActualChangesError("Diff contains no actual changes")

    return (
        f"--- a/{hunk.file_path}\n"
        f"+++ b/{hunk.file_path}\n"
        f"@@ -{hunk.old_start},{hunk.old_lines} +{hunk.new_start},{hunk.new_lines} @@\n"
        f"{content}\n"
    )


def to_full_diff(hunk: DiffHunk) -> str:
    """The hunk as originally seen: git file header, original hunk header, raw body."""
    return f"diff --git a/{hunk.old_path} b/{hunk.file_path}\n{hunk.header}\n{hunk.content}"


def extract_added_lines(hunk: DiffHunk) -> str:
    """Only the added lines, without their '+' marker."""
    return '\n'.join(
        line[1:] for line in hunk.lines
        if line.startswith('+') and not line.startswith('++')
    )
