"""
Line-change diff application.

Reconstructs a file's content from its original lines and a sparse,
line-number-keyed set of `LineChange` records. Line numbers always refer
to the original file, so deletions and insertions never shift the
positions other changes target.

The engine is pure: it performs no I/O and never suspends. Callers that
write the result to disk are responsible for taking backups first.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from aiplugin.core.line_change import LineChange, LineChangeType
from aiplugin.plugins.base import ErrorKind, PluginResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeStats:
    """
    Statistics for an applied change set.

    `modified_line_count` is the number of lines in the *output*, not the
    number of modified lines (that is `lines_modified`). The name is kept
    for compatibility with existing consumers of `to_dict()`.
    """

    original_line_count: int
    modified_line_count: int
    lines_added: int
    lines_modified: int
    lines_deleted: int

    @property
    def output_line_count(self) -> int:
        return self.modified_line_count

    @property
    def total_changes(self) -> int:
        return self.lines_added + self.lines_modified + self.lines_deleted

    def to_dict(self) -> Dict[str, int]:
        return {
            "OriginalLineCount": self.original_line_count,
            "ModifiedLineCount": self.modified_line_count,
            "LinesAdded": self.lines_added,
            "LinesModified": self.lines_modified,
            "LinesDeleted": self.lines_deleted,
            "TotalChanges": self.total_changes,
        }


@dataclass(frozen=True)
class AppliedChanges:
    """Output of `apply_changes`: the new lines, their joined text, and stats."""

    lines: Tuple[str, ...]
    content: str
    stats: ChangeStats


def _partition(
    changes: Mapping[int, LineChange],
) -> Tuple[set, Dict[int, str], List[Tuple[int, str]]]:
    deleted = set()
    modified: Dict[int, str] = {}
    added: List[Tuple[int, str]] = []
    for number, change in changes.items():
        if change.change_type is LineChangeType.DELETED:
            deleted.add(number)
        elif change.change_type is LineChangeType.MODIFIED:
            modified[number] = change.content
        elif change.change_type is LineChangeType.ADDED:
            added.append((number, change.content))
        # CONTEXT entries carry no transformation.
    added.sort(key=lambda item: item[0])
    return deleted, modified, added


def apply_changes(
    original_lines: Sequence[str],
    changes: Mapping[int, LineChange],
    header_comment: Optional[str] = None,
    line_separator: str = os.linesep,
) -> PluginResult:
    """
    Apply a sparse set of line changes to the original lines.

    Args:
        original_lines: The original file content, one entry per line,
            without line terminators.
        changes: 1-based original line number -> change. An ADDED change
            is inserted before the original line with that number, or
            appended at the end when the number is past the last line.
        header_comment: Optional line emitted first; counts as an addition.
        line_separator: Separator used to join the output lines.

    Returns:
        A successful `PluginResult` whose data is `AppliedChanges`, or an
        INVALID_ARGUMENT failure when `changes` is empty or keyed by a
        line number below 1.
    """
    if not changes:
        return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, "No changes specified")
    invalid = [
        str(number)
        for number in changes
        if isinstance(number, bool) or not isinstance(number, int) or number < 1
    ]
    if invalid:
        return PluginResult.fail(
            ErrorKind.INVALID_ARGUMENT,
            f"Line numbers must be positive integers: {', '.join(invalid)}",
        )

    deleted, modified, added = _partition(changes)
    total = len(original_lines)

    output: List[str] = []
    lines_added = 0
    lines_modified = 0
    lines_deleted = 0

    if header_comment:
        output.append(header_comment)
        lines_added += 1

    cursor = 0
    for number, original in enumerate(original_lines, start=1):
        if number in deleted:
            lines_deleted += 1
            continue

        # Additions are pre-inserted at their target position.
        while cursor < len(added) and added[cursor][0] <= number:
            if added[cursor][0] == number:
                output.append(added[cursor][1])
                lines_added += 1
            cursor += 1

        if number in modified:
            output.append(modified[number])
            lines_modified += 1
        else:
            output.append(original)

    for number, content in added[cursor:]:
        if number > total:
            output.append(content)
            lines_added += 1

    stats = ChangeStats(
        original_line_count=total,
        modified_line_count=len(output),
        lines_added=lines_added,
        lines_modified=lines_modified,
        lines_deleted=lines_deleted,
    )
    logger.debug(
        "Applied %d changes to %d lines (+%d ~%d -%d)",
        len(changes),
        total,
        lines_added,
        lines_modified,
        lines_deleted,
    )
    return PluginResult.ok(
        AppliedChanges(
            lines=tuple(output),
            content=line_separator.join(output),
            stats=stats,
        ),
        message=f"Applied {stats.total_changes} line changes",
    )
