"""
Line-change data model.

A line change describes one edit to a text file, keyed externally by
the 1-based line number it refers to in the *original* file. Callers
send these over the wire as JSON objects:

    {"changeType": "Modified", "content": "...", "originalContent": "..."}

and this module decodes them into typed `LineChange` values once, at
the boundary, so the rest of the package never inspects raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class LineChangeType(str, Enum):
    """The kind of edit applied to a line."""

    ADDED = "Added"
    MODIFIED = "Modified"
    DELETED = "Deleted"
    CONTEXT = "Context"

    @classmethod
    def parse(cls, value: Any) -> "LineChangeType":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(
            f"Unknown changeType '{value}'. "
            f"Expected one of: {', '.join(m.value for m in cls)}."
        )


@dataclass(frozen=True)
class LineChange:
    """
    A single line edit.

    `content` of a DELETED change is informational only and never
    appears in reconstructed output. `original_content` is only
    meaningful for MODIFIED changes.
    """

    change_type: LineChangeType
    content: str
    original_content: Optional[str] = None

    @classmethod
    def added(cls, content: str) -> "LineChange":
        return cls(LineChangeType.ADDED, content)

    @classmethod
    def modified(cls, content: str, original_content: Optional[str] = None) -> "LineChange":
        return cls(LineChangeType.MODIFIED, content, original_content)

    @classmethod
    def deleted(cls, content: str = "") -> "LineChange":
        return cls(LineChangeType.DELETED, content)

    @classmethod
    def context(cls, content: str) -> "LineChange":
        return cls(LineChangeType.CONTEXT, content)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "changeType": self.change_type.value,
            "content": self.content,
        }
        if self.original_content is not None:
            data["originalContent"] = self.original_content
        return data


def parse_line_change(value: Any) -> LineChange:
    """
    Decode one wire-format line change.

    Raises:
        ValueError: If the value is not a mapping, names an unknown
            change type, or lacks `content` (DELETED may omit it).
    """
    if isinstance(value, LineChange):
        return value
    if not isinstance(value, Mapping):
        raise ValueError(
            f"Line change must be an object, got {type(value).__name__}."
        )

    raw_type = value.get("changeType")
    if raw_type is None:
        raise ValueError("Line change is missing 'changeType'.")
    change_type = LineChangeType.parse(raw_type)

    content = value.get("content")
    if content is None:
        if change_type is not LineChangeType.DELETED:
            raise ValueError(
                f"Line change of type {change_type.value} is missing 'content'."
            )
        content = ""

    original = value.get("originalContent")
    return LineChange(
        change_type=change_type,
        content=str(content),
        original_content=None if original is None else str(original),
    )


def parse_line_number(key: Any) -> int:
    if isinstance(key, bool):
        raise ValueError(f"Invalid line number: {key!r}")
    if isinstance(key, int):
        number = key
    else:
        try:
            number = int(str(key).strip())
        except ValueError:
            raise ValueError(f"Invalid line number: {key!r}") from None
    if number < 1:
        raise ValueError(f"Line numbers are 1-based, got {number}.")
    return number


def parse_line_changes(value: Mapping[Any, Any]) -> Dict[int, LineChange]:
    """
    Decode a line-number-keyed mapping of line changes.

    Keys may be integers or integer strings (JSON object keys are always
    strings). Two keys that resolve to the same line number are rejected.
    """
    if not isinstance(value, Mapping):
        raise ValueError(
            f"Line changes must be an object keyed by line number, got {type(value).__name__}."
        )

    changes: Dict[int, LineChange] = {}
    for key, raw in value.items():
        number = parse_line_number(key)
        if number in changes:
            raise ValueError(f"Line {number} appears more than once in the change set.")
        changes[number] = parse_line_change(raw)
    return changes


def line_changes_to_dict(changes: Mapping[int, LineChange]) -> Dict[str, Dict[str, Any]]:
    """Encode changes back to wire form, ordered by line number."""
    return {str(number): changes[number].to_dict() for number in sorted(changes)}
