"""
File plugins for reading, writing and patching text files.

When a plugin is configured with a `root_dir`, every path is resolved
relative to it and access outside that directory is refused. Without a
root directory paths are used as given. Destructive operations can take
a timestamped backup copy first; the copy is made synchronously before
the write proceeds.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Set

from aiplugin.core.diff import AppliedChanges, apply_changes
from aiplugin.plugins.base import (
    ErrorKind,
    ParameterSpec,
    ParameterType,
    Plugin,
    PluginResult,
    get_parameter,
)

logger = logging.getLogger(__name__)


class WorkspaceError(ValueError):
    """Raised when a path resolves outside the configured root directory."""


def make_backup(path: str) -> str:
    """Copy `path` to `<path>.<YYYYmmdd_HHMMSS>.bak` and return the copy's path."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = f"{path}.{stamp}.bak"
    counter = 1
    while os.path.exists(backup_path):
        backup_path = f"{path}.{stamp}.{counter}.bak"
        counter += 1
    shutil.copy2(path, backup_path)
    logger.info("Backed up %s to %s", path, backup_path)
    return backup_path


def parse_line_ranges(spec: str) -> Set[int]:
    """
    Parse a range spec like "1-10,15,20-25" into a set of line numbers.

    Malformed parts are ignored.
    """
    result: Set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                continue
            try:
                start, end = int(bounds[0]), int(bounds[1])
            except ValueError:
                continue
            result.update(range(start, end + 1))
        else:
            try:
                result.add(int(part))
            except ValueError:
                continue
    return result


def read_lines(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def write_text(path: str, content: str) -> None:
    # newline="" keeps the separators already present in `content`.
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


class FilePlugin(Plugin):
    """
    Shared path handling for plugins that touch the file system.
    """

    def __init__(self, name: str, description: str, parameters, root_dir: Optional[str] = None) -> None:
        super().__init__(name=name, description=description, parameters=parameters)
        self.root_dir = os.path.abspath(root_dir) if root_dir else None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "FilePlugin":
        root_dir = cfg.get("root_dir")
        if root_dir:
            os.makedirs(root_dir, exist_ok=True)
        return cls(root_dir=root_dir)

    def resolve(self, path: str) -> str:
        if self.root_dir is None:
            return os.path.abspath(path)
        abs_path = os.path.abspath(os.path.join(self.root_dir, path))
        if os.path.commonpath([abs_path, self.root_dir]) != self.root_dir:
            raise WorkspaceError(f"Access denied outside workspace root: {path}")
        return abs_path


class ReadFilePlugin(FilePlugin):
    """
    Read a text file, optionally as numbered lines filtered by range.
    """

    def __init__(self, root_dir: Optional[str] = None) -> None:
        super().__init__(
            name="read_file",
            description="Reads a file from the file system for analysis and modification",
            parameters=[
                ParameterSpec("file_path", ParameterType.STRING, "Full path to the file to read", required=True),
                ParameterSpec(
                    "return_with_line_numbers",
                    ParameterType.BOOLEAN,
                    "Whether to return the content as lines with line numbers (true) or as a single string (false)",
                    default=True,
                ),
                ParameterSpec(
                    "max_lines",
                    ParameterType.INTEGER,
                    "Maximum number of lines to return (0 for unlimited)",
                ),
                ParameterSpec(
                    "line_ranges",
                    ParameterType.STRING,
                    "Include only specific line ranges, format: '1-10,15,20-25'",
                ),
            ],
            root_dir=root_dir,
        )

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        try:
            path = self.resolve(parameters["file_path"])
        except WorkspaceError as exc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, str(exc))

        with_numbers = bool(get_parameter(parameters, "return_with_line_numbers", True))
        max_lines = int(get_parameter(parameters, "max_lines", 0))
        ranges = get_parameter(parameters, "line_ranges")
        wanted = parse_line_ranges(ranges) if ranges else None

        if not os.path.isfile(path):
            return PluginResult.fail(ErrorKind.EXECUTION_ERROR, f"File not found: {path}")

        size = os.path.getsize(path)
        lines = await asyncio.to_thread(read_lines, path)
        info: Dict[str, Any] = {
            "file_name": os.path.basename(path),
            "file_type": os.path.splitext(path)[1].lstrip(".").lower(),
            "file_size_bytes": size,
        }

        selected: Dict[int, str] = {}
        for number, line in enumerate(lines, start=1):
            if wanted is not None and number not in wanted:
                continue
            selected[number] = line
            if max_lines > 0 and len(selected) >= max_lines:
                break

        if with_numbers:
            info.update(total_lines=len(lines), included_lines=len(selected), content=selected)
        elif wanted is None and max_lines <= 0:
            info["content"] = await asyncio.to_thread(self._read_all, path)
        else:
            info["content"] = "".join(line + "\n" for line in selected.values())
        return PluginResult.ok(info, f"Read {len(selected)} lines from {info['file_name']}")

    @staticmethod
    def _read_all(path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()


class FileOperationsPlugin(FilePlugin):
    """
    Create, update or delete a file.
    """

    OPERATIONS = ("create", "update", "delete")

    def __init__(self, root_dir: Optional[str] = None) -> None:
        super().__init__(
            name="file_operations",
            description="Create, update, or delete files in the file system",
            parameters=[
                ParameterSpec("operation", ParameterType.STRING, "The operation to perform (create, update, delete)", required=True),
                ParameterSpec("file_path", ParameterType.STRING, "Full path to the file", required=True),
                ParameterSpec("content", ParameterType.STRING, "Content to write to the file (for create/update operations)"),
                ParameterSpec(
                    "create_directories",
                    ParameterType.BOOLEAN,
                    "Whether to create the directory structure if it doesn't exist (for create operations)",
                    default=True,
                ),
                ParameterSpec("overwrite", ParameterType.BOOLEAN, "Whether to overwrite existing files (for create operations)", default=False),
                ParameterSpec("make_backup", ParameterType.BOOLEAN, "Whether to make a backup before updating or deleting", default=True),
            ],
            root_dir=root_dir,
        )

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        operation = str(parameters["operation"]).strip().lower()
        if operation not in self.OPERATIONS:
            return PluginResult.fail(
                ErrorKind.INVALID_ARGUMENT,
                f"Invalid operation: {operation}. Must be 'create', 'update', or 'delete'.",
            )
        try:
            path = self.resolve(parameters["file_path"])
        except WorkspaceError as exc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, str(exc))

        content = parameters.get("content")
        if operation in ("create", "update") and content is None:
            return PluginResult.fail(
                ErrorKind.INVALID_ARGUMENT,
                f"Content is required for '{operation}' operation",
            )

        if operation == "create":
            return await self._create(
                path,
                content,
                create_directories=bool(get_parameter(parameters, "create_directories", True)),
                overwrite=bool(get_parameter(parameters, "overwrite", False)),
            )

        if not os.path.isfile(path):
            return PluginResult.fail(ErrorKind.EXECUTION_ERROR, f"File not found: {path}")

        backup_path = None
        if get_parameter(parameters, "make_backup", True):
            backup_path = make_backup(path)

        if operation == "update":
            await asyncio.to_thread(write_text, path, content)
            return PluginResult.ok(
                {
                    "operation": "update",
                    "file_path": path,
                    "file_size": os.path.getsize(path),
                    "backup_path": backup_path,
                },
                f"File updated successfully: {path}",
            )

        await asyncio.to_thread(os.remove, path)
        return PluginResult.ok(
            {"operation": "delete", "file_path": path, "backup_path": backup_path},
            f"File deleted successfully: {path}",
        )

    async def _create(self, path: str, content: str, create_directories: bool, overwrite: bool) -> PluginResult:
        if os.path.exists(path) and not overwrite:
            return PluginResult.fail(
                ErrorKind.EXECUTION_ERROR,
                f"File already exists: {path}. Set 'overwrite' to true to replace it.",
            )
        directory = os.path.dirname(path)
        if directory and not os.path.isdir(directory):
            if not create_directories:
                return PluginResult.fail(
                    ErrorKind.EXECUTION_ERROR,
                    f"Directory does not exist: {directory}. Set 'create_directories' to true to create it.",
                )
            os.makedirs(directory, exist_ok=True)
        await asyncio.to_thread(write_text, path, content)
        return PluginResult.ok(
            {"operation": "create", "file_path": path, "file_size": os.path.getsize(path)},
            f"File created successfully: {path}",
        )


class FileWorkflowPlugin(FilePlugin):
    """
    Apply line changes to a file and optionally write the result back.

    The modified content is always returned. With `update_file` the
    file is overwritten, after a backup copy when `create_backup` is set.
    """

    def __init__(self, root_dir: Optional[str] = None) -> None:
        super().__init__(
            name="file_workflow",
            description="Apply changes to a file using line change tracking",
            parameters=[
                ParameterSpec("file_path", ParameterType.STRING, "Full path to the file to modify", required=True),
                ParameterSpec(
                    "line_changes",
                    ParameterType.LINE_CHANGES,
                    "Dictionary of line changes with line numbers as keys",
                    required=True,
                ),
                ParameterSpec("create_backup", ParameterType.BOOLEAN, "Whether to create a backup of the original file", default=True),
                ParameterSpec(
                    "update_file",
                    ParameterType.BOOLEAN,
                    "Whether to update the file in place (true) or just return the modified content (false)",
                    default=False,
                ),
                ParameterSpec("header_comment", ParameterType.STRING, "Comment to add at the top of the file (optional)"),
            ],
            root_dir=root_dir,
        )

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        try:
            path = self.resolve(parameters["file_path"])
        except WorkspaceError as exc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, str(exc))

        changes = parameters.get("line_changes") or {}
        if not changes:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, "No changes specified")
        if not os.path.isfile(path):
            return PluginResult.fail(ErrorKind.EXECUTION_ERROR, f"File not found: {path}")

        original = await asyncio.to_thread(read_lines, path)
        applied = apply_changes(original, changes, get_parameter(parameters, "header_comment"))
        if not applied.success:
            return applied
        outcome: AppliedChanges = applied.data

        update_file = bool(get_parameter(parameters, "update_file", False))
        backup_path = None
        if update_file:
            if get_parameter(parameters, "create_backup", True):
                backup_path = make_backup(path)
            await asyncio.to_thread(write_text, path, outcome.content)
            logger.info("Wrote %d lines to %s", outcome.stats.modified_line_count, path)

        return PluginResult.ok(
            {
                "file_path": path,
                "modified_content": outcome.content,
                "change_stats": outcome.stats.to_dict(),
                "file_updated": update_file,
                "backup_path": backup_path,
            },
            f"Applied {outcome.stats.total_changes} changes to {os.path.basename(path)}",
        )


class FileInfoPlugin(FilePlugin):
    """
    Report metadata about a file.
    """

    def __init__(self, root_dir: Optional[str] = None) -> None:
        super().__init__(
            name="file_info",
            description="Gets metadata about a file",
            parameters=[
                ParameterSpec("file_path", ParameterType.STRING, "Full path to the file", required=True),
            ],
            root_dir=root_dir,
        )

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        try:
            path = self.resolve(parameters["file_path"])
        except WorkspaceError as exc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, str(exc))
        if not os.path.isfile(path):
            return PluginResult.fail(ErrorKind.EXECUTION_ERROR, f"File not found: {path}")

        stat = os.stat(path)
        return PluginResult.ok(
            {
                "exists": True,
                "size": stat.st_size,
                "creation_time": datetime.fromtimestamp(stat.st_ctime).isoformat(),
                "last_modified": datetime.fromtimestamp(stat.st_mtime).isoformat(),
                "extension": os.path.splitext(path)[1],
            }
        )
