"""
Tool-call routing.

The router is the bridge between a model's tool call (a name and an
arguments payload, often a JSON string) and the plugin registry. It
decodes the arguments once and delegates execution to the registry.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from aiplugin.core.registry import PluginRegistry
from aiplugin.plugins.base import ErrorKind, PluginResult

Arguments = Union[str, Mapping[str, Any], None]


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding Markdown code fence (``` or ```json), if any."""
    text = raw.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()
    if lines and lines[0].lstrip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


class ToolCallRouter:
    """
    ToolCallRouter dispatches model tool calls to registered plugins.
    """

    def __init__(self, registry: PluginRegistry) -> None:
        self.registry = registry

    @staticmethod
    def parse_arguments(raw: Arguments) -> Dict[str, Any]:
        """
        Decode a tool call's arguments into a parameter dict.

        Raises:
            ValueError: If the payload is not valid JSON or not an object.
        """
        if raw is None:
            return {}
        if isinstance(raw, Mapping):
            return dict(raw)
        text = strip_code_fences(raw)
        if not text:
            return {}
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Tool arguments are not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError(
                f"Tool arguments must be a JSON object, got {type(parsed).__name__}."
            )
        return parsed

    async def dispatch(self, name: str, arguments: Arguments = None) -> PluginResult:
        try:
            parameters = self.parse_arguments(arguments)
        except ValueError as exc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, str(exc), exception=exc)
        return await self.registry.invoke(name, parameters)

    async def dispatch_many(
        self, calls: Sequence[Tuple[str, Arguments]]
    ) -> List[PluginResult]:
        """Run several tool calls concurrently; results keep the call order."""
        return list(
            await asyncio.gather(*(self.dispatch(name, args) for name, args in calls))
        )
