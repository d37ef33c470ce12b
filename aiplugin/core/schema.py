"""
Schema derivation.

Turns plugin declarations into the JSON schema documents that LLM
providers expect for tool calling. Each plugin first becomes a
provider-agnostic function schema:

    {
        "name": ...,
        "description": ...,
        "parameters": {"type": "object", "properties": {...}, "required": [...]}
    }

and the selected provider dialect then wraps the list of function
schemas in its own envelope (see `aiplugin.models`).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from aiplugin.core.line_change import LineChangeType
from aiplugin.models.base import AIModel, DialectRegistry
from aiplugin.plugins.base import ParameterSpec, ParameterType, Plugin, PluginDescriptor

logger = logging.getLogger(__name__)

PluginLike = Union[Plugin, PluginDescriptor]


def json_schema_type(ptype: Any) -> str:
    """
    Map a parameter type to its JSON schema primitive name.

    Accepts a `ParameterType` or a plain Python type; anything that is not
    recognised maps to "string".
    """
    if not isinstance(ptype, ParameterType):
        ptype = ParameterType.from_python(ptype)
    return ptype.json_type


def line_changes_schema(description: str) -> Dict[str, Any]:
    """Object schema for a line-number-keyed map of line changes."""
    return {
        "type": "object",
        "description": description or "Partial content with line changes",
        "additionalProperties": {
            "type": "object",
            "properties": {
                "changeType": {
                    "type": "string",
                    "enum": [member.value for member in LineChangeType],
                    "description": "The type of change made to this line",
                },
                "content": {
                    "type": "string",
                    "description": "The content of the line",
                },
                "originalContent": {
                    "type": "string",
                    "description": "For modified lines, the original content before changes",
                },
            },
            "required": ["changeType", "content"],
        },
    }


def parameter_schema(spec: ParameterSpec) -> Dict[str, Any]:
    if spec.type is ParameterType.LINE_CHANGES:
        return line_changes_schema(spec.description)
    schema: Dict[str, Any] = {
        "type": json_schema_type(spec.type),
        "description": spec.description,
    }
    if spec.default is not None:
        schema["default"] = spec.default
    return schema


def build_function_schema(plugin: PluginLike) -> Dict[str, Any]:
    """Build the provider-agnostic function schema for one plugin."""
    descriptor = plugin.descriptor if isinstance(plugin, Plugin) else plugin
    properties: Dict[str, Any] = {}
    required: List[str] = []
    for spec in descriptor.parameters:
        properties[spec.key] = parameter_schema(spec)
        if spec.required:
            required.append(spec.key)
    return {
        "name": descriptor.name,
        "description": descriptor.description,
        "parameters": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }


def build_function_schemas(plugins: Iterable[PluginLike]) -> List[Dict[str, Any]]:
    return [build_function_schema(plugin) for plugin in plugins]


def derive_schema(
    plugins: Iterable[PluginLike],
    provider: Union[AIModel, str],
    dialects: Optional[DialectRegistry] = None,
) -> Dict[str, Any]:
    """
    Derive the tool schema document for a provider.

    Raises:
        UnsupportedDialectError: If the provider is not a known dialect.
    """
    dialects = dialects or DialectRegistry.default()
    dialect = dialects.resolve(provider)
    schemas = build_function_schemas(plugins)
    logger.debug("Derived %d function schemas for %s", len(schemas), dialect.name)
    return dialect.build_tools_document(schemas)


def generate_schema(
    plugins: Iterable[PluginLike],
    provider: Union[AIModel, str],
    dialects: Optional[DialectRegistry] = None,
) -> str:
    """Same as `derive_schema`, serialized as indented JSON."""
    return json.dumps(derive_schema(plugins, provider, dialects), indent=2)
