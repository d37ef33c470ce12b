"""
OpenAI dialect.

OpenAI's Chat Completions API expects each tool wrapped in a
`{"type": "function", "function": {...}}` envelope under `tools`.
System messages stay inline in the message array. Tool payloads are
built as the official SDK's request parameter types.
"""

import copy
from typing import Any, Dict

from openai.types.shared_params import FunctionDefinition

from aiplugin.models.base import BaseProvider


class OpenAIProvider(BaseProvider):
    """
    OpenAIProvider renders tools in the Chat Completions function format.
    """

    def format_tool(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        function: FunctionDefinition = {
            "name": schema["name"],
            "description": schema.get("description", ""),
            "parameters": copy.deepcopy(
                schema.get("parameters", {"type": "object", "properties": {}})
            ),
        }
        return {"type": "function", "function": dict(function)}
