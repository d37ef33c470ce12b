"""
Anthropic (Claude) dialect.

Claude lists tools unwrapped under `tools`, but names the parameter
schema `input_schema` in requests. System prompts are not messages:
they are pulled out of the message array into a top-level `system`
field, and `max_tokens` is mandatory.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from anthropic.types import MessageParam, ToolParam

from aiplugin.models.base import BaseProvider


class AnthropicProvider(BaseProvider):
    """
    AnthropicProvider shapes payloads for the Claude messages API.
    """

    def __init__(self, name: str, default_max_tokens: int = 2048) -> None:
        super().__init__(name=name)
        self.default_max_tokens = default_max_tokens

    @classmethod
    def from_config(cls, name: str, cfg: Dict[str, Any]) -> "AnthropicProvider":
        return cls(
            name=name,
            default_max_tokens=int(cfg.get("default_max_tokens", 2048)),
        )

    def split_system(self, messages: Sequence[Mapping[str, Any]]) -> Tuple[str, List[Dict[str, Any]]]:
        """Separate system prompts from the conversation turns."""
        system_parts: List[str] = []
        converted: List[Dict[str, Any]] = []
        for msg in messages:
            role = msg.get("role")
            content = msg.get("content", "")
            if role == "system":
                system_parts.append(str(content))
                continue
            turn: MessageParam = {
                "role": "assistant" if role == "assistant" else "user",
                "content": content,
            }
            converted.append(dict(turn))
        return "\n".join(system_parts), converted

    def request_tool(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        tool: ToolParam = {
            "name": schema["name"],
            "description": schema.get("description", ""),
            "input_schema": schema.get("parameters", {"type": "object", "properties": {}}),
        }
        return dict(tool)

    def build_request(
        self,
        model: str,
        messages: Sequence[Mapping[str, Any]],
        tools: Optional[Sequence[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        system_prompt, converted = self.split_system(messages)
        body: Dict[str, Any] = {
            "model": model,
            "messages": converted,
            "max_tokens": max_tokens if max_tokens is not None else self.default_max_tokens,
        }
        if system_prompt:
            body["system"] = system_prompt
        if tools:
            body[self.tools_key] = [self.request_tool(self.format_tool(t)) for t in tools]
        if temperature is not None:
            body["temperature"] = temperature
        return body
