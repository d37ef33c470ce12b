"""
Base types and registry for provider dialects.

A dialect knows how one LLM provider expects to receive a list of
callable tools and a chat request that includes them. Dialects never
talk to the network; they only shape payloads. The `DialectRegistry`
maps provider enumerators to dialect instances.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


class AIModel(str, Enum):
    """Provider enumerators with a known tool-calling dialect."""

    OPENAI = "openai"
    PERPLEXITY = "perplexity"
    CLAUDE = "claude"
    MISTRAL = "mistral"
    QWEN = "qwen"
    GEMINI = "gemini"


class ProviderError(Exception):
    """Raised when a provider dialect cannot shape a request."""


class UnsupportedDialectError(ProviderError):
    """Raised when schema derivation is asked for an unknown provider."""


class BaseProvider:
    """
    Base class for provider dialects.

    The defaults describe the simplest dialect: function schemas are
    listed unwrapped under `tools`, and system messages stay inline in
    the message array. Subclasses override `tools_key`, `format_tool`
    or `build_request` where their provider diverges.
    """

    tools_key = "tools"

    def __init__(self, name: str) -> None:
        self.name = name

    def format_tool(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        return copy.deepcopy(schema)

    def render_tools(self, schemas: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.format_tool(schema) for schema in schemas]

    def build_tools_document(self, schemas: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return {self.tools_key: self.render_tools(schemas)}

    def convert_messages(self, messages: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {"role": msg.get("role", "user"), "content": msg.get("content", "")}
            for msg in messages
        ]

    def build_request(
        self,
        model: str,
        messages: Sequence[Mapping[str, Any]],
        tools: Optional[Sequence[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Build a complete chat request body.

        Args:
            model: Provider model identifier.
            messages: Role/content message dicts in OpenAI chat format.
            tools: Provider-agnostic function schemas (as produced by
                `aiplugin.core.schema.build_function_schemas`).
            temperature: Passed through unchanged when given.
            max_tokens: Passed through unchanged when given.
        """
        body: Dict[str, Any] = {
            "model": model,
            "messages": self.convert_messages(messages),
        }
        if tools:
            body[self.tools_key] = self.render_tools(tools)
        if temperature is not None:
            body["temperature"] = temperature
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        return body

    @classmethod
    def from_config(cls, name: str, cfg: Dict[str, Any]) -> "BaseProvider":
        return cls(name=name)


class DialectRegistry:
    """
    DialectRegistry maps provider enumerators to dialect instances.
    """

    def __init__(self) -> None:
        self.providers: Dict[AIModel, BaseProvider] = {}

    def register_provider(self, model: AIModel, provider: BaseProvider) -> None:
        self.providers[model] = provider

    @staticmethod
    def parse_model(model: Union[AIModel, str]) -> AIModel:
        if isinstance(model, AIModel):
            return model
        try:
            return AIModel(str(model).strip().lower())
        except ValueError:
            raise UnsupportedDialectError(
                f"Schema format for '{model}' is not implemented."
            ) from None

    def resolve(self, model: Union[AIModel, str]) -> BaseProvider:
        """
        Resolve the dialect for a provider.

        Raises:
            UnsupportedDialectError: If the provider is unknown or has no
                registered dialect.
        """
        key = self.parse_model(model)
        provider = self.providers.get(key)
        if provider is None:
            raise UnsupportedDialectError(f"Provider '{key.value}' is not registered.")
        return provider

    @classmethod
    def default(cls) -> "DialectRegistry":
        """A registry with every built-in dialect registered."""
        # Imported here because the provider modules import this one.
        from aiplugin.models.anthropic_provider import AnthropicProvider
        from aiplugin.models.gemini_provider import GeminiProvider
        from aiplugin.models.mistral_provider import MistralProvider
        from aiplugin.models.openai_provider import OpenAIProvider
        from aiplugin.models.perplexity_provider import PerplexityProvider
        from aiplugin.models.qwen_provider import QwenProvider

        registry = cls()
        registry.register_provider(AIModel.OPENAI, OpenAIProvider("openai"))
        registry.register_provider(AIModel.PERPLEXITY, PerplexityProvider("perplexity"))
        registry.register_provider(AIModel.CLAUDE, AnthropicProvider("claude"))
        registry.register_provider(AIModel.MISTRAL, MistralProvider("mistral"))
        registry.register_provider(AIModel.QWEN, QwenProvider("qwen"))
        registry.register_provider(AIModel.GEMINI, GeminiProvider("gemini"))
        return registry
