"""Tests for the provider dialects in aiplugin.models."""

from __future__ import annotations

import pytest

from aiplugin.core.schema import build_function_schemas
from aiplugin.models.anthropic_provider import AnthropicProvider
from aiplugin.models.base import AIModel, DialectRegistry, UnsupportedDialectError
from aiplugin.models.gemini_provider import GeminiProvider
from aiplugin.models.mistral_provider import MistralProvider
from aiplugin.models.openai_provider import OpenAIProvider
from aiplugin.models.perplexity_provider import PerplexityProvider
from aiplugin.models.qwen_provider import QwenProvider

MESSAGES = [
    {"role": "system", "content": "Be brief."},
    {"role": "user", "content": "hello"},
    {"role": "assistant", "content": "hi"},
    {"role": "system", "content": "Use tools."},
    {"role": "tool", "content": "result"},
]


@pytest.fixture
def tools(echo_plugin):
    return build_function_schemas([echo_plugin])


def test_default_registry_covers_every_provider():
    dialects = DialectRegistry.default()

    assert set(dialects.providers) == set(AIModel)
    assert isinstance(dialects.resolve("openai"), OpenAIProvider)
    assert isinstance(dialects.resolve("perplexity"), PerplexityProvider)
    assert isinstance(dialects.resolve("CLAUDE"), AnthropicProvider)
    assert isinstance(dialects.resolve(AIModel.MISTRAL), MistralProvider)
    assert isinstance(dialects.resolve(" qwen "), QwenProvider)
    assert isinstance(dialects.resolve("gemini"), GeminiProvider)


def test_parse_model_rejects_unknown():
    with pytest.raises(UnsupportedDialectError, match="not implemented"):
        DialectRegistry.parse_model("llama")


# -----------------------------------------------------------------------------
# OpenAI-style requests
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("provider_cls", [OpenAIProvider, PerplexityProvider])
def test_openai_style_request(provider_cls, tools):
    body = provider_cls("p").build_request(
        "gpt-test", MESSAGES[:2], tools=tools, temperature=0.2, max_tokens=100
    )

    assert body["model"] == "gpt-test"
    assert body["messages"] == MESSAGES[:2]
    assert body["tools"] == [{"type": "function", "function": tools[0]}]
    assert body["temperature"] == 0.2
    assert body["max_tokens"] == 100


def test_optional_fields_are_omitted(tools):
    body = OpenAIProvider("openai").build_request("m", [{"role": "user", "content": "x"}])

    assert body == {"model": "m", "messages": [{"role": "user", "content": "x"}]}


def test_mistral_request_keeps_system_inline(tools):
    body = MistralProvider("mistral").build_request("mistral-small", MESSAGES[:2], tools=tools)

    assert body["messages"][0] == {"role": "system", "content": "Be brief."}
    assert body["tools"] == tools


def test_qwen_request_uses_apis(tools):
    body = QwenProvider("qwen").build_request("qwen-max", MESSAGES[1:2], tools=tools)

    assert body["apis"] == tools
    assert "tools" not in body


def test_gemini_request_uses_functions(tools):
    body = GeminiProvider("gemini").build_request("gemini-pro", MESSAGES[:2], tools=tools)

    assert body["functions"] == tools
    assert body["messages"][0] == {"role": "system", "content": "Be brief."}
    assert "tools" not in body


# -----------------------------------------------------------------------------
# Claude requests
# -----------------------------------------------------------------------------


def test_claude_extracts_system_messages(tools):
    body = AnthropicProvider("claude").build_request("claude-test", MESSAGES, tools=tools)

    assert body["system"] == "Be brief.\nUse tools."
    assert body["messages"] == [
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "hi"},
        {"role": "user", "content": "result"},
    ]


def test_claude_renames_parameters_to_input_schema(tools):
    body = AnthropicProvider("claude").build_request("claude-test", MESSAGES[1:2], tools=tools)

    (tool,) = body["tools"]
    assert tool["name"] == "Echo"
    assert tool["description"] == "Echo parameters back"
    assert tool["input_schema"] == tools[0]["parameters"]
    assert "parameters" not in tool


def test_claude_max_tokens_default_and_override():
    provider = AnthropicProvider("claude")
    messages = [{"role": "user", "content": "x"}]

    assert provider.build_request("m", messages)["max_tokens"] == 2048
    assert provider.build_request("m", messages, max_tokens=10)["max_tokens"] == 10
    assert "system" not in provider.build_request("m", messages)


def test_claude_from_config():
    provider = AnthropicProvider.from_config("claude", {"default_max_tokens": "512"})

    assert provider.default_max_tokens == 512
    assert provider.build_request("m", [])["max_tokens"] == 512


def test_claude_temperature_passthrough():
    body = AnthropicProvider("claude").build_request("m", [], temperature=0.0)

    assert body["temperature"] == 0.0
