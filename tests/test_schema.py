"""Tests for core/schema.py."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from aiplugin.core.schema import (
    build_function_schema,
    derive_schema,
    generate_schema,
    json_schema_type,
)
from aiplugin.models.base import AIModel, DialectRegistry, UnsupportedDialectError
from aiplugin.models.qwen_provider import QwenProvider
from aiplugin.plugins.base import ParameterSpec, ParameterType, PluginDescriptor


@pytest.fixture
def descriptor() -> PluginDescriptor:
    return PluginDescriptor(
        name="ApplyPatch",
        description="Apply line changes to a file",
        parameters=(
            ParameterSpec("File_Path", ParameterType.STRING, "Target file", required=True),
            ParameterSpec("changes", ParameterType.LINE_CHANGES, "", required=True),
            ParameterSpec("retries", ParameterType.INTEGER, "Retry count", default=3),
            ParameterSpec("dry_run", ParameterType.BOOLEAN, "Only preview"),
        ),
    )


# -----------------------------------------------------------------------------
# Function schema
# -----------------------------------------------------------------------------


def test_function_schema_shape(descriptor):
    schema = build_function_schema(descriptor)

    assert schema["name"] == "ApplyPatch"
    assert schema["description"] == "Apply line changes to a file"
    params = schema["parameters"]
    assert params["type"] == "object"
    assert list(params["properties"]) == ["file_path", "changes", "retries", "dry_run"]
    assert params["required"] == ["file_path", "changes"]
    assert params["properties"]["file_path"] == {"type": "string", "description": "Target file"}
    assert params["properties"]["retries"] == {
        "type": "integer",
        "description": "Retry count",
        "default": 3,
    }
    assert "default" not in params["properties"]["dry_run"]


def test_line_changes_parameter_schema(descriptor):
    changes = build_function_schema(descriptor)["parameters"]["properties"]["changes"]

    assert changes["type"] == "object"
    assert changes["description"] == "Partial content with line changes"
    item = changes["additionalProperties"]
    assert item["required"] == ["changeType", "content"]
    assert item["properties"]["changeType"]["enum"] == ["Added", "Modified", "Deleted", "Context"]
    assert set(item["properties"]) == {"changeType", "content", "originalContent"}


def test_plugin_without_parameters():
    schema = build_function_schema(PluginDescriptor(name="ping", description="Ping"))

    assert schema["parameters"] == {"type": "object", "properties": {}, "required": []}


def test_plugin_instances_are_accepted(echo_plugin):
    schema = build_function_schema(echo_plugin)

    assert schema["name"] == "Echo"
    assert schema["parameters"]["required"] == ["text", "times"]
    assert schema["parameters"]["properties"]["ratio"]["default"] == 0.5


@pytest.mark.parametrize(
    "ptype, expected",
    [
        (ParameterType.STRING, "string"),
        (ParameterType.LINE_CHANGES, "object"),
        (str, "string"),
        (bool, "boolean"),
        (int, "integer"),
        (float, "number"),
        (Decimal, "number"),
        (list, "array"),
        (tuple, "array"),
        (dict, "object"),
        (bytes, "string"),
        (None, "string"),
    ],
)
def test_json_schema_type(ptype, expected):
    assert json_schema_type(ptype) == expected


# -----------------------------------------------------------------------------
# Dialect documents
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("provider", [AIModel.OPENAI, "perplexity", "OpenAI"])
def test_function_envelope_dialects(descriptor, provider):
    document = derive_schema([descriptor], provider)

    assert list(document) == ["tools"]
    (tool,) = document["tools"]
    assert tool["type"] == "function"
    assert tool["function"] == build_function_schema(descriptor)


@pytest.mark.parametrize("provider", [AIModel.CLAUDE, AIModel.MISTRAL])
def test_unwrapped_tools_dialects(descriptor, provider):
    document = derive_schema([descriptor], provider)

    assert document == {"tools": [build_function_schema(descriptor)]}


def test_qwen_uses_apis_key(descriptor):
    document = derive_schema([descriptor], AIModel.QWEN)

    assert document == {"apis": [build_function_schema(descriptor)]}


@pytest.mark.parametrize("provider", [AIModel.GEMINI, "Gemini"])
def test_gemini_uses_functions_key(descriptor, provider):
    document = derive_schema([descriptor], provider)

    assert document == {"functions": [build_function_schema(descriptor)]}
    assert document["functions"][0]["parameters"]["required"] == ["file_path", "changes"]


def test_empty_plugin_list(descriptor):
    assert derive_schema([], "claude") == {"tools": []}


@pytest.mark.parametrize("provider", ["llama", "", "unknown"])
def test_unknown_provider_is_rejected(descriptor, provider):
    with pytest.raises(UnsupportedDialectError):
        derive_schema([descriptor], provider)


def test_unregistered_dialect_is_rejected(descriptor):
    dialects = DialectRegistry()
    dialects.register_provider(AIModel.QWEN, QwenProvider("qwen"))

    assert "apis" in derive_schema([descriptor], "qwen", dialects)
    with pytest.raises(UnsupportedDialectError, match="not registered"):
        derive_schema([descriptor], "openai", dialects)


def test_generate_schema_is_indented_json(descriptor):
    text = generate_schema([descriptor], AIModel.MISTRAL)

    assert text.startswith("{\n  ")
    assert json.loads(text) == derive_schema([descriptor], AIModel.MISTRAL)


def test_documents_do_not_share_state(descriptor):
    first = derive_schema([descriptor], AIModel.OPENAI)
    first["tools"][0]["function"]["name"] = "changed"

    second = derive_schema([descriptor], AIModel.OPENAI)

    assert second["tools"][0]["function"]["name"] == "ApplyPatch"
