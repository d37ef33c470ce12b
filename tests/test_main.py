"""Tests for the command line entry point in main.py."""

from __future__ import annotations

import json

import pytest

import main
from aiplugin.models.anthropic_provider import AnthropicProvider
from aiplugin.models.base import AIModel, UnsupportedDialectError
from aiplugin.plugins.answers import AnswerStore


@pytest.fixture
def config_path(tmp_path):
    workspace = tmp_path / "ws"
    workspace.mkdir()
    (workspace / "a.txt").write_text("alpha\nbeta\n", encoding="utf-8")
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging:\n"
        "  level: WARNING\n"
        "providers:\n"
        "  claude:\n"
        "    enabled: true\n"
        "    default_max_tokens: 100\n"
        "  qwen:\n"
        "    enabled: true\n"
        "  openai:\n"
        "    enabled: false\n"
        "plugins:\n"
        "  read_file:\n"
        "    enabled: true\n"
        f"    root_dir: {json.dumps(str(workspace))}\n"
        "  string_manipulator:\n"
        "    enabled: true\n"
        "  present_answer:\n"
        "    enabled: true\n"
        "  retrieve_answer:\n"
        "    enabled: true\n"
        "  web_search:\n"
        "    enabled: false\n",
        encoding="utf-8",
    )
    return str(path)


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------


def test_build_plugin_registry_registers_enabled_plugins():
    store = AnswerStore()
    cfg = {
        "plugins": {
            "system_info": {"enabled": True},
            "url_validator": {"enabled": False},
            "present_answer": {"enabled": True},
            "retrieve_answer": {"enabled": True},
        }
    }

    registry = main.build_plugin_registry(cfg, store=store)

    assert sorted(d.key for d in registry.list_capabilities()) == [
        "present_answer",
        "retrieve_answer",
        "system_info",
    ]
    assert registry.get("present_answer").store is store
    assert registry.get("retrieve_answer").store is store


def test_build_dialect_registry_defaults_to_all():
    dialects = main.build_dialect_registry({"providers": {}})

    assert set(dialects.providers) == set(AIModel)


def test_build_dialect_registry_honours_enabled_flags():
    dialects = main.build_dialect_registry(
        {"providers": {"claude": {"enabled": True, "default_max_tokens": 64}, "qwen": {"enabled": False}}}
    )

    claude = dialects.resolve("claude")
    assert isinstance(claude, AnthropicProvider)
    assert claude.default_max_tokens == 64
    with pytest.raises(UnsupportedDialectError):
        dialects.resolve("qwen")


def test_parse_messages():
    assert main.parse_messages(["system:be brief", "hello", "tool:x"]) == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hello"},
        {"role": "user", "content": "tool:x"},
    ]


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


def test_list_command(config_path, capsys):
    assert main.main(["--config", config_path, "list"]) == 0

    out = capsys.readouterr().out
    assert "read_file: Reads a file" in out
    assert "  - file_path (string): Full path to the file to read [required]" in out
    assert "web_search" not in out


def test_schema_command(config_path, capsys):
    assert main.main(["--config", config_path, "schema", "--provider", "qwen"]) == 0

    document = json.loads(capsys.readouterr().out)
    names = [api["name"] for api in document["apis"]]
    assert names == ["read_file", "string_manipulator", "present_answer", "retrieve_answer"]


def test_schema_command_rejects_disabled_provider(config_path, capsys):
    assert main.main(["--config", config_path, "schema", "--provider", "openai"]) == 2

    assert "Error:" in capsys.readouterr().err


def test_call_command(config_path, capsys):
    code = main.main(
        ["--config", config_path, "call", "READ_FILE", "--params", '{"file_path": "a.txt"}']
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert payload["data"]["content"] == {"1": "alpha", "2": "beta"}


def test_call_command_failure(config_path, capsys):
    code = main.main(["--config", config_path, "call", "string_manipulator", "--params", "{}"])

    assert code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "success": False,
        "error": "InvalidArgument",
        "message": "Missing required parameters: input, operation",
    }


def test_request_command(config_path, capsys):
    code = main.main(
        [
            "--config",
            config_path,
            "request",
            "--provider",
            "claude",
            "--model",
            "claude-test",
            "--message",
            "system:be brief",
            "--message",
            "hi",
        ]
    )

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["system"] == "be brief"
    assert body["messages"] == [{"role": "user", "content": "hi"}]
    assert body["max_tokens"] == 100
    assert {tool["name"] for tool in body["tools"]} >= {"read_file", "present_answer"}
    assert all("input_schema" in tool for tool in body["tools"])
