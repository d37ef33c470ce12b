from __future__ import annotations

from typing import Any, Dict, Mapping

import pytest

from aiplugin.core.registry import PluginRegistry
from aiplugin.plugins.answers import AnswerStore
from aiplugin.plugins.base import (
    ParameterSpec,
    ParameterType,
    Plugin,
    PluginResult,
)


class EchoPlugin(Plugin):
    """Test plugin that returns the parameters it received."""

    def __init__(self, name: str = "Echo") -> None:
        super().__init__(
            name=name,
            description="Echo parameters back",
            parameters=[
                ParameterSpec("text", ParameterType.STRING, "Text to echo", required=True),
                ParameterSpec("times", ParameterType.INTEGER, "Repeat count", required=True),
                ParameterSpec("ratio", ParameterType.NUMBER, "A ratio", default=0.5),
                ParameterSpec("loud", ParameterType.BOOLEAN, "Shout"),
                ParameterSpec("tags", ParameterType.ARRAY, "Tags"),
                ParameterSpec("meta", ParameterType.OBJECT, "Metadata"),
                ParameterSpec("changes", ParameterType.LINE_CHANGES, "Line changes"),
            ],
        )
        self.calls = []

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        self.calls.append(dict(parameters))
        return PluginResult.ok(dict(parameters), "echoed")


class FailingPlugin(Plugin):
    def __init__(self) -> None:
        super().__init__(name="boom", description="Always raises")

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        raise RuntimeError("kaboom")


@pytest.fixture
def echo_plugin() -> EchoPlugin:
    return EchoPlugin()


@pytest.fixture
def registry(echo_plugin: EchoPlugin) -> PluginRegistry:
    reg = PluginRegistry()
    reg.register(echo_plugin)
    reg.register(FailingPlugin())
    return reg


@pytest.fixture
def answer_store() -> AnswerStore:
    return AnswerStore()


@pytest.fixture
def valid_echo_params() -> Dict[str, Any]:
    return {"text": "hi", "times": 2}
