"""
Small utility plugins: clock, random numbers, string operations,
system information and URL parsing.
"""

from __future__ import annotations

import os
import platform
import random
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from aiplugin.plugins.base import (
    ErrorKind,
    ParameterSpec,
    ParameterType,
    Plugin,
    PluginResult,
    get_parameter,
)

DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class GetDateTimePlugin(Plugin):
    def __init__(self) -> None:
        super().__init__(
            name="get_date_time",
            description="Gets the current date and time",
            parameters=[
                ParameterSpec("format", ParameterType.STRING, "strftime format string for the datetime"),
                ParameterSpec("use_utc", ParameterType.BOOLEAN, "Whether to use UTC time", required=True),
            ],
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "GetDateTimePlugin":
        return cls()

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        fmt = get_parameter(parameters, "format", DEFAULT_DATETIME_FORMAT)
        use_utc = bool(get_parameter(parameters, "use_utc", True))
        now = datetime.now(timezone.utc) if use_utc else datetime.now().astimezone()
        zone = "UTC" if use_utc else (now.tzname() or "local")
        text = now.strftime(fmt)
        return PluginResult.ok(text, f"Current DateTime: {text} {zone}")


class GenerateRandomNumberPlugin(Plugin):
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        super().__init__(
            name="generate_random_number",
            description="Generates a random number within a specified range",
            parameters=[
                ParameterSpec("min", ParameterType.INTEGER, "The minimum value (inclusive)", required=True),
                ParameterSpec("max", ParameterType.INTEGER, "The maximum value (exclusive)", required=True),
            ],
        )
        self.rng = rng or random.Random()

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "GenerateRandomNumberPlugin":
        seed = cfg.get("seed")
        return cls(rng=random.Random(seed) if seed is not None else None)

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        low = int(parameters["min"])
        high = int(parameters["max"])
        if low >= high:
            return PluginResult.fail(
                ErrorKind.INVALID_ARGUMENT,
                f"Min value ({low}) must be less than max value ({high})",
            )
        number = self.rng.randrange(low, high)
        return PluginResult.ok(number, f"Random number between {low} and {high}: {number}")


class StringManipulatorPlugin(Plugin):
    OPERATIONS = {
        "reverse": lambda s: s[::-1],
        "uppercase": str.upper,
        "lowercase": str.lower,
        "trim": str.strip,
    }

    def __init__(self) -> None:
        super().__init__(
            name="string_manipulator",
            description="Performs various string operations",
            parameters=[
                ParameterSpec("input", ParameterType.STRING, "Input text to process", required=True),
                ParameterSpec(
                    "operation",
                    ParameterType.STRING,
                    "Operation to perform (reverse, uppercase, lowercase, trim)",
                    required=True,
                ),
            ],
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "StringManipulatorPlugin":
        return cls()

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        operation = str(parameters["operation"]).lower()
        func = self.OPERATIONS.get(operation)
        if func is None:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, f"Unknown operation: {operation}")
        return PluginResult.ok(func(str(parameters["input"])))


class SystemInfoPlugin(Plugin):
    def __init__(self) -> None:
        super().__init__(name="system_info", description="Gets current system information")

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "SystemInfoPlugin":
        return cls()

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        return PluginResult.ok(
            {
                "os_version": platform.platform(),
                "processor_count": os.cpu_count(),
                "machine_name": platform.node(),
                "python_version": platform.python_version(),
                "is_64bit": sys.maxsize > 2**32,
            }
        )


class UrlValidatorPlugin(Plugin):
    DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21}

    def __init__(self) -> None:
        super().__init__(
            name="url_validator",
            description="Validates and parses URLs",
            parameters=[
                ParameterSpec("url", ParameterType.STRING, "URL to validate", required=True),
            ],
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "UrlValidatorPlugin":
        return cls()

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        url = str(parameters["url"])
        try:
            parsed = urlparse(url)
            port = parsed.port
        except ValueError as exc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, f"Invalid URL: {exc}")
        if not parsed.scheme or not parsed.netloc:
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, f"Invalid URL: {url}")
        return PluginResult.ok(
            {
                "is_valid": True,
                "scheme": parsed.scheme,
                "host": parsed.hostname,
                "port": port if port is not None else self.DEFAULT_PORTS.get(parsed.scheme, -1),
                "path": parsed.path or "/",
                "query": f"?{parsed.query}" if parsed.query else "",
            }
        )
