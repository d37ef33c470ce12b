"""
Plugin registry.

The registry owns the mapping from plugin name to plugin instance. It
validates each call's parameters against the plugin's declared contract
and dispatches to the plugin, converting every failure into a
`PluginResult` so that nothing raises past `invoke`.

The registry is built once at startup and is read-only afterwards, so
concurrent `invoke` calls need no locking. Registering while calls are
in flight is not supported.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from aiplugin.core.line_change import parse_line_changes
from aiplugin.plugins.base import (
    ErrorKind,
    ParameterType,
    Plugin,
    PluginDescriptor,
    PluginResult,
)

logger = logging.getLogger(__name__)


class ParameterValidationError(ValueError):
    """Raised when call parameters do not match a plugin's declaration."""


def validate_parameters(plugin: Plugin, parameters: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate call parameters and normalize them for dispatch.

    Checks run in a fixed order and the first failing category aborts:
    missing required parameters (all of them reported together), then
    unsupported parameters, then type mismatches.

    Returns:
        The parameters keyed by their declared names, with LINE_CHANGES
        values decoded into `Dict[int, LineChange]`.

    Raises:
        ParameterValidationError: On the first violation found.
    """
    if not isinstance(parameters, Mapping):
        raise ParameterValidationError(
            f"Parameters must be an object, got {type(parameters).__name__}"
        )

    supplied: Dict[str, str] = {}
    for key in parameters:
        if not isinstance(key, str):
            raise ParameterValidationError(f"Unsupported parameter: {key!r}")
        lowered = key.lower()
        if lowered in supplied:
            raise ParameterValidationError(
                f"Duplicate parameter: '{supplied[lowered]}' and '{key}'"
            )
        supplied[lowered] = key

    descriptor = plugin.descriptor
    missing = [name for name in descriptor.required_parameters if name not in supplied]
    if missing:
        raise ParameterValidationError(
            f"Missing required parameters: {', '.join(missing)}"
        )

    supported = plugin.supported_parameters
    for key in parameters:
        if key.lower() not in supported:
            raise ParameterValidationError(f"Unsupported parameter: {key}")

    normalized: Dict[str, Any] = {}
    for key, value in parameters.items():
        expected = supported[key.lower()]
        if not expected.accepts(value):
            raise ParameterValidationError(
                f"Invalid type for parameter '{key}'. "
                f"Expected {expected.json_type}, got {type(value).__name__}"
            )
        spec = descriptor.parameter(key)
        name = spec.name if spec is not None else key
        if expected is ParameterType.LINE_CHANGES and value is not None:
            try:
                value = parse_line_changes(value)
            except ValueError as exc:
                raise ParameterValidationError(
                    f"Invalid value for parameter '{key}': {exc}"
                ) from exc
        normalized[name] = value
    return normalized


class PluginRegistry:
    """
    Registers plugins by case-insensitive name and dispatches calls to them.

    Notes:
        - ``register`` overwrites any existing plugin with the same name
          (last registration wins).
        - ``invoke`` never raises; every outcome is a ``PluginResult``.
    """

    def __init__(self) -> None:
        self._plugins: Dict[str, Plugin] = {}

    def register(self, plugin: Plugin) -> None:
        key = plugin.name.lower()
        if key in self._plugins:
            logger.warning("Replacing previously registered plugin: %s", key)
        logger.info("Registering plugin: %s", key)
        self._plugins[key] = plugin

    def unregister(self, name: str) -> bool:
        return self._plugins.pop(name.lower(), None) is not None

    def get(self, name: str) -> Optional[Plugin]:
        return self._plugins.get(name.lower())

    def list_plugins(self) -> List[Plugin]:
        return list(self._plugins.values())

    def list_capabilities(self) -> List[PluginDescriptor]:
        return [plugin.descriptor for plugin in self._plugins.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    async def invoke(
        self,
        name: str,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> PluginResult:
        """
        Validate and execute a plugin call.

        Args:
            name: Plugin name, matched case-insensitively.
            parameters: Untyped parameter bag, usually decoded from JSON.

        Returns:
            NOT_FOUND for an unknown plugin, INVALID_ARGUMENT for a
            validation failure, EXECUTION_ERROR if the plugin raised, and
            otherwise whatever result the plugin produced.
        """
        plugin = self.get(name)
        if plugin is None:
            logger.warning("Plugin not found: %s", name)
            return PluginResult.fail(ErrorKind.NOT_FOUND, f"Plugin '{name}' not found.")

        try:
            validated = validate_parameters(plugin, {} if parameters is None else parameters)
        except ParameterValidationError as exc:
            logger.info("Rejected call to %s: %s", plugin.name, exc)
            return PluginResult.fail(ErrorKind.INVALID_ARGUMENT, str(exc), exception=exc)

        logger.debug("Executing plugin: %s", plugin.name)
        try:
            result = await plugin.execute(validated)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error executing plugin: %s", plugin.name)
            return PluginResult.fail(
                ErrorKind.EXECUTION_ERROR,
                f"Plugin execution failed: {exc}",
                exception=exc,
            )

        if not isinstance(result, PluginResult):
            logger.error("Plugin %s returned %s instead of a PluginResult", plugin.name, type(result).__name__)
            return PluginResult.fail(
                ErrorKind.EXECUTION_ERROR,
                f"Plugin '{plugin.name}' returned an invalid result.",
            )
        return result
