"""
Base classes for plugins.

Plugins are self-contained capabilities that a model can request by
name. Each plugin declares its name, a human-readable description and
an ordered set of typed parameters; the `PluginRegistry` uses that
declaration to validate calls before dispatching them, and the schema
layer uses it to describe the plugin to LLM providers.

Every execution produces a `PluginResult`, which is either a success
carrying data or a failure carrying an `ErrorKind`, never both.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


class ErrorKind(str, Enum):
    """Why a plugin call failed."""

    NOT_FOUND = "NotFound"
    INVALID_ARGUMENT = "InvalidArgument"
    EXECUTION_ERROR = "ExecutionError"


@dataclass(frozen=True)
class PluginResult:
    """
    Uniform result of a plugin invocation.

    Use `PluginResult.ok` and `PluginResult.fail` rather than the
    constructor. `exception` keeps the originating exception (if any)
    for logging; it is never part of the wire contract.
    """

    success: bool
    data: Any = None
    message: str = ""
    error: Optional[ErrorKind] = None
    exception: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error kind.")
        if not self.success and self.error is None:
            raise ValueError("A failed result must carry an error kind.")

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "PluginResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(
        cls,
        error: ErrorKind,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> "PluginResult":
        return cls(success=False, message=message, error=error, exception=exception)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data, "message": self.message}
        return {"success": False, "error": self.error.value, "message": self.message}


class ParameterType(str, Enum):
    """
    Semantic parameter types a plugin may declare.

    Each member knows its JSON schema primitive and which runtime
    values it accepts.
    """

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    LINE_CHANGES = "line_changes"

    @property
    def json_type(self) -> str:
        if self is ParameterType.LINE_CHANGES:
            return "object"
        return self.value

    @classmethod
    def from_python(cls, tp: Any) -> "ParameterType":
        """Map a Python type to a parameter type; unknown types become STRING."""
        if not isinstance(tp, type):
            return cls.STRING
        if issubclass(tp, str):
            return cls.STRING
        # bool is an int subclass, so it has to be checked first.
        if issubclass(tp, bool):
            return cls.BOOLEAN
        if issubclass(tp, numbers.Integral):
            return cls.INTEGER
        if issubclass(tp, (float, Decimal, numbers.Real)):
            return cls.NUMBER
        if issubclass(tp, (list, tuple, set, frozenset)):
            return cls.ARRAY
        if issubclass(tp, (dict, MappingABC)):
            return cls.OBJECT
        return cls.STRING

    def accepts(self, value: Any) -> bool:
        """Whether a runtime value is compatible with this type. None always is."""
        if value is None:
            return True
        if self is ParameterType.STRING:
            return isinstance(value, str)
        if self is ParameterType.BOOLEAN:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self is ParameterType.INTEGER:
            return isinstance(value, numbers.Integral)
        if self is ParameterType.NUMBER:
            return isinstance(value, (numbers.Real, Decimal))
        if self is ParameterType.ARRAY:
            return isinstance(value, (list, tuple))
        return isinstance(value, MappingABC)


@dataclass(frozen=True)
class ParameterSpec:
    """Declaration of a single plugin parameter."""

    name: str
    type: ParameterType
    description: str
    required: bool = False
    default: Any = None

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class PluginDescriptor:
    """Immutable description of a plugin: identity plus parameter contract."""

    name: str
    description: str
    parameters: Tuple[ParameterSpec, ...] = ()

    @property
    def key(self) -> str:
        return self.name.lower()

    @property
    def required_parameters(self) -> Tuple[str, ...]:
        return tuple(p.key for p in self.parameters if p.required)

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        wanted = name.lower()
        for spec in self.parameters:
            if spec.key == wanted:
                return spec
        return None


def get_parameter(parameters: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Fetch an optional parameter, treating an explicit None as absent."""
    value = parameters.get(name)
    return default if value is None else value


class Plugin:
    """
    Base class for all plugins.

    Subclasses pass their declaration to `__init__` and implement the
    asynchronous `execute` method. `execute` receives parameters keyed by
    the declared names, already validated by the registry, with
    LINE_CHANGES values decoded into `Dict[int, LineChange]`.
    """

    def __init__(
        self,
        name: str,
        description: str,
        parameters: Sequence[ParameterSpec] = (),
    ) -> None:
        if not name:
            raise ValueError("Plugin name must not be empty.")
        seen = set()
        for spec in parameters:
            if spec.key in seen:
                raise ValueError(
                    f"Plugin '{name}' declares parameter '{spec.name}' more than once."
                )
            seen.add(spec.key)
        self.descriptor = PluginDescriptor(
            name=name,
            description=description,
            parameters=tuple(parameters),
        )

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def description(self) -> str:
        return self.descriptor.description

    @property
    def parameters(self) -> Tuple[ParameterSpec, ...]:
        return self.descriptor.parameters

    @property
    def supported_parameters(self) -> Dict[str, ParameterType]:
        return {spec.key: spec.type for spec in self.descriptor.parameters}

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        raise NotImplementedError

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Plugin":
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
