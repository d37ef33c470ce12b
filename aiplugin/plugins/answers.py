"""
Answer plugins.

`present_answer` lets a model hand back a structured final answer
(message, confidence, optional file content or line changes, citations)
and records it in an `AnswerStore`. `retrieve_answer` looks a stored
answer up again by id. Both plugins receive the same store instance
explicitly; there is no module-level state.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from aiplugin.core.line_change import line_changes_to_dict
from aiplugin.plugins.base import (
    ErrorKind,
    ParameterSpec,
    ParameterType,
    Plugin,
    PluginResult,
    get_parameter,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class AnswerStore:
    """
    Thread-safe in-memory answer storage.

    Lives for the lifetime of the process; nothing is persisted.
    """

    def __init__(self) -> None:
        self._answers: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def store(self, answer_id: str, answer: Any) -> bool:
        """Insert if absent. Returns False when the id is already taken."""
        with self._lock:
            if answer_id in self._answers:
                return False
            self._answers[answer_id] = answer
            return True

    def get(self, answer_id: str, default: Any = None) -> Any:
        with self._lock:
            return self._answers.get(answer_id, default)

    def update(self, answer_id: str, answer: Any, expected: Any = _MISSING) -> bool:
        """
        Replace an existing answer.

        With `expected`, the replacement only happens if the current value
        is still `expected` (compare-and-swap). Returns False if the id is
        unknown or the comparison fails.
        """
        with self._lock:
            if answer_id not in self._answers:
                return False
            if expected is not _MISSING and self._answers[answer_id] is not expected:
                return False
            self._answers[answer_id] = answer
            return True

    def remove(self, answer_id: str) -> bool:
        with self._lock:
            return self._answers.pop(answer_id, _MISSING) is not _MISSING

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._answers)

    def clear(self) -> None:
        with self._lock:
            self._answers.clear()

    def __contains__(self, answer_id: object) -> bool:
        with self._lock:
            return answer_id in self._answers

    def __len__(self) -> int:
        with self._lock:
            return len(self._answers)


class PresentAnswerPlugin(Plugin):
    """
    Build a structured answer record and store it.
    """

    def __init__(self, store: AnswerStore) -> None:
        super().__init__(
            name="present_answer",
            description="Returns a formatted answer with metadata and confidence score",
            parameters=[
                ParameterSpec("message", ParameterType.STRING, "The answer message to present to the user", required=True),
                ParameterSpec(
                    "probability",
                    ParameterType.NUMBER,
                    "The probability/confidence score (0.0-1.0) that the answer is correct",
                    default=1.0,
                ),
                ParameterSpec(
                    "file_type",
                    ParameterType.STRING,
                    "The file type if working with a specific file (e.g., 'csharp', 'python', 'json')",
                ),
                ParameterSpec("entire_content", ParameterType.STRING, "The entire content of the file if applicable"),
                ParameterSpec(
                    "partial_content",
                    ParameterType.LINE_CHANGES,
                    "Partial content with line changes. Keys are line numbers, values describe what "
                    "changed for each line. Use changeType (Added/Modified/Deleted/Context), content, "
                    "and optionally originalContent for modifications.",
                ),
                ParameterSpec("citations", ParameterType.ARRAY, "List of citation URLs that support the answer"),
                ParameterSpec(
                    "summary",
                    ParameterType.STRING,
                    "Condensed summary of the conversation for the AI's reference in subsequent calls",
                ),
            ],
        )
        self.store = store

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], store: Optional[AnswerStore] = None) -> "PresentAnswerPlugin":
        return cls(store=store or AnswerStore())

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        probability = float(get_parameter(parameters, "probability", 1.0))
        if not 0.0 <= probability <= 1.0:
            return PluginResult.fail(
                ErrorKind.INVALID_ARGUMENT,
                "Probability must be between 0.0 and 1.0",
            )

        file_info: Dict[str, Any] = {}
        file_type = parameters.get("file_type")
        if file_type is not None:
            file_info["type"] = str(file_type)
            entire = parameters.get("entire_content")
            if entire is not None:
                file_info["entire_content"] = str(entire)
            partial = parameters.get("partial_content")
            if partial:
                file_info["partial_content"] = line_changes_to_dict(partial)

        citations = [str(c) for c in get_parameter(parameters, "citations", [])]

        answer_id = str(uuid.uuid4())
        answer = {
            "id": answer_id,
            "message": str(parameters["message"]),
            "probability": probability,
            "file": file_info or None,
            "citations": citations or None,
            "summary": parameters.get("summary"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if not self.store.store(answer_id, answer):
            return PluginResult.fail(ErrorKind.EXECUTION_ERROR, f"Answer id collision: {answer_id}")
        logger.debug("Stored answer %s", answer_id)
        return PluginResult.ok(answer, f"Answer stored with ID: {answer_id}")


class RetrieveAnswerPlugin(Plugin):
    """
    Look up a previously presented answer by id.
    """

    def __init__(self, store: AnswerStore) -> None:
        super().__init__(
            name="retrieve_answer",
            description="Retrieves a previously stored AI answer by its ID",
            parameters=[
                ParameterSpec("answer_id", ParameterType.STRING, "The unique ID of the answer to retrieve", required=True),
            ],
        )
        self.store = store

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], store: Optional[AnswerStore] = None) -> "RetrieveAnswerPlugin":
        return cls(store=store or AnswerStore())

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        answer_id = str(parameters["answer_id"])
        answer = self.store.get(answer_id)
        if answer is None:
            return PluginResult.fail(ErrorKind.NOT_FOUND, f"No answer found with ID: {answer_id}")
        return PluginResult.ok(answer, f"Successfully retrieved answer with ID: {answer_id}")
