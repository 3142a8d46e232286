"""
Dashboard form state machine.

    closed -> editing(new)                 open_new()
    closed -> editing(existing, prefilled) open_existing()
    editing -> submitting                  submit()
    submitting -> closed                   on success
    submitting -> editing                  on failure, values preserved
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from ..api.errors import APIError, FormSubmissionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FormState(str, Enum):
    CLOSED = "closed"
    EDITING = "editing"
    SUBMITTING = "submitting"


class InvalidTransitionError(RuntimeError):
    """Raised when a form operation is not allowed in the current state."""


class DashboardForm:
    """
    Create/edit form for a dashboard entity.

    Holds field values between opening and a successful submission.
    """

    def __init__(self, name: str, defaults: Optional[Dict[str, Any]] = None):
        self.name = name
        self.defaults = dict(defaults or {})
        self.state = FormState.CLOSED
        self.values: Dict[str, Any] = dict(self.defaults)
        self.target_id: Optional[Any] = None
        self.error: Optional[str] = None

    @property
    def is_new(self) -> bool:
        return self.target_id is None

    def _require(self, state: FormState, operation: str) -> None:
        if self.state != state:
            raise InvalidTransitionError(
                f"Cannot {operation} {self.name} form while {self.state.value}"
            )

    def open_new(self, values: Optional[Dict[str, Any]] = None) -> "DashboardForm":
        self._require(FormState.CLOSED, "open")
        self.values = dict(self.defaults)
        self.values.update(values or {})
        self.target_id = None
        self.error = None
        self.state = FormState.EDITING
        return self

    def open_existing(self, target_id: Any, values: Dict[str, Any]) -> "DashboardForm":
        self._require(FormState.CLOSED, "open")
        self.values = dict(values)
        self.target_id = target_id
        self.error = None
        self.state = FormState.EDITING
        return self

    def update(self, **fields: Any) -> "DashboardForm":
        self._require(FormState.EDITING, "edit")
        self.values.update(fields)
        return self

    def close(self) -> None:
        """Discard the form and its values."""
        self.state = FormState.CLOSED
        self.values = dict(self.defaults)
        self.target_id = None
        self.error = None

    def submit(self, action: Callable[[Dict[str, Any]], T]) -> T:
        """
        Run the submission action with the current values.

        On success the form closes. On failure it returns to editing with
        the error recorded and values untouched; API errors are re-raised
        as FormSubmissionError carrying the preserved values.
        """
        self._require(FormState.EDITING, "submit")
        self.state = FormState.SUBMITTING
        self.error = None

        try:
            result = action(dict(self.values))
        except APIError as e:
            self.state = FormState.EDITING
            self.error = e.message
            logger.warning(f"{self.name} form submission failed: {e.message}")
            raise FormSubmissionError(e, form=self.snapshot())
        except Exception as e:
            self.state = FormState.EDITING
            self.error = str(e)
            raise

        self.close()
        return result

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly copy of the values."""
        return {key: _jsonable(value) for key, value in self.values.items()}


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
