"""
Typed prediction results.

Scorers return ``Ok(value)`` or ``Err(reason)`` instead of raising or printing,
so callers can tell a missing model apart from a failed call or a malformed
configuration.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ErrorReason(str, Enum):
    """Why a prediction could not be produced."""
    NO_MODEL = "no_model"
    TRANSIENT_FAILURE = "transient_failure"
    MALFORMED_INPUT = "malformed_input"


@dataclass(frozen=True)
class Ok:
    """Successful prediction."""
    value: Any

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap_or(self, default: Any = None) -> Any:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed or unavailable prediction."""
    reason: ErrorReason
    detail: str = ""

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        """True for real failures; a missing model is only an absence."""
        return self.reason is not ErrorReason.NO_MODEL

    def unwrap_or(self, default: Any = None) -> Any:
        return default

    def __str__(self) -> str:
        if self.detail:
            return f"{self.reason.value}: {self.detail}"
        return self.reason.value


Result = Union[Ok, Err]
