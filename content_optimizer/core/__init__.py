"""Core data model: configurations, the parameter domain and typed results."""

from .domain import (
    Configuration,
    ParameterDomain,
    ObjectiveWeights,
    ScoreResult,
    OBJECTIVES,
    DEFAULT_DOMAIN,
    with_value,
    validate_weights,
)
from .result import Ok, Err, ErrorReason, Result

__all__ = [
    "Configuration",
    "ParameterDomain",
    "ObjectiveWeights",
    "ScoreResult",
    "OBJECTIVES",
    "DEFAULT_DOMAIN",
    "with_value",
    "validate_weights",
    "Ok",
    "Err",
    "ErrorReason",
    "Result",
]
