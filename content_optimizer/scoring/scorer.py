"""
Scoring collaborators.

A scorer predicts one objective for one configuration and reports failures as
typed ``Err`` values rather than raising.
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from ..core.domain import Configuration, OBJECTIVES
from ..core.result import Ok, Err, ErrorReason, Result

logger = logging.getLogger(__name__)


class Scorer(ABC):
    """Abstract base class for objective scorers."""

    @property
    @abstractmethod
    def objectives(self) -> Tuple[str, ...]:
        """Objectives this scorer can predict."""

    @abstractmethod
    def predict(self, configuration: Configuration, objective: str) -> Result:
        """Predict ``objective`` for ``configuration``."""


def _finite_prediction(value: Any, objective: str) -> Result:
    try:
        prediction = float(value)
    except (TypeError, ValueError):
        return Err(ErrorReason.MALFORMED_INPUT, f"Non-numeric prediction for '{objective}': {value!r}")

    if not np.isfinite(prediction):
        return Err(ErrorReason.MALFORMED_INPUT, f"Non-finite prediction for '{objective}': {prediction}")

    return Ok(prediction)


class ModelScorer(Scorer):
    """
    Scorer backed by fitted regression models, one per objective.

    Any object exposing ``predict(DataFrame)`` works, e.g. a fitted
    scikit-learn pipeline that carries its own feature encoding. The
    configuration is passed as a single-row DataFrame.
    """

    def __init__(
        self,
        models: Mapping[str, Any],
        required_fields: Optional[Sequence[str]] = None
    ):
        """
        Initialize scorer.

        Args:
            models: Mapping of objective name to fitted model
            required_fields: Fields every configuration must contain; when
                given, only these columns are passed to the models
        """
        self.models = MappingProxyType(dict(models))
        self.required_fields = tuple(required_fields or ())

    @property
    def objectives(self) -> Tuple[str, ...]:
        return tuple(self.models)

    def predict(self, configuration: Configuration, objective: str) -> Result:
        model = self.models.get(objective)
        if model is None:
            return Err(ErrorReason.NO_MODEL, f"No model fitted for '{objective}'")

        missing = [name for name in self.required_fields if name not in configuration]
        if missing:
            return Err(ErrorReason.MALFORMED_INPUT, f"Missing fields: {', '.join(missing)}")

        frame = pd.DataFrame([dict(configuration)])
        if self.required_fields:
            frame = frame[list(self.required_fields)]

        try:
            prediction = np.asarray(model.predict(frame), dtype=float).ravel()
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Model for '{objective}' rejected configuration {configuration}: {e}")
            return Err(ErrorReason.MALFORMED_INPUT, str(e))
        except Exception as e:
            logger.error(f"Error predicting '{objective}': {e}")
            return Err(ErrorReason.TRANSIENT_FAILURE, str(e))

        if prediction.size == 0:
            return Err(ErrorReason.MALFORMED_INPUT, f"Empty prediction for '{objective}'")

        return _finite_prediction(prediction[0], objective)


class CallableScorer(Scorer):
    """
    Scorer wrapping a plain ``fn(configuration, objective) -> float | None``.

    ``None`` means the objective has no model. Objectives default to the
    standard content objectives.
    """

    def __init__(
        self,
        fn: Callable[[Configuration, str], Optional[float]],
        objectives: Sequence[str] = OBJECTIVES
    ):
        self.fn = fn
        self._objectives = tuple(objectives)

    @property
    def objectives(self) -> Tuple[str, ...]:
        return self._objectives

    def predict(self, configuration: Configuration, objective: str) -> Result:
        if objective not in self._objectives:
            return Err(ErrorReason.NO_MODEL, f"Objective '{objective}' not available")

        try:
            value = self.fn(dict(configuration), objective)
        except Exception as e:
            logger.error(f"Error predicting '{objective}': {e}")
            return Err(ErrorReason.TRANSIENT_FAILURE, str(e))

        if value is None:
            return Err(ErrorReason.NO_MODEL, f"No prediction for '{objective}'")

        return _finite_prediction(value, objective)
