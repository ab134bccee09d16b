"""
Coefficient-table regression model.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Mapping

import numpy as np
import pandas as pd


def _level(value: Any) -> str:
    """String form of a categorical value; integral floats match their int (18.0 -> '18')."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class LinearObjectiveModel:
    """
    Fitted linear model for a single objective.

    Coefficient keys are either a numeric field name (``"num_hashtags"``),
    multiplied by the field value, or a one-hot term ``"field=value"``
    (``"cta_type=shop_now"``), added when the field equals the value. Values
    are compared by string form, with integral floats read as integers.
    """
    intercept: float = 0.0
    coefficients: Mapping[str, float] = field(default_factory=dict)

    @property
    def feature_names(self) -> List[str]:
        """Configuration fields the model reads, in first-seen order."""
        names = []
        for term in self.coefficients:
            name = term.split("=", 1)[0]
            if name not in names:
                names.append(name)
        return names

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        """
        Predict the objective for each row.

        Raises:
            KeyError: If a feature column is missing
            ValueError: If a numeric feature is not numeric
        """
        prediction = np.full(len(frame), float(self.intercept))

        for term, weight in self.coefficients.items():
            if "=" in term:
                name, level = term.split("=", 1)
                indicator = (frame[name].map(_level) == level).to_numpy(dtype=float)
                prediction += float(weight) * indicator
            else:
                values = pd.to_numeric(frame[term], errors="raise").to_numpy(dtype=float)
                prediction += float(weight) * values

        return prediction

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LinearObjectiveModel":
        """Build from ``{"intercept": x, "coefficients": {...}}``."""
        coefficients = {str(k): float(v) for k, v in (data.get("coefficients") or {}).items()}
        return cls(intercept=float(data.get("intercept", 0.0)), coefficients=coefficients)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intercept": self.intercept,
            "coefficients": dict(self.coefficients)
        }
