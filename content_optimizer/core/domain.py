"""
Parameter domain and configuration helpers.
"""

from types import MappingProxyType
from typing import Dict, Any, Mapping, Optional, Sequence

import numpy as np


Configuration = Dict[str, Any]
ParameterDomain = Mapping[str, Sequence[Any]]
ObjectiveWeights = Mapping[str, float]
ScoreResult = Dict[str, Optional[float]]


OBJECTIVES = ("engagement_rate", "click_through_rate", "conversion_rate")


# Legal candidate values per content parameter, in evaluation order.
DEFAULT_DOMAIN: ParameterDomain = MappingProxyType({
    "content_type": ("image", "video", "carousel", "text"),
    "cta_type": ("learn_more", "shop_now", "sign_up", "follow"),
    "num_hashtags": (0, 1, 2, 3, 4, 5, 6),
    "post_hour": (8, 10, 12, 14, 16, 18, 20),
    "caption_length": ("short", "medium", "long"),
    "tone": ("informative", "playful", "urgent", "inspirational"),
})


def with_value(configuration: Mapping[str, Any], dimension: str, value: Any) -> Configuration:
    """Return a copy of ``configuration`` with ``dimension`` set to ``value``."""
    candidate = dict(configuration)
    candidate[dimension] = value
    return candidate


def validate_weights(weights: Optional[Mapping[str, float]]) -> Dict[str, float]:
    """
    Validate objective weights.

    Weights are not normalized and need not sum to 1.

    Raises:
        ValueError: If a weight is negative, NaN, infinite or not a number
    """
    validated = {}

    for objective, weight in (weights or {}).items():
        try:
            value = float(weight)
        except (TypeError, ValueError):
            raise ValueError(f"Weight for '{objective}' is not a number: {weight!r}")

        if not np.isfinite(value) or value < 0:
            raise ValueError(f"Weight for '{objective}' must be a finite non-negative number, got {value}")

        validated[objective] = value

    return validated
