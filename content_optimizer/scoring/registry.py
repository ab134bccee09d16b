"""
Per-segment model registry.

Maps an audience segment key to an immutable handle over that segment's
fitted objective models. The registry is built once and handed to whoever
needs a scorer; it is never mutated afterwards.
"""

from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Any, Iterator, Mapping, Tuple, Union
import json
import logging

from ..core.result import Ok, Err, ErrorReason, Result
from .linear import LinearObjectiveModel
from .scorer import ModelScorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentModels:
    """Fitted objective models for one audience segment."""
    segment: str
    models: Mapping[str, Any]
    required_fields: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "models", MappingProxyType(dict(self.models)))
        object.__setattr__(self, "required_fields", tuple(self.required_fields))

    @property
    def objectives(self) -> Tuple[str, ...]:
        return tuple(self.models)

    def scorer(self) -> ModelScorer:
        """Build a scorer over this segment's models."""
        return ModelScorer(self.models, required_fields=self.required_fields)


class ModelRegistry(MappingABC):
    """Read-only mapping of segment key to ``SegmentModels``."""

    def __init__(self, segments: Mapping[str, SegmentModels]):
        for key, models in segments.items():
            if models.segment != key:
                raise ValueError(f"Segment key '{key}' does not match models for '{models.segment}'")
        self._segments = MappingProxyType(dict(segments))

    def __getitem__(self, segment: str) -> SegmentModels:
        return self._segments[segment]

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self._segments)

    def lookup(self, segment: str) -> Result:
        """Return ``Ok(SegmentModels)`` or ``Err(NO_MODEL)`` for an unknown segment."""
        models = self._segments.get(segment)
        if models is None:
            return Err(ErrorReason.NO_MODEL, f"No models registered for segment '{segment}'")
        return Ok(models)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelRegistry":
        """
        Build a registry of linear models from a coefficient table.

        Expected shape::

            {
                "gen_z": {
                    "required_fields": ["cta_type", "num_hashtags"],
                    "objectives": {
                        "engagement_rate": {
                            "intercept": 0.02,
                            "coefficients": {"cta_type=shop_now": 0.01}
                        }
                    }
                }
            }

        ``required_fields`` defaults to every field the models read.
        """
        segments = {}

        for segment, entry in data.items():
            objectives = entry.get("objectives")
            if not isinstance(objectives, Mapping):
                raise ValueError(f"Segment '{segment}' has no 'objectives' table")

            models = {
                objective: LinearObjectiveModel.from_dict(model_data)
                for objective, model_data in objectives.items()
            }

            required = entry.get("required_fields")
            if required is None:
                required = []
                for model in models.values():
                    for name in model.feature_names:
                        if name not in required:
                            required.append(name)

            segments[segment] = SegmentModels(
                segment=segment,
                models=models,
                required_fields=tuple(required)
            )

        logger.info(f"Loaded models for {len(segments)} segment(s)")
        return cls(segments)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "ModelRegistry":
        """Load a coefficient table from a JSON file."""
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize linear models back to the coefficient-table shape."""
        data = {}
        for segment, models in self._segments.items():
            objectives = {}
            for objective, model in models.models.items():
                if not isinstance(model, LinearObjectiveModel):
                    raise TypeError(f"Model for '{segment}/{objective}' is not a coefficient table")
                objectives[objective] = model.to_dict()
            data[segment] = {
                "required_fields": list(models.required_fields),
                "objectives": objectives
            }
        return data
