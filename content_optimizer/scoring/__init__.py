"""Scoring collaborators and the per-segment model registry."""

from .scorer import Scorer, ModelScorer, CallableScorer
from .linear import LinearObjectiveModel
from .registry import SegmentModels, ModelRegistry

__all__ = [
    "Scorer",
    "ModelScorer",
    "CallableScorer",
    "LinearObjectiveModel",
    "SegmentModels",
    "ModelRegistry",
]
