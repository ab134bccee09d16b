"""Content parameter optimization."""

from .optimizer import (
    ParameterOptimizer,
    OptimizationResult,
    InvalidBaseConfiguration,
    generate_variants,
)

__all__ = [
    "ParameterOptimizer",
    "OptimizationResult",
    "InvalidBaseConfiguration",
    "generate_variants",
]
