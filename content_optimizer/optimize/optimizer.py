"""
Content parameter optimization by greedy coordinate search.
"""

import pandas as pd
from typing import Dict, Any, List, Mapping, Optional, Sequence
from dataclasses import dataclass, field
import logging

from ..core.domain import (
    Configuration,
    ParameterDomain,
    ObjectiveWeights,
    ScoreResult,
    DEFAULT_DOMAIN,
    with_value,
    validate_weights,
)
from ..core.result import Err, ErrorReason, Result
from ..scoring.scorer import Scorer

logger = logging.getLogger(__name__)


class InvalidBaseConfiguration(ValueError):
    """Raised when the base configuration cannot be scored."""

    def __init__(self, configuration: Configuration, errors: Mapping[str, Err]):
        self.configuration = dict(configuration)
        self.errors = dict(errors)
        details = "; ".join(f"{objective}: {error}" for objective, error in self.errors.items())
        super().__init__(f"Base configuration cannot be scored ({details})")


@dataclass
class OptimizationResult:
    """
    Result of parameter optimization.

    Unpacks as ``best_configuration, best_scores, best_score``.
    """
    best_configuration: Configuration
    best_scores: ScoreResult
    best_score: float
    baseline_score: float
    trials: pd.DataFrame
    skipped_dimensions: List[str] = field(default_factory=list)

    def __iter__(self):
        return iter((self.best_configuration, self.best_scores, self.best_score))

    @property
    def improvement(self) -> float:
        return self.best_score - self.baseline_score

    def top_n(self, n: int = 5) -> pd.DataFrame:
        """Return the N best-scoring candidates, earliest first on ties."""
        return self.trials.sort_values("score", ascending=False, kind="mergesort").head(n)


def generate_variants(
    base_configuration: Mapping[str, Any],
    dimension: str,
    domain: ParameterDomain = DEFAULT_DOMAIN,
    count: int = 3
) -> List[Configuration]:
    """
    Build A/B-test variants of a configuration along one dimension.

    Args:
        base_configuration: Configuration to vary
        dimension: Parameter to vary
        domain: Candidate values per parameter
        count: Maximum number of variants besides the base

    Returns:
        The base configuration followed by up to ``count`` variants, using
        domain values other than the base's current value, in domain order.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    variants = [dict(base_configuration)]

    if dimension not in domain:
        return variants

    current = base_configuration.get(dimension)

    for value in domain[dimension]:
        if len(variants) > count:
            break
        if value == current:
            continue
        variants.append(with_value(base_configuration, dimension, value))

    return variants


class ParameterOptimizer:
    """
    Weighted multi-objective search over content parameters.

    The search is greedy coordinate ascent: each dimension is swept once,
    in the order requested, and its best value is frozen before the next
    dimension starts. The result is a local optimum along single-dimension
    moves from the base, not the optimum of the joint grid.
    """

    def __init__(self, scorer: Scorer):
        """
        Initialize optimizer.

        Args:
            scorer: Collaborator predicting each objective for a configuration
        """
        self.scorer = scorer

    def _predict(self, configuration: Configuration, objectives: Sequence[str]) -> Dict[str, Result]:
        available = set(self.scorer.objectives)
        predictions = {}

        for objective in objectives:
            if objective not in available:
                continue
            try:
                predictions[objective] = self.scorer.predict(configuration, objective)
            except Exception as e:
                logger.error(f"Scorer failed on '{objective}': {e}")
                predictions[objective] = Err(ErrorReason.TRANSIENT_FAILURE, str(e))

        return predictions

    @staticmethod
    def _weighted_sum(predictions: Mapping[str, Result], weights: Mapping[str, float]) -> float:
        total = 0.0
        for objective, weight in weights.items():
            prediction = predictions.get(objective)
            if prediction is None:
                continue
            value = prediction.unwrap_or(None)
            if value is not None:
                total += weight * value
        return total

    def _score(self, configuration: Configuration, weights: Dict[str, float]) -> float:
        predictions = self._predict(configuration, list(weights))

        for objective, prediction in predictions.items():
            if isinstance(prediction, Err) and prediction.is_failure:
                logger.debug(f"Treating '{objective}' as unscored for {configuration}: {prediction}")

        return self._weighted_sum(predictions, weights)

    def score(self, configuration: Mapping[str, Any], weights: ObjectiveWeights) -> float:
        """
        Weighted sum of predicted objectives.

        Objectives the scorer cannot predict, or whose prediction fails,
        contribute zero.

        Args:
            configuration: Configuration to score
            weights: Non-negative weight per objective

        Returns:
            Weighted score (0.0 for empty weights)
        """
        weights = validate_weights(weights)
        if not weights:
            return 0.0
        return self._score(dict(configuration), weights)

    def score_result(
        self,
        configuration: Mapping[str, Any],
        objectives: Optional[Sequence[str]] = None
    ) -> ScoreResult:
        """
        Predicted value per objective, ``None`` where unavailable.

        Args:
            configuration: Configuration to score
            objectives: Objectives to report (default: all the scorer offers)
        """
        if objectives is None:
            objectives = self.scorer.objectives

        predictions = self._predict(dict(configuration), list(objectives))

        return {
            objective: predictions[objective].unwrap_or(None) if objective in predictions else None
            for objective in objectives
        }

    def optimize(
        self,
        base_configuration: Mapping[str, Any],
        dimensions_to_vary: Sequence[str],
        weights: ObjectiveWeights,
        domain: ParameterDomain = DEFAULT_DOMAIN
    ) -> OptimizationResult:
        """
        Run greedy coordinate search from a base configuration.

        Args:
            base_configuration: Starting configuration; never modified
            dimensions_to_vary: Parameters to sweep, in order. Names absent
                from ``domain`` are skipped.
            weights: Non-negative weight per objective
            domain: Candidate values per parameter

        Returns:
            OptimizationResult with the best configuration found

        Raises:
            InvalidBaseConfiguration: If the base configuration fails to score
        """
        weights = validate_weights(weights)
        if isinstance(dimensions_to_vary, str):
            dimensions_to_vary = [dimensions_to_vary]
        dimensions_to_vary = list(dimensions_to_vary)

        best = dict(base_configuration)
        predictions = self._predict(best, list(weights))

        failures = {
            objective: prediction
            for objective, prediction in predictions.items()
            if isinstance(prediction, Err) and prediction.is_failure
        }
        if failures:
            raise InvalidBaseConfiguration(best, failures)

        best_score = self._weighted_sum(predictions, weights)
        baseline_score = best_score

        logger.info(f"Starting optimization over {dimensions_to_vary}, baseline score: {baseline_score:.4f}")

        trials_data = [{
            'trial': 0,
            'dimension': None,
            'value': None,
            'score': baseline_score,
            'accepted': True,
            'configuration': dict(best)
        }]
        skipped = []

        for dimension in dimensions_to_vary:
            if dimension not in domain:
                logger.info(f"Dimension '{dimension}' not in domain, skipping")
                skipped.append(dimension)
                continue

            for value in domain[dimension]:
                candidate = with_value(best, dimension, value)
                score = self._score(candidate, weights)

                # Strict improvement only: ties keep the earlier candidate
                accepted = score > best_score

                trials_data.append({
                    'trial': len(trials_data),
                    'dimension': dimension,
                    'value': value,
                    'score': score,
                    'accepted': accepted,
                    'configuration': candidate
                })

                if accepted:
                    best = candidate
                    best_score = score

            logger.debug(f"{dimension} -> {best.get(dimension)!r} (score {best_score:.4f})")

        # object dtype stops int candidates upcasting to float beside the baseline None
        trials = pd.DataFrame(trials_data, dtype=object).astype({'trial': int, 'score': float, 'accepted': bool})

        best_scores = self.score_result(best, list(dict.fromkeys([*self.scorer.objectives, *weights])))

        logger.info(f"Best configuration: {best}")
        logger.info(f"Best score: {best_score:.4f} (baseline {baseline_score:.4f})")

        return OptimizationResult(
            best_configuration=dict(best),
            best_scores=best_scores,
            best_score=best_score,
            baseline_score=baseline_score,
            trials=trials,
            skipped_dimensions=skipped
        )

    def generate_variants(
        self,
        base_configuration: Mapping[str, Any],
        dimension: str,
        domain: ParameterDomain = DEFAULT_DOMAIN,
        count: int = 3
    ) -> List[Configuration]:
        """See :func:`generate_variants`."""
        return generate_variants(base_configuration, dimension, domain, count)
