"""
High-level orchestrator for content recommendations.

This module coordinates:
- Model lookup per audience segment
- Parameter optimization and A/B variant generation
- Database persistence of optimization runs
"""

import pandas as pd
import numpy as np
from datetime import datetime
from typing import Dict, Any, Callable, ContextManager, List, Mapping, Optional, Sequence
import logging
import json

from .core.domain import ParameterDomain, DEFAULT_DOMAIN
from .optimize.optimizer import ParameterOptimizer, OptimizationResult
from .scoring.registry import ModelRegistry, SegmentModels
from .db.db import get_session
from .db.models import (
    OptimizationRun as OptimizationRunModel,
    OptimizationTrial as OptimizationTrialModel,
)
from .config import settings

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    High-level orchestrator for recommendation workflows.

    Responsibilities:
    - Resolve the fitted models for a segment
    - Run optimizations and persist runs/trials
    - Score A/B variants along one dimension
    """

    def __init__(
        self,
        registry: ModelRegistry,
        domain: Optional[ParameterDomain] = None,
        session_factory: Optional[Callable[[], ContextManager]] = None
    ):
        """
        Initialize orchestrator.

        Args:
            registry: Fitted models per segment
            domain: Candidate values per parameter (default: DEFAULT_DOMAIN)
            session_factory: Context manager factory yielding a DB session
        """
        self.registry = registry
        self.domain = domain if domain is not None else DEFAULT_DOMAIN
        self.session_factory = session_factory or get_session

    def _to_jsonable(self, obj):
        if isinstance(obj, dict):
            return {str(k): self._to_jsonable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._to_jsonable(v) for v in obj]
        elif isinstance(obj, (np.floating, np.integer, np.bool_)):
            return obj.item()
        elif isinstance(obj, (datetime,)):
            return obj.isoformat()
        else:
            return obj

    def to_safe_json(self, data):
        return json.loads(json.dumps(self._to_jsonable(data)))

    def _segment_models(self, segment: str) -> SegmentModels:
        lookup = self.registry.lookup(segment)
        if not lookup.is_ok:
            raise LookupError(str(lookup))
        return lookup.value

    def _weights(self, weights: Optional[Mapping[str, float]]) -> Dict[str, float]:
        if weights is None:
            return dict(settings.default_weights)
        return dict(weights)

    # ---------------------------
    # Recommendations
    # ---------------------------
    def recommend(
        self,
        segment: str,
        base_configuration: Mapping[str, Any],
        dimensions: Sequence[str],
        weights: Optional[Mapping[str, float]] = None,
        save_to_db: bool = False,
    ) -> Dict[str, Any]:
        """
        Recommend content parameters for a segment.

        Returns:
            A dictionary summarizing the optimization result.

        Raises:
            LookupError: If no models are registered for the segment
            InvalidBaseConfiguration: If the base configuration cannot be scored
        """
        dimensions = [dimensions] if isinstance(dimensions, str) else list(dimensions)
        logger.info(f"Running recommendation: segment={segment}, dimensions={dimensions}")

        models = self._segment_models(segment)
        weights = self._weights(weights)
        started_at = datetime.utcnow()

        optimizer = ParameterOptimizer(models.scorer())
        result = optimizer.optimize(base_configuration, dimensions, weights, self.domain)

        summary = {
            "segment": segment,
            "best_configuration": result.best_configuration,
            "best_scores": result.best_scores,
            "best_score": result.best_score,
            "baseline_score": result.baseline_score,
            "improvement": result.improvement,
            "skipped_dimensions": result.skipped_dimensions,
            "run_id": None,
        }

        if save_to_db:
            try:
                summary["run_id"] = self._save_optimization_to_db(
                    segment=segment,
                    base_configuration=base_configuration,
                    dimensions=dimensions,
                    weights=weights,
                    result=result,
                    started_at=started_at,
                )
            except Exception as e:
                logger.exception(f"Failed to persist optimization run: {e}")

        return summary

    def variants(
        self,
        segment: str,
        base_configuration: Mapping[str, Any],
        dimension: str,
        count: Optional[int] = None,
        weights: Optional[Mapping[str, float]] = None,
    ) -> pd.DataFrame:
        """
        Score A/B-test variants of a configuration along one dimension.

        Returns:
            DataFrame with one row per variant (base first): the varied value,
            the prediction per objective, the weighted score and the full
            configuration.

        Raises:
            LookupError: If no models are registered for the segment
            ValueError: If ``dimension`` clashes with another column name
        """
        models = self._segment_models(segment)
        weights = self._weights(weights)
        count = settings.variant_count if count is None else count

        reserved = {"variant", "score", "configuration", *models.objectives}
        if dimension in reserved:
            raise ValueError(f"Dimension '{dimension}' collides with a variants column name")

        optimizer = ParameterOptimizer(models.scorer())
        configurations = optimizer.generate_variants(base_configuration, dimension, self.domain, count)

        rows: List[Dict[str, Any]] = []
        for i, configuration in enumerate(configurations):
            row = {"variant": i, dimension: configuration.get(dimension)}
            row.update(optimizer.score_result(configuration))
            row["score"] = optimizer.score(configuration, weights)
            row["configuration"] = configuration
            rows.append(row)

        logger.info(f"Generated {len(rows) - 1} variant(s) of '{dimension}' for segment {segment}")
        return pd.DataFrame(rows)

    # ---------------------------
    # Database persistence helpers
    # ---------------------------
    def _save_optimization_to_db(
        self,
        segment: str,
        base_configuration: Mapping[str, Any],
        dimensions: Sequence[str],
        weights: Mapping[str, float],
        result: OptimizationResult,
        started_at: Optional[datetime] = None,
    ) -> str:
        """Persist optimization run and trials. Returns the run id."""
        logger.info("Persisting optimization run to DB...")

        with self.session_factory() as session:
            run_row = OptimizationRunModel(
                segment=segment,
                base_configuration=self.to_safe_json(dict(base_configuration)),
                dimensions=list(dimensions),
                weights=self.to_safe_json(dict(weights)),
                best_configuration=self.to_safe_json(result.best_configuration),
                best_scores=self.to_safe_json(result.best_scores),
                best_score=float(result.best_score),
                baseline_score=float(result.baseline_score),
                skipped_dimensions=list(result.skipped_dimensions),
                started_at=started_at or datetime.utcnow(),
                finished_at=datetime.utcnow(),
            )
            session.add(run_row)
            session.flush()

            records = result.trials.to_dict("records")
            for record in records:
                session.add(OptimizationTrialModel(
                    optimization_id=run_row.id,
                    trial_number=int(record["trial"]),
                    dimension=record["dimension"],
                    candidate_value=self.to_safe_json(record["value"]),
                    configuration=self.to_safe_json(record["configuration"]),
                    score=float(record["score"]),
                    accepted=bool(record["accepted"]),
                ))

            session.flush()
            run_id = run_row.id

        logger.info(f"Optimization run persisted: id={run_id}, trials={len(records)}")
        return run_id
