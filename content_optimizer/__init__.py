"""
Content Optimizer - recommends marketing-content parameters from fitted models.

This package provides:
- Scoring: adapt fitted per-objective regression models into a scorer
- Optimize: greedy coordinate search over an enumerated parameter domain
- Recommend: per-segment recommendations and A/B variants, optionally persisted
"""

__version__ = "1.0.0"
__author__ = "Content Optimizer Team"
