"""
SQLAlchemy database models for optimization runs.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, ForeignKey, Boolean
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime
import uuid

Base = declarative_base()


def generate_uuid():
    """Generate UUID string."""
    return str(uuid.uuid4())


class OptimizationRun(Base):
    """Optimization runs."""
    __tablename__ = 'optimization_runs'

    id = Column(String, primary_key=True, default=generate_uuid)
    segment = Column(String, nullable=False)

    base_configuration = Column(JSON, nullable=False)
    dimensions = Column(JSON, nullable=False)
    weights = Column(JSON, nullable=False)

    best_configuration = Column(JSON)
    best_scores = Column(JSON)
    best_score = Column(Float)
    baseline_score = Column(Float)
    skipped_dimensions = Column(JSON)

    started_at = Column(DateTime, default=datetime.utcnow)
    finished_at = Column(DateTime)

    # Relationships
    trials = relationship("OptimizationTrial", back_populates="optimization_run")


class OptimizationTrial(Base):
    """Individual candidate evaluations."""
    __tablename__ = 'optimization_trials'

    id = Column(String, primary_key=True, default=generate_uuid)
    optimization_id = Column(String, ForeignKey('optimization_runs.id'))

    trial_number = Column(Integer, nullable=False)
    dimension = Column(String)  # None for the baseline
    candidate_value = Column(JSON)
    configuration = Column(JSON, nullable=False)
    score = Column(Float, nullable=False)
    accepted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    optimization_run = relationship("OptimizationRun", back_populates="trials")
