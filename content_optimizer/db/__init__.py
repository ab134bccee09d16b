"""Database models and session management."""

from .db import configure, get_engine, get_session, init_db
from .models import Base, OptimizationRun, OptimizationTrial

__all__ = [
    "configure",
    "get_engine",
    "get_session",
    "init_db",
    "Base",
    "OptimizationRun",
    "OptimizationTrial"
]
