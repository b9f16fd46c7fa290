"""
Database infrastructure package.
"""

from infrastructure.db.exercise_repository import SupabaseExerciseRepository
from infrastructure.db.plan_repository import SupabasePlanRepository

__all__ = [
    "SupabaseExerciseRepository",
    "SupabasePlanRepository",
]
