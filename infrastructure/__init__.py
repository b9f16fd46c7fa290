"""
Infrastructure layer package for the plans service.

This package contains concrete implementations of the port interfaces.
"""

from infrastructure.db import SupabaseExerciseRepository, SupabasePlanRepository
from infrastructure.draft_storage import FileDraftStorage
from infrastructure.plan_client import PlanApiClient, PlanSubmissionError

__all__ = [
    "SupabaseExerciseRepository",
    "SupabasePlanRepository",
    "FileDraftStorage",
    "PlanApiClient",
    "PlanSubmissionError",
]
