"""
Port interfaces (Protocols) for the plan service.

This package defines the interface contracts that the infrastructure
layer must implement. Using Protocols enables:
- Clean separation of concerns
- Easy testing with in-memory fakes
- Dependency inversion (depend on abstractions, not concretions)
"""

from application.ports.draft_storage import DraftStorage
from application.ports.exercise_repository import ExerciseRepository
from application.ports.plan_repository import PlanRepository
from application.ports.plan_submitter import PlanSubmitter

__all__ = [
    "DraftStorage",
    "ExerciseRepository",
    "PlanRepository",
    "PlanSubmitter",
]
