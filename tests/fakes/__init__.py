"""
Fake implementations for testing.

This package provides in-memory fake implementations of the port
interfaces for fast, isolated testing without database or network access.
"""

from tests.fakes.draft_storage import FakeDraftStorage
from tests.fakes.exercise_repository import FakeExerciseRepository
from tests.fakes.plan_repository import FakePlanRepository
from tests.fakes.plan_submitter import FakePlanSubmitter

__all__ = [
    "FakeDraftStorage",
    "FakeExerciseRepository",
    "FakePlanRepository",
    "FakePlanSubmitter",
]
