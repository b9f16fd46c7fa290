"""
Domain models for training plans.

These models describe the plan composition wire contract and the rows
stored in the training_plans, plan_exercises and plan_exercise_sets tables.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_EXERCISES_PER_PLAN,
    MAX_PLAN_NAME_LENGTH,
    MAX_REPETITIONS,
    MAX_SETS_PER_EXERCISE,
    MAX_WEIGHT,
    MIN_REPETITIONS,
    MIN_WEIGHT,
)


class PlanGoal(str, Enum):
    """Optional training goal chosen in the first wizard step."""

    STRENGTH = "strength"
    MUSCLE_MASS = "muscle_mass"
    ENDURANCE = "endurance"
    GENERAL_FITNESS = "general_fitness"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# Composition command (request models)
# =============================================================================


class PlanExerciseSetInput(BaseModel):
    """A single prescribed set inside a composition command."""

    repetitions: int = Field(ge=MIN_REPETITIONS, le=MAX_REPETITIONS)
    weight: float = Field(ge=MIN_WEIGHT, le=MAX_WEIGHT)
    set_order: Optional[int] = Field(
        None, ge=0, description="Explicit position; defaults to the array index"
    )


class PlanExerciseInput(BaseModel):
    """An exercise with its ordered sets inside a composition command."""

    model_config = ConfigDict(populate_by_name=True)

    exercise_id: str = Field(alias="exerciseId", min_length=1)
    sets: List[PlanExerciseSetInput] = Field(
        default_factory=list, max_length=MAX_SETS_PER_EXERCISE
    )


class CreatePlanRequest(BaseModel):
    """
    Plan composition command (POST /plans).

    This is the one stable contract between the wizard and the
    composition service.
    """

    name: str = Field(min_length=1, max_length=MAX_PLAN_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    exercises: List[PlanExerciseInput] = Field(
        min_length=1, max_length=MAX_EXERCISES_PER_PLAN
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v: Any) -> Any:
        return _blank_to_none(v) if isinstance(v, str) or v is None else v


class UpdatePlanRequest(BaseModel):
    """
    Request model for PUT /plans/{plan_id}.

    Supports either a full replace of exercises with sets (``exercises``)
    or a membership-only replace that keeps existing sets (``exerciseIds``).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=MAX_PLAN_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    exercise_ids: Optional[List[str]] = Field(
        None,
        alias="exerciseIds",
        min_length=1,
        max_length=MAX_EXERCISES_PER_PLAN,
    )
    exercises: Optional[List[PlanExerciseInput]] = Field(
        None, min_length=1, max_length=MAX_EXERCISES_PER_PLAN
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v: Any) -> Any:
        return _blank_to_none(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_fields(self) -> "UpdatePlanRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        if self.exercise_ids is not None and self.exercises is not None:
            raise ValueError(
                "Cannot provide both exerciseIds and exercises - use one or the other"
            )
        return self


class CreatePlanSetRequest(BaseModel):
    """Request model for POST /plans/{plan_id}/sets."""

    model_config = ConfigDict(populate_by_name=True)

    exercise_id: str = Field(alias="exerciseId", min_length=1)
    repetitions: int = Field(ge=MIN_REPETITIONS, le=MAX_REPETITIONS)
    weight: float = Field(ge=MIN_WEIGHT, le=MAX_WEIGHT)
    set_order: Optional[int] = Field(None, ge=0)


class UpdatePlanSetRequest(BaseModel):
    """Request model for PUT /plans/{plan_id}/sets/{set_id}."""

    repetitions: Optional[int] = Field(None, ge=MIN_REPETITIONS, le=MAX_REPETITIONS)
    weight: Optional[float] = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    set_order: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_fields(self) -> "UpdatePlanSetRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


# =============================================================================
# Persisted entities (response models)
# =============================================================================


class TrainingPlan(BaseModel):
    """A training plan header."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class PlanExerciseSet(BaseModel):
    """A prescribed set stored for one exercise of a plan."""

    id: str
    training_plan_id: str
    exercise_id: str
    set_order: int = Field(ge=0)
    repetitions: int
    weight: float
    created_at: Optional[datetime] = None


class TrainingPlanDetail(TrainingPlan):
    """A plan with its exercises (in membership order) and sets."""

    exercises: List[Dict[str, Any]] = []
    sets: List[PlanExerciseSet] = []


class PlanListResponse(BaseModel):
    """Response model for listing a user's active plans."""

    items: List[TrainingPlan]
    total: int
