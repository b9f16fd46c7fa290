"""Models package for the plan service."""

from models.plan import (
    CreatePlanRequest,
    CreatePlanSetRequest,
    PlanExerciseInput,
    PlanExerciseSet,
    PlanExerciseSetInput,
    PlanGoal,
    PlanListResponse,
    TrainingPlan,
    TrainingPlanDetail,
    UpdatePlanRequest,
    UpdatePlanSetRequest,
)
from models.wizard import (
    Draft,
    ExerciseSetConfig,
    PlanBasics,
    SetDescriptor,
    WizardMode,
    WizardState,
)

__all__ = [
    "CreatePlanRequest",
    "CreatePlanSetRequest",
    "PlanExerciseInput",
    "PlanExerciseSet",
    "PlanExerciseSetInput",
    "PlanGoal",
    "PlanListResponse",
    "TrainingPlan",
    "TrainingPlanDetail",
    "UpdatePlanRequest",
    "UpdatePlanSetRequest",
    "Draft",
    "ExerciseSetConfig",
    "PlanBasics",
    "SetDescriptor",
    "WizardMode",
    "WizardState",
]
