"""
Services package for the plans service.

Contains the business logic for:
- Set list editing for a single exercise
- Exercise set configuration across a plan
- The three-step plan wizard
- Draft recovery and autosave
- Plan composition (the only writer of plan rows)
"""

from services.draft_recovery import (
    DraftAutosaver,
    DraftRecovery,
    draft_to_wizard_state,
    wizard_state_to_draft,
)
from services.plan_composition import (
    CreationStage,
    PlanCompositionService,
    PlanCreationSaga,
)
from services.plan_wizard import PlanWizard
from services.set_configurator import ExerciseSetConfigurator, ExerciseWithSets
from services.set_list import (
    BulkAddRequest,
    SetListEngine,
    create_default_set,
    renumber_sets,
    validate_sets,
)

__all__ = [
    # Draft recovery
    "DraftAutosaver",
    "DraftRecovery",
    "draft_to_wizard_state",
    "wizard_state_to_draft",
    # Plan composition
    "CreationStage",
    "PlanCompositionService",
    "PlanCreationSaga",
    # Wizard
    "PlanWizard",
    # Set configuration
    "BulkAddRequest",
    "ExerciseSetConfigurator",
    "ExerciseWithSets",
    "SetListEngine",
    "create_default_set",
    "renumber_sets",
    "validate_sets",
]
