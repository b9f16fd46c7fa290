"""
Plan wizard state machine.

PlanWizard drives the three-step training plan wizard:
1. Basics - plan name, description and goal
2. Exercises - ordered exercise selection
3. Sets - per-exercise set configuration

Navigation is strictly linear and gated on the current step's validity.
Mutations are synchronous and never raise; submission is the only async
operation and goes through a PlanSubmitter transport.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Optional

from application.ports import PlanSubmitter
from core.constants import MAX_PLANS_PER_USER, MAX_PLAN_NAME_LENGTH, MIN_PLAN_NAME_LENGTH
from infrastructure.plan_client import PlanSubmissionError
from models.wizard import (
    FIRST_STEP,
    LAST_STEP,
    Draft,
    ExerciseSetConfig,
    PlanBasics,
    SetDescriptor,
    WizardMode,
    WizardState,
)
from services.draft_recovery import DraftRecovery, draft_to_wizard_state
from services.set_list import validate_sets

logger = logging.getLogger(__name__)

StateListener = Callable[[WizardState], None]

INCOMPLETE_PLAN_MESSAGE = "Please complete all required fields"


def _plan_limit_message(limit: int) -> str:
    return (
        f"You have reached the limit of {limit} training plans. "
        "Delete a plan before creating a new one."
    )


def _state_from_plan_detail(plan: Dict[str, Any], initial_step: int) -> WizardState:
    """
    Build an edit-mode state from a plan detail response.

    Sets are grouped by exercise in the order they were returned and keep
    their persisted IDs.
    """
    sets_by_exercise: Dict[str, List[SetDescriptor]] = {}
    for row in plan.get("sets") or []:
        sets_by_exercise.setdefault(row["exercise_id"], []).append(
            SetDescriptor(
                repetitions=row["repetitions"],
                weight=row["weight"],
                order=row["set_order"],
                id=row.get("id"),
            )
        )

    selected_ids = [exercise["id"] for exercise in plan.get("exercises") or []]

    return WizardState(
        mode=WizardMode.EDIT,
        current_step=initial_step,
        basics=PlanBasics(
            name=plan["name"],
            description=plan.get("description") or None,
        ),
        selected_exercise_ids=selected_ids,
        sets_by_exercise={
            exercise_id: sets
            for exercise_id, sets in sets_by_exercise.items()
            if exercise_id in selected_ids
        },
    )


class PlanWizard:
    """
    Three-step create/edit wizard for training plans.

    The mode is fixed at construction. In edit mode the wizard is hydrated
    from the plan detail and never writes drafts.
    """

    def __init__(
        self,
        mode: WizardMode = WizardMode.CREATE,
        submitter: Optional[PlanSubmitter] = None,
        draft_recovery: Optional[DraftRecovery] = None,
        plan_id: Optional[str] = None,
        initial_data: Optional[Dict[str, Any]] = None,
        initial_step: int = FIRST_STEP,
        max_plans: int = MAX_PLANS_PER_USER,
    ):
        """
        Initialize the wizard.

        Args:
            mode: Create or edit
            submitter: Transport used by ``submit``
            draft_recovery: Draft store cleared on success and cancel
            plan_id: ID of the plan being edited (required in edit mode)
            initial_data: Plan detail used to hydrate edit mode
            initial_step: Step to start on
            max_plans: Plan limit pre-checked before creating

        Raises:
            ValueError: If edit mode is requested without a plan ID
        """
        if mode == WizardMode.EDIT and not plan_id:
            raise ValueError("plan_id is required in edit mode")

        self._mode = mode
        self._submitter = submitter
        self._draft_recovery = draft_recovery
        self._plan_id = plan_id
        self._max_plans = max_plans
        self._listeners: List[StateListener] = []
        self._is_submitting = False
        self._error: Optional[str] = None

        if mode == WizardMode.EDIT and initial_data:
            self._state = _state_from_plan_detail(initial_data, initial_step)
        else:
            self._state = WizardState(mode=mode, current_step=initial_step)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def mode(self) -> WizardMode:
        return self._mode

    @property
    def plan_id(self) -> Optional[str]:
        return self._plan_id

    @property
    def state(self) -> WizardState:
        """A snapshot of the current state."""
        return copy.deepcopy(self._state)

    @property
    def current_step(self) -> int:
        return self._state.current_step

    @property
    def is_submitting(self) -> bool:
        return self._is_submitting

    @property
    def error(self) -> Optional[str]:
        """User-facing message from the last failed submission."""
        return self._error

    def clear_error(self) -> None:
        self._error = None

    # -------------------------------------------------------------------------
    # Change listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with a state snapshot after each mutation."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def is_step_valid(self, step: int) -> bool:
        """
        Check whether a step's data is complete.

        Step 1 needs basics with a trimmed name of 3-100 characters.
        Step 2 needs at least one selected exercise.
        Step 3 needs a non-empty, valid set list for every selected exercise.
        """
        state = self._state
        if step == 1:
            if state.basics is None or not isinstance(state.basics.name, str):
                return False
            name_length = len(state.basics.name.strip())
            return MIN_PLAN_NAME_LENGTH <= name_length <= MAX_PLAN_NAME_LENGTH
        if step == 2:
            return len(state.selected_exercise_ids) > 0
        if step == 3:
            if not state.selected_exercise_ids:
                return False
            return all(
                validate_sets(state.sets_by_exercise.get(exercise_id))
                for exercise_id in state.selected_exercise_ids
            )
        return False

    def can_proceed_to_next_step(self) -> bool:
        return self.is_step_valid(self._state.current_step)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def go_to_step(self, step: int) -> None:
        """Jump to a step without validation (used for draft restoration)."""
        self._state.current_step = step
        self._notify()

    def next_step(self) -> None:
        """Advance one step if the current step is valid and not the last."""
        if not self.can_proceed_to_next_step():
            return
        current = self._state.current_step
        if current + 1 > LAST_STEP:
            return
        if current not in self._state.completed_steps:
            self._state.completed_steps.append(current)
        self._state.current_step = current + 1
        self._notify()

    def prev_step(self) -> None:
        """Go back one step; no-op on the first step."""
        if self._state.current_step - 1 < FIRST_STEP:
            return
        self._state.current_step -= 1
        self._notify()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def save_basics(self, basics: PlanBasics) -> None:
        self._state.basics = basics
        self._notify()

    def save_exercises(self, exercise_ids: List[str]) -> None:
        """Replace the selection, dropping sets of deselected exercises."""
        selected = list(exercise_ids)
        self._state.sets_by_exercise = {
            exercise_id: sets
            for exercise_id, sets in self._state.sets_by_exercise.items()
            if exercise_id in selected
        }
        self._state.selected_exercise_ids = selected
        self._notify()

    def save_sets_config(self, config: List[ExerciseSetConfig]) -> None:
        """
        Rebuild the sets map from a full configuration.

        Entries for exercises that are not selected are ignored so the
        sets map keys stay a subset of the selection.
        """
        selected = set(self._state.selected_exercise_ids)
        self._state.sets_by_exercise = {
            item.exercise_id: list(item.sets)
            for item in config
            if item.exercise_id in selected
        }
        self._notify()

    def remove_exercise(self, exercise_id: str) -> None:
        """Deselect one exercise; wired to the configurator's removal callback."""
        self.save_exercises(
            [i for i in self._state.selected_exercise_ids if i != exercise_id]
        )

    def restore_draft(self, draft: Draft) -> None:
        """
        Apply a recovered draft through the regular mutations.

        Basics, selection and sets are applied in that order, then the
        wizard jumps to the draft's step.
        """
        partial = draft_to_wizard_state(draft)
        if partial.basics is not None:
            self.save_basics(partial.basics)
        self.save_exercises(partial.selected_exercise_ids)
        self.save_sets_config(
            [
                ExerciseSetConfig(exercise_id=exercise_id, sets=sets)
                for exercise_id, sets in partial.sets_by_exercise.items()
            ]
        )
        self.go_to_step(partial.current_step)
        logger.info(f"Restored plan draft at step {partial.current_step}")

    def reset(self) -> None:
        """Return to an empty create/edit state on the first step."""
        self._state = WizardState(mode=self._mode)
        self._error = None
        self._notify()

    def cancel(self) -> None:
        """Abandon the wizard, clearing its state and any saved draft."""
        self.reset()
        if self._draft_recovery is not None:
            self._draft_recovery.discard()

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def build_command(self) -> Dict[str, Any]:
        """
        Build the plan composition command from the current state.

        Exercises keep their selection order; sets keep their order as
        ``set_order``.
        """
        state = self._state
        basics = state.basics
        return {
            "name": basics.name.strip() if basics else "",
            "description": basics.description if basics else None,
            "exercises": [
                {
                    "exerciseId": exercise_id,
                    "sets": [
                        {
                            "repetitions": s.repetitions,
                            "weight": s.weight,
                            "set_order": s.order,
                        }
                        for s in state.sets_by_exercise.get(exercise_id, [])
                    ],
                }
                for exercise_id in state.selected_exercise_ids
            ],
        }

    async def submit(self) -> Optional[Dict[str, Any]]:
        """
        Send the plan to the server.

        In create mode the caller's active plan count is checked first,
        then the plan is created. In edit mode the plan is replaced in full.
        On success the state and the draft are cleared.

        Returns:
            The saved plan, or None if the submission was rejected or failed
            (see ``error``)
        """
        if self._is_submitting:
            return None
        if self._submitter is None:
            raise RuntimeError("No plan submitter configured")

        if self._state.basics is None or not self.is_step_valid(3):
            self._error = INCOMPLETE_PLAN_MESSAGE
            return None

        self._is_submitting = True
        self.clear_error()
        command = self.build_command()

        try:
            if self._mode == WizardMode.EDIT:
                result = await self._submitter.update_plan(self._plan_id, command)
            else:
                plans = await self._submitter.list_plans()
                if len(plans) >= self._max_plans:
                    self._error = _plan_limit_message(self._max_plans)
                    return None
                result = await self._submitter.create_plan(command)
        except PlanSubmissionError as e:
            logger.error(f"Plan submission failed: {e}")
            self._error = str(e)
            return None
        finally:
            self._is_submitting = False

        logger.info(f"Plan {result.get('id')} saved ({self._mode.value} mode)")
        if self._draft_recovery is not None:
            self._draft_recovery.discard()
        self.reset()
        return result
