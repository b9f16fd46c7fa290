"""
Training plan composition service.

This service is the only writer of plan rows. A plan spans three tables
(training_plans, plan_exercises, plan_exercise_sets) and the store offers
no multi-table transaction, so creation is an ordered saga:

    Pending -> PlanWritten -> MembershipsWritten -> SetsWritten -> Committed

If a later stage fails, the plan header is hard-deleted and the cascade
removes whatever children were written. Full-replace updates are NOT
compensated: a failure part-way through can leave a plan with its
memberships replaced but no sets.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

from application.exceptions import (
    CompensationError,
    ExerciseNotFoundError,
    PlanAccessDeniedError,
    PlanCompositionError,
    PlanLimitExceededError,
    PlanNotFoundError,
    PlanPersistenceError,
    PlanSetAccessDeniedError,
    PlanSetNotFoundError,
)
from application.ports import ExerciseRepository, PlanRepository
from core.constants import MAX_PLANS_PER_USER
from models.plan import (
    CreatePlanRequest,
    CreatePlanSetRequest,
    PlanExerciseInput,
    UpdatePlanRequest,
    UpdatePlanSetRequest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_membership_rows(plan_id: str, exercise_ids: List[str]) -> List[Dict]:
    """Membership rows with order_index equal to the position in the command."""
    return [
        {"training_plan_id": plan_id, "exercise_id": exercise_id, "order_index": index}
        for index, exercise_id in enumerate(exercise_ids)
    ]


def build_set_rows(plan_id: str, exercises: List[PlanExerciseInput]) -> List[Dict]:
    """Set rows with set_order taken from the command or the set's position."""
    rows = []
    for exercise in exercises:
        for index, set_input in enumerate(exercise.sets):
            rows.append(
                {
                    "training_plan_id": plan_id,
                    "exercise_id": exercise.exercise_id,
                    "set_order": (
                        set_input.set_order if set_input.set_order is not None else index
                    ),
                    "repetitions": set_input.repetitions,
                    "weight": set_input.weight,
                }
            )
    return rows


def _persist(action: str, operation: Callable[[], T]) -> T:
    """Run a repository call, wrapping unexpected failures."""
    try:
        return operation()
    except PlanCompositionError:
        raise
    except Exception as e:
        logger.error(f"Failed to {action}: {e}")
        raise PlanPersistenceError(f"Failed to {action}") from e


# =============================================================================
# Creation saga
# =============================================================================


class CreationStage(str, Enum):
    """Progress of a plan creation."""

    PENDING = "pending"
    PLAN_WRITTEN = "plan_written"
    MEMBERSHIPS_WRITTEN = "memberships_written"
    SETS_WRITTEN = "sets_written"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class PlanCreationSaga:
    """
    Ordered plan creation with a single compensating action.

    Each stage is written only after the previous one succeeded. A failure
    after the header exists triggers ``rollback``, which deletes the header
    (children go with it through the FK cascade).
    """

    def __init__(self, plan_repo: PlanRepository, user_id: str, request: CreatePlanRequest):
        self._repo = plan_repo
        self._user_id = user_id
        self._request = request
        self.stage = CreationStage.PENDING
        self.plan_id: Optional[str] = None

    def run(self) -> Dict:
        """
        Write the plan header, memberships and sets in order.

        Returns:
            The created plan header

        Raises:
            PlanPersistenceError: If a write failed (after rollback)
            CompensationError: If a write failed and the rollback failed too
        """
        plan = _persist(
            "create training plan",
            lambda: self._repo.create(
                {
                    "user_id": self._user_id,
                    "name": self._request.name,
                    "description": self._request.description,
                }
            ),
        )
        self.plan_id = plan["id"]
        self.stage = CreationStage.PLAN_WRITTEN

        try:
            self._repo.insert_memberships(
                build_membership_rows(
                    self.plan_id, [e.exercise_id for e in self._request.exercises]
                )
            )
        except Exception as e:
            logger.error(f"Failed to insert exercises for plan {self.plan_id}: {e}")
            self.rollback()
            raise PlanPersistenceError("Failed to associate exercises with plan") from e
        self.stage = CreationStage.MEMBERSHIPS_WRITTEN

        set_rows = build_set_rows(self.plan_id, self._request.exercises)
        if set_rows:
            try:
                self._repo.insert_sets(set_rows)
            except Exception as e:
                logger.error(f"Failed to insert sets for plan {self.plan_id}: {e}")
                self.rollback()
                raise PlanPersistenceError("Failed to create plan sets") from e
        self.stage = CreationStage.SETS_WRITTEN

        self.stage = CreationStage.COMMITTED
        return plan

    def rollback(self) -> None:
        """
        Delete the partially written plan.

        Idempotent: a second call, or a call before the header exists, does
        nothing.

        Raises:
            CompensationError: If the delete itself fails
        """
        if self.plan_id is None or self.stage in (
            CreationStage.ROLLED_BACK,
            CreationStage.COMMITTED,
        ):
            return
        try:
            self._repo.delete(self.plan_id)
        except Exception as e:
            logger.critical(
                f"Compensation failed: plan {self.plan_id} left partially written: {e}"
            )
            raise CompensationError(
                self.plan_id, f"Failed to roll back training plan {self.plan_id}"
            ) from e
        self.stage = CreationStage.ROLLED_BACK
        logger.warning(f"Rolled back partially created plan {self.plan_id}")


# =============================================================================
# Service
# =============================================================================


class PlanCompositionService:
    """
    Create, read, replace and archive training plans.

    Every operation on an existing plan checks ownership first. Not-found
    and forbidden are separate exceptions here; the HTTP layer reports both
    as 404.
    """

    def __init__(
        self,
        plan_repo: PlanRepository,
        exercise_repo: ExerciseRepository,
        max_plans_per_user: int = MAX_PLANS_PER_USER,
    ):
        """
        Initialize the service.

        Args:
            plan_repo: Repository for plan rows
            exercise_repo: Read-only exercise catalog
            max_plans_per_user: Limit on active plans per user
        """
        self._plan_repo = plan_repo
        self._exercise_repo = exercise_repo
        self._max_plans = max_plans_per_user

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def _get_owned_plan(self, plan_id: str, user_id: str) -> Dict:
        plan = _persist("check plan ownership", lambda: self._plan_repo.get_by_id(plan_id))
        if not plan:
            raise PlanNotFoundError(plan_id)
        if plan.get("user_id") != user_id:
            logger.warning(f"User {user_id} denied access to plan {plan_id}")
            raise PlanAccessDeniedError(plan_id)
        return plan

    def _validate_exercises_exist(self, exercise_ids: List[str]) -> None:
        unique_ids = list(dict.fromkeys(exercise_ids))
        existing = set(
            _persist(
                "validate exercises",
                lambda: self._exercise_repo.find_existing_ids(unique_ids),
            )
        )
        missing = [i for i in unique_ids if i not in existing]
        if missing:
            raise ExerciseNotFoundError(missing)

    def _get_owned_set(self, plan_id: str, set_id: str) -> Dict:
        plan_set = _persist("check set existence", lambda: self._plan_repo.get_set(set_id))
        if not plan_set:
            raise PlanSetNotFoundError(set_id)
        if plan_set.get("training_plan_id") != plan_id:
            raise PlanSetAccessDeniedError(set_id)
        return plan_set

    # -------------------------------------------------------------------------
    # Plans
    # -------------------------------------------------------------------------

    def list_plans(self, user_id: str) -> List[Dict]:
        """Get the user's active plans, newest first."""
        return _persist(
            "fetch training plans",
            lambda: self._plan_repo.list_active_by_user(user_id),
        )

    def get_plan(self, plan_id: str, user_id: str) -> Dict[str, Any]:
        """
        Get a plan with its exercises and sets.

        Exercises are catalog rows in membership order; sets are ordered by
        exercise then set_order.
        """
        plan = self._get_owned_plan(plan_id, user_id)

        memberships = _persist(
            "fetch plan exercises", lambda: self._plan_repo.get_memberships(plan_id)
        )
        exercise_ids = [m["exercise_id"] for m in memberships]
        catalog = _persist(
            "fetch plan exercises",
            lambda: self._exercise_repo.get_by_ids(exercise_ids) if exercise_ids else [],
        )
        by_id = {row["id"]: row for row in catalog}
        sets = _persist("fetch plan sets", lambda: self._plan_repo.get_sets(plan_id))

        return {
            **plan,
            "exercises": [by_id[i] for i in exercise_ids if i in by_id],
            "sets": sets,
        }

    def create_plan(self, user_id: str, request: CreatePlanRequest) -> Dict:
        """
        Create a plan with its exercises and sets.

        Args:
            user_id: Owner of the new plan
            request: Composition command

        Returns:
            The created plan header

        Raises:
            PlanLimitExceededError: If the user already has the maximum
                number of active plans
            ExerciseNotFoundError: If any referenced exercise is missing;
                nothing is written
            PlanPersistenceError: If a write failed (the plan is rolled back)
            CompensationError: If the rollback failed
        """
        # Check-then-act: concurrent creates can both pass this check.
        count = _persist(
            "check plans limit", lambda: self._plan_repo.count_active_by_user(user_id)
        )
        if count >= self._max_plans:
            raise PlanLimitExceededError(self._max_plans)

        self._validate_exercises_exist([e.exercise_id for e in request.exercises])

        saga = PlanCreationSaga(self._plan_repo, user_id, request)
        plan = saga.run()
        logger.info(
            f"Created plan {plan['id']} for user {user_id} "
            f"with {len(request.exercises)} exercises"
        )
        return plan

    def update_plan(self, plan_id: str, user_id: str, request: UpdatePlanRequest) -> Dict:
        """
        Update a plan's basics and optionally replace its contents.

        ``exercises`` replaces memberships and sets in full; ``exercise_ids``
        replaces memberships only and keeps existing sets. Neither is
        compensated on failure.

        Returns:
            The updated plan header
        """
        self._get_owned_plan(plan_id, user_id)

        if request.exercises is not None:
            self._validate_exercises_exist([e.exercise_id for e in request.exercises])
            _persist("update plan sets", lambda: self._plan_repo.delete_sets(plan_id))
            _persist(
                "update plan exercises",
                lambda: self._plan_repo.delete_memberships(plan_id),
            )
            _persist(
                "update plan exercises",
                lambda: self._plan_repo.insert_memberships(
                    build_membership_rows(
                        plan_id, [e.exercise_id for e in request.exercises]
                    )
                ),
            )
            set_rows = build_set_rows(plan_id, request.exercises)
            if set_rows:
                _persist(
                    "update plan sets", lambda: self._plan_repo.insert_sets(set_rows)
                )
            logger.info(f"Replaced exercises and sets of plan {plan_id}")
        elif request.exercise_ids is not None:
            self._validate_exercises_exist(request.exercise_ids)
            _persist(
                "update plan exercises",
                lambda: self._plan_repo.delete_memberships(plan_id),
            )
            _persist(
                "update plan exercises",
                lambda: self._plan_repo.insert_memberships(
                    build_membership_rows(plan_id, request.exercise_ids)
                ),
            )
            logger.info(f"Replaced exercises of plan {plan_id}")

        update_data: Dict[str, Any] = {"updated_at": _utcnow_iso()}
        if "name" in request.model_fields_set and request.name is not None:
            update_data["name"] = request.name
        if "description" in request.model_fields_set:
            update_data["description"] = request.description or None

        return _persist(
            "update training plan",
            lambda: self._plan_repo.update(plan_id, update_data),
        )

    def delete_plan(self, plan_id: str, user_id: str) -> None:
        """
        Archive a plan by setting deleted_at.

        Memberships and sets are left untouched.
        """
        self._get_owned_plan(plan_id, user_id)
        _persist(
            "delete training plan",
            lambda: self._plan_repo.update(plan_id, {"deleted_at": _utcnow_iso()}),
        )
        logger.info(f"Archived plan {plan_id} for user {user_id}")

    # -------------------------------------------------------------------------
    # Individual sets
    # -------------------------------------------------------------------------

    def create_plan_set(
        self, plan_id: str, user_id: str, request: CreatePlanSetRequest
    ) -> Dict:
        """
        Add one set to an exercise of a plan.

        Without an explicit set_order the set is appended after the
        exercise's highest existing order (or at 0).
        """
        self._get_owned_plan(plan_id, user_id)
        self._validate_exercises_exist([request.exercise_id])

        set_order = request.set_order
        if set_order is None:
            current_max = _persist(
                "get next set order",
                lambda: self._plan_repo.get_max_set_order(plan_id, request.exercise_id),
            )
            set_order = 0 if current_max is None else current_max + 1

        rows = _persist(
            "create plan set",
            lambda: self._plan_repo.insert_sets(
                [
                    {
                        "training_plan_id": plan_id,
                        "exercise_id": request.exercise_id,
                        "set_order": set_order,
                        "repetitions": request.repetitions,
                        "weight": request.weight,
                    }
                ]
            ),
        )
        return rows[0]

    def update_plan_set(
        self, plan_id: str, set_id: str, user_id: str, request: UpdatePlanSetRequest
    ) -> Dict:
        """Partially update one set of a plan."""
        self._get_owned_plan(plan_id, user_id)
        self._get_owned_set(plan_id, set_id)

        update_data = request.model_dump(exclude_unset=True, exclude_none=True)
        return _persist(
            "update plan set",
            lambda: self._plan_repo.update_set(set_id, update_data),
        )

    def delete_plan_set(self, plan_id: str, set_id: str, user_id: str) -> None:
        """Delete one set of a plan."""
        self._get_owned_plan(plan_id, user_id)
        self._get_owned_set(plan_id, set_id)
        _persist("delete plan set", lambda: self._plan_repo.delete_set(set_id))
