"""
Application-layer exceptions.

These exceptions are raised by the plan composition service and the
infrastructure repositories, and translated to HTTP responses by the
plans router.
"""

from typing import List, Optional


class PlanCompositionError(Exception):
    """Base class for plan composition failures."""

    pass


class PlanLimitExceededError(PlanCompositionError):
    """Raised when the owner already has the maximum number of active plans."""

    def __init__(self, limit: int):
        super().__init__(f"Maximum limit of {limit} training plans reached")
        self.limit = limit


class ExerciseNotFoundError(PlanCompositionError):
    """Raised when a command references exercises missing from the catalog."""

    def __init__(self, missing_ids: Optional[List[str]] = None):
        super().__init__("One or more exercises not found")
        self.missing_ids = missing_ids or []


class PlanNotFoundError(PlanCompositionError):
    """Raised when a plan does not exist."""

    def __init__(self, plan_id: str):
        super().__init__(f"Training plan {plan_id} not found")
        self.plan_id = plan_id


class PlanAccessDeniedError(PlanCompositionError):
    """
    Raised when a plan exists but belongs to another user.

    Kept distinct from PlanNotFoundError for logging; the HTTP layer reports
    both the same way so plan existence is not leaked.
    """

    def __init__(self, plan_id: str):
        super().__init__(f"Access to training plan {plan_id} denied")
        self.plan_id = plan_id


class PlanSetNotFoundError(PlanCompositionError):
    """Raised when a plan set does not exist."""

    def __init__(self, set_id: str):
        super().__init__(f"Plan set {set_id} not found")
        self.set_id = set_id


class PlanSetAccessDeniedError(PlanCompositionError):
    """Raised when a plan set does not belong to the addressed plan."""

    def __init__(self, set_id: str):
        super().__init__(f"Set {set_id} does not belong to this training plan")
        self.set_id = set_id


class PlanPersistenceError(PlanCompositionError):
    """Error while reading or writing plan rows.

    Raised for failed inserts, updates and deletes against any of the
    training_plans, plan_exercises or plan_exercise_sets tables.
    """

    pass


class CompensationError(PlanPersistenceError):
    """Raised when rolling back a partially created plan itself fails.

    This is fatal: the orphaned plan header cannot be cleaned up
    automatically and is not retried.
    """

    def __init__(self, plan_id: str, message: str):
        super().__init__(message)
        self.plan_id = plan_id
