"""
Training plans router.

This router provides endpoints for managing training plans:
- List the caller's active plans
- Get plan details (exercises in plan order and their sets)
- Create a plan with exercises and sets in one request
- Update a plan (basics, full replace, or membership-only replace)
- Delete plans (soft delete via deleted_at)
- Add, update and delete individual sets
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.deps import get_current_user, get_plan_service
from application.exceptions import (
    ExerciseNotFoundError,
    PlanAccessDeniedError,
    PlanCompositionError,
    PlanLimitExceededError,
    PlanNotFoundError,
    PlanPersistenceError,
    PlanSetAccessDeniedError,
    PlanSetNotFoundError,
)
from models.plan import (
    CreatePlanRequest,
    CreatePlanSetRequest,
    PlanExerciseSet,
    PlanListResponse,
    TrainingPlan,
    TrainingPlanDetail,
    UpdatePlanRequest,
    UpdatePlanSetRequest,
)
from services.plan_composition import PlanCompositionService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/plans",
    tags=["Plans"],
)


# =============================================================================
# Custom Exceptions
# =============================================================================


class PlanNotFoundHTTPError(HTTPException):
    """
    Raised when a plan cannot be found or belongs to another user.

    Both cases return the same 404 so plan existence is not leaked.
    """

    def __init__(self, plan_id: str):
        super().__init__(
            status_code=404,
            detail=f"Training plan {plan_id} not found",
        )


class PlanSetNotFoundHTTPError(HTTPException):
    """Raised when a set cannot be found or belongs to another plan."""

    def __init__(self, set_id: str):
        super().__init__(
            status_code=404,
            detail=f"Plan set {set_id} not found",
        )


# =============================================================================
# Helper Functions
# =============================================================================


def _raise_http(error: PlanCompositionError) -> NoReturn:
    """
    Translate a plan composition error into an HTTPException.

    Raises:
        HTTPException: Always
    """
    if isinstance(error, PlanLimitExceededError):
        raise HTTPException(status_code=403, detail=str(error)) from error
    if isinstance(error, ExerciseNotFoundError):
        raise HTTPException(status_code=404, detail=str(error)) from error
    if isinstance(error, (PlanNotFoundError, PlanAccessDeniedError)):
        raise PlanNotFoundHTTPError(error.plan_id) from error
    if isinstance(error, (PlanSetNotFoundError, PlanSetAccessDeniedError)):
        raise PlanSetNotFoundHTTPError(error.set_id) from error
    if isinstance(error, PlanPersistenceError):
        raise HTTPException(status_code=500, detail=str(error)) from error
    logger.error(f"Unexpected plan composition error: {error}")
    raise HTTPException(status_code=500, detail="An unexpected error occurred") from error


# =============================================================================
# Plans
# =============================================================================


@router.get("", response_model=PlanListResponse)
async def list_plans(
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> PlanListResponse:
    """
    List the current user's active training plans, newest first.
    """
    try:
        plans = service.list_plans(user_id)
    except PlanCompositionError as e:
        _raise_http(e)

    return PlanListResponse(
        items=[TrainingPlan(**p) for p in plans],
        total=len(plans),
    )


@router.post("", response_model=TrainingPlan, status_code=status.HTTP_201_CREATED)
async def create_plan(
    request: CreatePlanRequest,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> TrainingPlan:
    """
    Create a training plan with its exercises and sets.

    Returns 403 when the plan limit is reached and 404 when any exercise
    does not exist.
    """
    logger.info(
        f"Creating plan '{request.name}' for user {user_id} "
        f"with {len(request.exercises)} exercises"
    )
    try:
        plan = service.create_plan(user_id, request)
    except PlanCompositionError as e:
        _raise_http(e)

    return TrainingPlan(**plan)


@router.get("/{plan_id}", response_model=TrainingPlanDetail)
async def get_plan(
    plan_id: str,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> TrainingPlanDetail:
    """
    Get a plan with its exercises (in plan order) and sets.
    """
    try:
        detail = service.get_plan(plan_id, user_id)
    except PlanCompositionError as e:
        _raise_http(e)

    return TrainingPlanDetail(**detail)


@router.put("/{plan_id}", response_model=TrainingPlan)
async def update_plan(
    plan_id: str,
    request: UpdatePlanRequest,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> TrainingPlan:
    """
    Update a plan's basics and optionally replace its exercises.

    ``exercises`` replaces exercises and sets; ``exerciseIds`` replaces the
    exercise list only and keeps existing sets.
    """
    try:
        plan = service.update_plan(plan_id, user_id, request)
    except PlanCompositionError as e:
        _raise_http(e)

    return TrainingPlan(**plan)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(
    plan_id: str,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> Response:
    """
    Soft-delete a plan. Its exercises and sets are kept.
    """
    try:
        service.delete_plan(plan_id, user_id)
    except PlanCompositionError as e:
        _raise_http(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Individual Sets
# =============================================================================


@router.post(
    "/{plan_id}/sets",
    response_model=PlanExerciseSet,
    status_code=status.HTTP_201_CREATED,
)
async def create_plan_set(
    plan_id: str,
    request: CreatePlanSetRequest,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> PlanExerciseSet:
    """
    Add a set to one exercise of a plan.

    Without ``set_order`` the set is appended after the exercise's last set.
    """
    try:
        plan_set = service.create_plan_set(plan_id, user_id, request)
    except PlanCompositionError as e:
        _raise_http(e)

    return PlanExerciseSet(**plan_set)


@router.put("/{plan_id}/sets/{set_id}", response_model=PlanExerciseSet)
async def update_plan_set(
    plan_id: str,
    set_id: str,
    request: UpdatePlanSetRequest,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> PlanExerciseSet:
    """Partially update one set of a plan."""
    try:
        plan_set = service.update_plan_set(plan_id, set_id, user_id, request)
    except PlanCompositionError as e:
        _raise_http(e)

    return PlanExerciseSet(**plan_set)


@router.delete("/{plan_id}/sets/{set_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan_set(
    plan_id: str,
    set_id: str,
    user_id: str = Depends(get_current_user),
    service: PlanCompositionService = Depends(get_plan_service),
) -> Response:
    """Delete one set of a plan."""
    try:
        service.delete_plan_set(plan_id, set_id, user_id)
    except PlanCompositionError as e:
        _raise_http(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
