"""
FastAPI Dependency Providers for the Training Plans API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations.

Architecture:
- Settings and Supabase client are cached per-process (lru_cache)
- Repository and service providers create new instances per-request
- The auth provider resolves the bearer token to a user ID via Supabase auth

Usage in routers:
    from api.deps import get_plan_service, get_current_user
    from services.plan_composition import PlanCompositionService

    @router.get("/plans")
    def list_plans(
        user_id: str = Depends(get_current_user),
        service: PlanCompositionService = Depends(get_plan_service),
    ):
        return service.list_plans(user_id)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_plan_repo] = lambda: FakePlanRepository()
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from supabase import Client, create_client

from application.ports import ExerciseRepository, PlanRepository
from backend.settings import Settings, get_settings as _get_settings
from infrastructure.db import SupabaseExerciseRepository, SupabasePlanRepository
from services.plan_composition import PlanCompositionService

logger = logging.getLogger(__name__)


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Returns None if credentials are not configured.

    Returns:
        Client: Supabase client instance, or None if not configured
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        HTTPException: 503 if Supabase is not configured
    """
    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Database not available. Supabase credentials not configured.",
        )
    return client


# =============================================================================
# Repository Providers
# =============================================================================


def get_plan_repo(
    client: Client = Depends(get_supabase_client_required),
) -> PlanRepository:
    """
    Get PlanRepository implementation.

    The return type is the Protocol to enable easy mocking.
    """
    return SupabasePlanRepository(client)


def get_exercise_repo(
    client: Client = Depends(get_supabase_client_required),
) -> ExerciseRepository:
    """
    Get ExerciseRepository implementation.

    The return type is the Protocol to enable easy mocking.
    """
    return SupabaseExerciseRepository(client)


# =============================================================================
# Service Providers
# =============================================================================


def get_plan_service(
    plan_repo: PlanRepository = Depends(get_plan_repo),
    exercise_repo: ExerciseRepository = Depends(get_exercise_repo),
    settings: Settings = Depends(get_settings),
) -> PlanCompositionService:
    """
    Get the plan composition service wired to the injected repositories.

    Args:
        plan_repo: Plan repository (injected)
        exercise_repo: Exercise catalog (injected)
        settings: Application settings (injected)

    Returns:
        PlanCompositionService: Service for plan reads and writes
    """
    return PlanCompositionService(
        plan_repo=plan_repo,
        exercise_repo=exercise_repo,
        max_plans_per_user=settings.max_plans_per_user,
    )


# =============================================================================
# Authentication Providers
# =============================================================================


async def get_current_user(
    authorization: Optional[str] = Header(None),
    client: Client = Depends(get_supabase_client_required),
) -> str:
    """
    Get the current authenticated user ID.

    Resolves the bearer token through Supabase auth.

    Args:
        authorization: Bearer token header
        client: Supabase client (injected)

    Returns:
        str: User ID from authentication

    Raises:
        HTTPException: 401 if authentication fails
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Missing authorization header",
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format",
        )

    token = authorization[7:]  # Remove "Bearer " prefix
    if not token:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
        )

    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        raise HTTPException(status_code=401, detail="Invalid token")

    return user.id


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Repositories
    "get_exercise_repo",
    "get_plan_repo",
    # Services
    "get_plan_service",
    # Authentication
    "get_current_user",
]
