"""
API package for the Training Plans API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_supabase_client_required,
    get_plan_repo,
    get_exercise_repo,
    get_plan_service,
    get_current_user,
)

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Repositories
    "get_plan_repo",
    "get_exercise_repo",
    # Services
    "get_plan_service",
    # Authentication
    "get_current_user",
]
