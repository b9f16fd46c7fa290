"""
Pytest fixtures for plans-api tests.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from api.deps import get_current_user, get_exercise_repo, get_plan_repo
from backend.main import create_app
from backend.settings import Settings
from tests.fakes import (
    FakeDraftStorage,
    FakeExerciseRepository,
    FakePlanRepository,
    FakePlanSubmitter,
)


# ---------------------------------------------------------------------------
# Auth Mock
# ---------------------------------------------------------------------------

TEST_USER_ID = "test-user-123"
OTHER_USER_ID = "other-user-456"


async def mock_get_current_user() -> str:
    """Mock auth dependency that returns a test user."""
    return TEST_USER_ID


# ---------------------------------------------------------------------------
# Mock Environment Variables
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set mock environment variables for tests."""
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-supabase-key")
    monkeypatch.setenv("ENVIRONMENT", "test")


# ---------------------------------------------------------------------------
# Catalog Fixtures
# ---------------------------------------------------------------------------

CATALOG: List[Dict[str, Any]] = [
    {"id": "E1", "name": "Barbell Squat", "category_id": "legs"},
    {"id": "E2", "name": "Bench Press", "category_id": "chest"},
    {"id": "E3", "name": "Deadlift", "category_id": "back"},
    {"id": "E4", "name": "Overhead Press", "category_id": "shoulders"},
]


@pytest.fixture
def catalog() -> List[Dict[str, Any]]:
    return [dict(row) for row in CATALOG]


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_plan_repo() -> FakePlanRepository:
    return FakePlanRepository()


@pytest.fixture
def fake_exercise_repo(catalog) -> FakeExerciseRepository:
    return FakeExerciseRepository(catalog)


@pytest.fixture
def fake_draft_storage() -> FakeDraftStorage:
    return FakeDraftStorage()


@pytest.fixture
def fake_submitter() -> FakePlanSubmitter:
    return FakePlanSubmitter()


# ---------------------------------------------------------------------------
# Test App and Client
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Test settings with minimal configuration."""
    return Settings(
        environment="test",
        supabase_url="https://test.supabase.co",
        supabase_service_role_key="test-key",
        _env_file=None,
    )


@pytest.fixture(scope="session")
def app(test_settings):
    """Create test application instance."""
    return create_app(settings=test_settings)


@pytest.fixture
def client(app, fake_plan_repo, fake_exercise_repo) -> Generator[TestClient, None, None]:
    """
    Per-test FastAPI TestClient backed by in-memory fakes.
    Properly cleans up dependency overrides after each test.
    """
    app.dependency_overrides[get_current_user] = mock_get_current_user
    app.dependency_overrides[get_plan_repo] = lambda: fake_plan_repo
    app.dependency_overrides[get_exercise_repo] = lambda: fake_exercise_repo
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Domain Fixtures - Plans
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_plan_command() -> Dict[str, Any]:
    """Valid composition command with three exercises and one set each."""
    return {
        "name": "Push Pull Legs",
        "description": "Three-day split",
        "exercises": [
            {"exerciseId": "E1", "sets": [{"repetitions": 1, "weight": 2.5, "set_order": 0}]},
            {"exerciseId": "E2", "sets": [{"repetitions": 1, "weight": 2.5, "set_order": 0}]},
            {"exerciseId": "E3", "sets": [{"repetitions": 1, "weight": 2.5, "set_order": 0}]},
        ],
    }
