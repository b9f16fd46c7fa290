"""
Unit tests for PlanApiClient.

Tests the HTTP transport the plan wizard submits through, and the
mapping of error responses to user-facing messages.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from infrastructure.plan_client import (
    EXERCISES_MISSING_MESSAGE,
    LIST_FAILED_MESSAGE,
    PLAN_LIMIT_MESSAGE,
    SAVE_FAILED_MESSAGE,
    SERVER_ERROR_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    VALIDATION_FALLBACK_MESSAGE,
    PlanApiClient,
    PlanSubmissionError,
    format_validation_errors,
    submission_error_for,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plan_client():
    """Create a PlanApiClient instance for testing."""
    return PlanApiClient(base_url="http://plans-api:8005/", auth_token="test-auth-token-123")


@pytest.fixture
def command():
    return {
        "name": "Full Body",
        "description": None,
        "exercises": [
            {"exerciseId": "E1", "sets": [{"repetitions": 10, "weight": 40.0, "set_order": 0}]}
        ],
    }


def _mock_response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    response.text = str(body)
    return response


def _patched_client(mock_client_class, response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client.request = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_class.return_value = mock_client
    return mock_client


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestSubmissionErrorFor:
    """Tests for status code to message mapping."""

    def test_unauthorized(self):
        error = submission_error_for(httpx.Response(401, json={"detail": "Invalid token"}))
        assert str(error) == SESSION_EXPIRED_MESSAGE
        assert error.status_code == 401
        assert error.retryable is False

    def test_forbidden_uses_server_message(self):
        error = submission_error_for(
            httpx.Response(403, json={"detail": "Maximum limit of 7 training plans reached"})
        )
        assert str(error) == "Maximum limit of 7 training plans reached"

    def test_forbidden_fallback(self):
        error = submission_error_for(httpx.Response(403))
        assert str(error) == PLAN_LIMIT_MESSAGE

    def test_not_found_fallback(self):
        error = submission_error_for(httpx.Response(404, text="not json"))
        assert str(error) == EXERCISES_MISSING_MESSAGE

    def test_validation_details_are_flattened(self):
        body = {
            "detail": [
                {"loc": ["body", "name"], "msg": "String should have at least 1 character"},
                {"loc": ["body", "exercises", 0, "sets"], "msg": "Field required"},
            ]
        }

        error = submission_error_for(httpx.Response(422, json=body))

        assert str(error) == (
            "Validation failed: name: String should have at least 1 character; "
            "exercises.0.sets: Field required"
        )

    def test_validation_fallback(self):
        error = submission_error_for(httpx.Response(400, json={}))
        assert str(error) == VALIDATION_FALLBACK_MESSAGE

    @pytest.mark.parametrize("status_code", [500, 502, 503])
    def test_server_errors_are_retryable(self, status_code):
        error = submission_error_for(httpx.Response(status_code, json={"detail": "boom"}))
        assert str(error) == SERVER_ERROR_MESSAGE
        assert error.retryable is True

    def test_other_status(self):
        error = submission_error_for(httpx.Response(409, json={}))
        assert str(error) == SAVE_FAILED_MESSAGE

    def test_error_key_is_used_when_detail_missing(self):
        error = submission_error_for(httpx.Response(409, json={"error": "Conflict"}))
        assert str(error) == "Conflict"


@pytest.mark.unit
class TestFormatValidationErrors:
    def test_details_mapping(self):
        body = {"details": {"name": ["too short", "required"], "weight": "too heavy"}}
        assert format_validation_errors(body) == (
            "Validation failed: name: too short, required; weight: too heavy"
        )

    def test_nothing_to_format(self):
        assert format_validation_errors({"detail": "Bad request"}) is None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPlanApiClientCreate:
    """Tests for create_plan."""

    @pytest.mark.asyncio
    async def test_create_success(self, plan_client, command):
        """Successful create returns the created plan."""
        created = {"id": "plan-1", "name": "Full Body", "description": None}

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _patched_client(mock_client_class, _mock_response(201, created))

            result = await plan_client.create_plan(command)

            call_args = mock_client.request.call_args
            assert call_args[0] == ("POST", "http://plans-api:8005/plans")
            assert call_args[1]["json"] == command
            assert call_args[1]["headers"]["Authorization"] == "Bearer test-auth-token-123"

        assert result == created

    @pytest.mark.asyncio
    async def test_create_limit_error(self, plan_client, command):
        response = _mock_response(403, {"detail": "Maximum limit of 7 training plans reached"})

        with patch("httpx.AsyncClient") as mock_client_class:
            _patched_client(mock_client_class, response)

            with pytest.raises(PlanSubmissionError) as exc_info:
                await plan_client.create_plan(command)

        assert exc_info.value.status_code == 403
        assert "Maximum limit" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [httpx.ConnectError("Connection refused"), httpx.TimeoutException("Timeout")]
    )
    async def test_transport_failures_are_retryable(self, plan_client, command, error):
        with patch("httpx.AsyncClient") as mock_client_class:
            _patched_client(mock_client_class, side_effect=error)

            with pytest.raises(PlanSubmissionError) as exc_info:
                await plan_client.create_plan(command)

        assert str(exc_info.value) == SERVER_ERROR_MESSAGE
        assert exc_info.value.retryable is True
        assert exc_info.value.status_code is None


@pytest.mark.unit
class TestPlanApiClientUpdate:
    @pytest.mark.asyncio
    async def test_update_uses_put(self, plan_client, command):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = _patched_client(
                mock_client_class, _mock_response(200, {"id": "plan-1"})
            )

            await plan_client.update_plan("plan-1", command)

            assert mock_client.request.call_args[0] == (
                "PUT",
                "http://plans-api:8005/plans/plan-1",
            )

    @pytest.mark.asyncio
    async def test_update_unexpected_status(self, plan_client, command):
        with patch("httpx.AsyncClient") as mock_client_class:
            _patched_client(mock_client_class, _mock_response(201, {"id": "plan-1"}))

            with pytest.raises(PlanSubmissionError):
                await plan_client.update_plan("plan-1", command)


@pytest.mark.unit
class TestPlanApiClientList:
    """Tests for list_plans."""

    @pytest.mark.asyncio
    async def test_list_returns_items(self, plan_client):
        body = {"items": [{"id": "plan-1"}, {"id": "plan-2"}], "total": 2}

        with patch("httpx.AsyncClient") as mock_client_class:
            _patched_client(mock_client_class, _mock_response(200, body))

            plans = await plan_client.list_plans()

        assert [p["id"] for p in plans] == ["plan-1", "plan-2"]

    @pytest.mark.asyncio
    async def test_list_failure_message(self, plan_client):
        with patch("httpx.AsyncClient") as mock_client_class:
            _patched_client(mock_client_class, _mock_response(404, {}))

            with pytest.raises(PlanSubmissionError) as exc_info:
                await plan_client.list_plans()

        assert str(exc_info.value) == LIST_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_list_session_expired_is_kept(self, plan_client):
        with patch("httpx.AsyncClient") as mock_client_class:
            _patched_client(mock_client_class, _mock_response(401, {}))

            with pytest.raises(PlanSubmissionError) as exc_info:
                await plan_client.list_plans()

        assert str(exc_info.value) == SESSION_EXPIRED_MESSAGE
