"""
HTTP client for the plans API.

This is the plan wizard's submission transport. It lists the caller's
plans (for the client-side plan limit check), creates plans and replaces
existing ones. Every failure is raised as PlanSubmissionError carrying a
message the wizard shows to the user as-is.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.constants import MAX_PLANS_PER_USER

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
PLAN_LIMIT_MESSAGE = (
    f"You have reached the limit of {MAX_PLANS_PER_USER} training plans. "
    "Delete a plan before creating a new one."
)
EXERCISES_MISSING_MESSAGE = (
    "One or more selected exercises no longer exist. Refresh the exercise list."
)
VALIDATION_FALLBACK_MESSAGE = "Please check the form fields."
SERVER_ERROR_MESSAGE = "A server error occurred. Please try again."
SAVE_FAILED_MESSAGE = "Failed to save the plan."
LIST_FAILED_MESSAGE = "Failed to check the number of plans."


class PlanSubmissionError(Exception):
    """
    Raised when a plan submission fails.

    Attributes:
        status_code: HTTP status, or None when the API was unreachable
        retryable: True for server errors and transport failures
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _server_message(body: Dict[str, Any]) -> Optional[str]:
    detail = body.get("detail", body.get("error"))
    return detail if isinstance(detail, str) and detail else None


def format_validation_errors(body: Dict[str, Any]) -> Optional[str]:
    """
    Flatten validation details into "field: message; field: message".

    Accepts FastAPI's ``{"detail": [{"loc": [...], "msg": ...}]}`` shape as
    well as a ``{"details": {field: [messages]}}`` mapping.
    """
    parts: List[str] = []

    detail = body.get("detail")
    if isinstance(detail, list):
        for error in detail:
            if not isinstance(error, dict):
                continue
            loc = [str(p) for p in error.get("loc", []) if p != "body"]
            field = ".".join(loc) or "request"
            parts.append(f"{field}: {error.get('msg', 'invalid value')}")

    details = body.get("details")
    if isinstance(details, dict):
        for field, messages in details.items():
            if isinstance(messages, list):
                parts.append(f"{field}: {', '.join(str(m) for m in messages)}")
            else:
                parts.append(f"{field}: {messages}")

    if not parts:
        return None
    return f"Validation failed: {'; '.join(parts)}"


def submission_error_for(response: httpx.Response) -> PlanSubmissionError:
    """Map an error response to a user-facing PlanSubmissionError."""
    status = response.status_code
    body = _error_body(response)

    if status == 401:
        return PlanSubmissionError(SESSION_EXPIRED_MESSAGE, status)
    if status == 403:
        return PlanSubmissionError(_server_message(body) or PLAN_LIMIT_MESSAGE, status)
    if status == 404:
        return PlanSubmissionError(
            _server_message(body) or EXERCISES_MISSING_MESSAGE, status
        )
    if status in (400, 422):
        message = (
            format_validation_errors(body)
            or _server_message(body)
            or VALIDATION_FALLBACK_MESSAGE
        )
        return PlanSubmissionError(message, status)
    if status >= 500:
        return PlanSubmissionError(SERVER_ERROR_MESSAGE, status, retryable=True)
    return PlanSubmissionError(_server_message(body) or SAVE_FAILED_MESSAGE, status)


class PlanApiClient:
    """
    HTTP client for plans API communication.

    Implements the PlanSubmitter port on top of httpx.AsyncClient.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: str,
        timeout: float = 30.0,
    ):
        """
        Initialize the plans client.

        Args:
            base_url: Base URL of the plans API (e.g., "http://localhost:8000")
            auth_token: Caller's bearer token
            timeout: Request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._auth_token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        expected_status: int,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method, url, json=payload, headers=self._headers()
                )
        except httpx.ConnectError as e:
            logger.error(f"Plans API unavailable: {e}")
            raise PlanSubmissionError(SERVER_ERROR_MESSAGE, retryable=True) from e
        except httpx.TimeoutException as e:
            logger.error(f"Plans API timeout: {e}")
            raise PlanSubmissionError(SERVER_ERROR_MESSAGE, retryable=True) from e

        if response.status_code != expected_status:
            logger.error(
                f"Plans API error: {method} {path} -> "
                f"{response.status_code} - {response.text}"
            )
            raise submission_error_for(response)

        return response.json()

    async def list_plans(self) -> List[Dict[str, Any]]:
        """
        Get the caller's active plans.

        Raises:
            PlanSubmissionError: If the request fails
        """
        try:
            data = await self._request("GET", "/plans", 200)
        except PlanSubmissionError as e:
            if e.status_code is None or e.status_code == 401 or e.retryable:
                raise
            raise PlanSubmissionError(LIST_FAILED_MESSAGE, e.status_code) from e
        return data.get("items", [])

    async def create_plan(self, command: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a plan from a composition command.

        Raises:
            PlanSubmissionError: If the request fails
        """
        return await self._request("POST", "/plans", 201, payload=command)

    async def update_plan(self, plan_id: str, command: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace a plan's basics, exercises and sets.

        Raises:
            PlanSubmissionError: If the request fails
        """
        return await self._request("PUT", f"/plans/{plan_id}", 200, payload=command)
