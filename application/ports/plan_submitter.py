"""
Plan submission transport port (interface).

The wizard's final step talks to the plans API only through this
Protocol. Implementations raise PlanSubmissionError with a message that
the wizard shows to the user verbatim.
"""

from typing import Any, Dict, List, Protocol


class PlanSubmitter(Protocol):
    """Request/response transport used by the plan wizard."""

    async def list_plans(self) -> List[Dict[str, Any]]:
        """
        Get the caller's active plans.

        Returns:
            List of plan dictionaries
        """
        ...

    async def create_plan(self, command: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit a plan composition command.

        Args:
            command: Wire-format composition command

        Returns:
            The created plan
        """
        ...

    async def update_plan(self, plan_id: str, command: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace an existing plan's contents.

        Args:
            plan_id: The plan's UUID as string
            command: Wire-format composition command

        Returns:
            The updated plan
        """
        ...
