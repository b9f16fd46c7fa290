"""
Plan repository port (interface).

This Protocol defines the contract for training plan persistence across
the training_plans, plan_exercises and plan_exercise_sets tables.
Infrastructure implementations (e.g., Supabase) must satisfy this interface.

The underlying store offers no multi-table transaction, so each method is
an independent write; ordering and compensation are the caller's job.
"""

from typing import Dict, List, Optional, Protocol


class PlanRepository(Protocol):
    """
    Repository interface for training plan persistence.

    All methods work with dictionaries for flexibility.
    Write failures raise PlanPersistenceError.
    """

    # -------------------------------------------------------------------------
    # Plan headers (training_plans)
    # -------------------------------------------------------------------------

    def count_active_by_user(self, user_id: str) -> int:
        """
        Count a user's plans that are not soft-deleted.

        Args:
            user_id: The user's ID

        Returns:
            Number of active plans
        """
        ...

    def list_active_by_user(self, user_id: str) -> List[Dict]:
        """
        Get a user's plans that are not soft-deleted, newest first.

        Args:
            user_id: The user's ID

        Returns:
            List of plan dictionaries
        """
        ...

    def get_by_id(self, plan_id: str) -> Optional[Dict]:
        """
        Get a plan by its ID.

        Args:
            plan_id: The plan's UUID as string

        Returns:
            Plan dictionary if found, None otherwise
        """
        ...

    def create(self, data: Dict) -> Dict:
        """
        Insert a plan header.

        Args:
            data: Plan data dictionary

        Returns:
            Created plan dictionary with generated ID
        """
        ...

    def update(self, plan_id: str, data: Dict) -> Dict:
        """
        Update a plan header.

        Args:
            plan_id: The plan's UUID as string
            data: Fields to update

        Returns:
            Updated plan dictionary
        """
        ...

    def delete(self, plan_id: str) -> bool:
        """
        Hard-delete a plan header.

        Cascades to plan_exercises and plan_exercise_sets via FK constraints.
        Only used to compensate a failed creation.

        Args:
            plan_id: The plan's UUID as string

        Returns:
            True if deleted, False if not found
        """
        ...

    # -------------------------------------------------------------------------
    # Memberships (plan_exercises)
    # -------------------------------------------------------------------------

    def get_memberships(self, plan_id: str) -> List[Dict]:
        """
        Get a plan's exercise memberships ordered by order_index.

        Args:
            plan_id: The plan's UUID as string

        Returns:
            List of membership dictionaries
        """
        ...

    def insert_memberships(self, rows: List[Dict]) -> List[Dict]:
        """
        Bulk insert exercise memberships.

        Args:
            rows: Dictionaries with training_plan_id, exercise_id, order_index

        Returns:
            Inserted rows
        """
        ...

    def delete_memberships(self, plan_id: str) -> None:
        """
        Delete all memberships of a plan.

        Args:
            plan_id: The plan's UUID as string
        """
        ...

    # -------------------------------------------------------------------------
    # Sets (plan_exercise_sets)
    # -------------------------------------------------------------------------

    def get_sets(self, plan_id: str) -> List[Dict]:
        """
        Get a plan's sets ordered by exercise_id then set_order.

        Args:
            plan_id: The plan's UUID as string

        Returns:
            List of set dictionaries
        """
        ...

    def insert_sets(self, rows: List[Dict]) -> List[Dict]:
        """
        Bulk insert plan sets.

        Args:
            rows: Dictionaries with training_plan_id, exercise_id, set_order,
                  repetitions and weight

        Returns:
            Inserted rows
        """
        ...

    def delete_sets(self, plan_id: str) -> None:
        """
        Delete all sets of a plan.

        Args:
            plan_id: The plan's UUID as string
        """
        ...

    def get_set(self, set_id: str) -> Optional[Dict]:
        """
        Get a single set by its ID.

        Args:
            set_id: The set's UUID as string

        Returns:
            Set dictionary if found, None otherwise
        """
        ...

    def update_set(self, set_id: str, data: Dict) -> Dict:
        """
        Update a single set.

        Args:
            set_id: The set's UUID as string
            data: Fields to update

        Returns:
            Updated set dictionary
        """
        ...

    def delete_set(self, set_id: str) -> bool:
        """
        Delete a single set.

        Args:
            set_id: The set's UUID as string

        Returns:
            True if deleted, False if not found
        """
        ...

    def get_max_set_order(self, plan_id: str, exercise_id: str) -> Optional[int]:
        """
        Get the highest set_order used by an exercise within a plan.

        Args:
            plan_id: The plan's UUID as string
            exercise_id: The exercise's ID

        Returns:
            Highest set_order, or None if the exercise has no sets
        """
        ...
