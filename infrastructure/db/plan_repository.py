"""
Supabase implementation of PlanRepository.

This implementation uses the Supabase Python client to interact with
the training_plans, plan_exercises and plan_exercise_sets tables.
"""

import logging
from typing import Dict, List, Optional

from supabase import Client

from application.exceptions import PlanPersistenceError

logger = logging.getLogger(__name__)

PLANS_TABLE = "training_plans"
MEMBERSHIPS_TABLE = "plan_exercises"
SETS_TABLE = "plan_exercise_sets"


class SupabasePlanRepository:
    """
    Supabase-backed plan repository implementation.

    Queries against:
    - training_plans: Plan headers (soft-deleted via deleted_at)
    - plan_exercises: Ordered exercise memberships
    - plan_exercise_sets: Per-exercise prescribed sets
    """

    def __init__(self, client: Client):
        """
        Initialize repository with Supabase client.

        Args:
            client: Authenticated Supabase client
        """
        self._client = client

    # -------------------------------------------------------------------------
    # Plan headers
    # -------------------------------------------------------------------------

    def count_active_by_user(self, user_id: str) -> int:
        response = (
            self._client.table(PLANS_TABLE)
            .select("id", count="exact")
            .eq("user_id", user_id)
            .is_("deleted_at", "null")
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def list_active_by_user(self, user_id: str) -> List[Dict]:
        response = (
            self._client.table(PLANS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .is_("deleted_at", "null")
            .order("created_at", desc=True)
            .execute()
        )
        return response.data

    def get_by_id(self, plan_id: str) -> Optional[Dict]:
        response = (
            self._client.table(PLANS_TABLE)
            .select("*")
            .eq("id", plan_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def create(self, data: Dict) -> Dict:
        response = self._client.table(PLANS_TABLE).insert(data).execute()
        if not response.data:
            raise PlanPersistenceError("Failed to create training plan")
        return response.data[0]

    def update(self, plan_id: str, data: Dict) -> Dict:
        response = (
            self._client.table(PLANS_TABLE)
            .update(data)
            .eq("id", plan_id)
            .execute()
        )
        if not response.data:
            raise PlanPersistenceError(f"Failed to update training plan {plan_id}")
        return response.data[0]

    def delete(self, plan_id: str) -> bool:
        """
        Hard-delete a plan.

        Cascades to plan_exercises and plan_exercise_sets via FK constraints.
        """
        response = (
            self._client.table(PLANS_TABLE)
            .delete()
            .eq("id", plan_id)
            .execute()
        )
        return len(response.data) > 0

    # -------------------------------------------------------------------------
    # Memberships
    # -------------------------------------------------------------------------

    def get_memberships(self, plan_id: str) -> List[Dict]:
        response = (
            self._client.table(MEMBERSHIPS_TABLE)
            .select("*")
            .eq("training_plan_id", plan_id)
            .order("order_index")
            .execute()
        )
        return response.data

    def insert_memberships(self, rows: List[Dict]) -> List[Dict]:
        if not rows:
            return []
        response = self._client.table(MEMBERSHIPS_TABLE).insert(rows).execute()
        if not response.data:
            raise PlanPersistenceError("Failed to insert plan exercises")
        return response.data

    def delete_memberships(self, plan_id: str) -> None:
        (
            self._client.table(MEMBERSHIPS_TABLE)
            .delete()
            .eq("training_plan_id", plan_id)
            .execute()
        )

    # -------------------------------------------------------------------------
    # Sets
    # -------------------------------------------------------------------------

    def get_sets(self, plan_id: str) -> List[Dict]:
        response = (
            self._client.table(SETS_TABLE)
            .select("*")
            .eq("training_plan_id", plan_id)
            .order("exercise_id")
            .order("set_order")
            .execute()
        )
        return response.data

    def insert_sets(self, rows: List[Dict]) -> List[Dict]:
        if not rows:
            return []
        response = self._client.table(SETS_TABLE).insert(rows).execute()
        if not response.data:
            raise PlanPersistenceError("Failed to insert plan sets")
        return response.data

    def delete_sets(self, plan_id: str) -> None:
        (
            self._client.table(SETS_TABLE)
            .delete()
            .eq("training_plan_id", plan_id)
            .execute()
        )

    def get_set(self, set_id: str) -> Optional[Dict]:
        response = (
            self._client.table(SETS_TABLE)
            .select("*")
            .eq("id", set_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def update_set(self, set_id: str, data: Dict) -> Dict:
        response = (
            self._client.table(SETS_TABLE)
            .update(data)
            .eq("id", set_id)
            .execute()
        )
        if not response.data:
            raise PlanPersistenceError(f"Failed to update plan set {set_id}")
        return response.data[0]

    def delete_set(self, set_id: str) -> bool:
        response = (
            self._client.table(SETS_TABLE)
            .delete()
            .eq("id", set_id)
            .execute()
        )
        return len(response.data) > 0

    def get_max_set_order(self, plan_id: str, exercise_id: str) -> Optional[int]:
        response = (
            self._client.table(SETS_TABLE)
            .select("set_order")
            .eq("training_plan_id", plan_id)
            .eq("exercise_id", exercise_id)
            .order("set_order", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0]["set_order"] if response.data else None
