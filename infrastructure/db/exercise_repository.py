"""
Supabase implementation of ExerciseRepository.

Read-only access to the exercises catalog; plan composition only needs
to check that referenced exercises exist and to fetch them for plan detail.
"""

import logging
from typing import Dict, List

from supabase import Client

logger = logging.getLogger(__name__)


class SupabaseExerciseRepository:
    """Supabase-backed exercise catalog reader."""

    def __init__(self, client: Client):
        """
        Initialize repository with Supabase client.

        Args:
            client: Authenticated Supabase client
        """
        self._client = client

    def find_existing_ids(self, exercise_ids: List[str]) -> List[str]:
        """
        Get which of the given exercise IDs exist.

        Args:
            exercise_ids: IDs to check

        Returns:
            The subset of IDs present in the catalog
        """
        if not exercise_ids:
            return []
        response = (
            self._client.table("exercises")
            .select("id")
            .in_("id", exercise_ids)
            .execute()
        )
        return [row["id"] for row in response.data]

    def get_by_ids(self, exercise_ids: List[str]) -> List[Dict]:
        """
        Get catalog rows for the given exercise IDs.

        Args:
            exercise_ids: IDs to fetch

        Returns:
            List of exercise dictionaries (order not guaranteed)
        """
        if not exercise_ids:
            return []
        response = (
            self._client.table("exercises")
            .select("*")
            .in_("id", exercise_ids)
            .execute()
        )
        return response.data
