"""
Exercise catalog port (interface).

The exercise catalog is owned by a separate service; plan composition
only reads it to verify references and to show a plan's exercises.
"""

from typing import Dict, List, Protocol


class ExerciseRepository(Protocol):
    """
    Read-only repository interface for the exercise catalog.
    """

    def find_existing_ids(self, exercise_ids: List[str]) -> List[str]:
        """
        Return which of the given exercise IDs exist in the catalog.

        Args:
            exercise_ids: Exercise IDs to check

        Returns:
            The subset of IDs that exist
        """
        ...

    def get_by_ids(self, exercise_ids: List[str]) -> List[Dict]:
        """
        Get exercises by ID.

        Args:
            exercise_ids: Exercise IDs to fetch

        Returns:
            Exercise dictionaries (order not guaranteed)
        """
        ...
