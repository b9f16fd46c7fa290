"""
Exercise set configuration for the third wizard step.

ExerciseSetConfigurator owns the ordered list of the plan's exercises, each
with its own SetListEngine, and keeps at most one exercise expanded. Every
mutation recomputes the derived ``config`` (ordered exercise id + sets),
which is the only value handed back to the wizard.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from models.wizard import ExerciseSetConfig, SetDescriptor
from services.set_list import BulkAddRequest, SetListEngine, create_default_set, validate_sets

logger = logging.getLogger(__name__)

ConfigListener = Callable[[List[ExerciseSetConfig]], None]
RemovalListener = Callable[[str], None]


@dataclass
class ExerciseWithSets:
    """
    One configured exercise.

    Attributes:
        exercise: Catalog row for the exercise (must contain "id")
        engine: Set list for the exercise
        order: 0-based position in the plan
    """

    exercise: Dict
    engine: SetListEngine
    order: int

    @property
    def exercise_id(self) -> str:
        return self.exercise["id"]

    @property
    def sets(self) -> List[SetDescriptor]:
        return self.engine.sets


def initialize_exercises_with_sets(
    exercises: List[Dict],
    initial_sets: Optional[Dict[str, List[SetDescriptor]]] = None,
) -> List[ExerciseWithSets]:
    """
    Pair each exercise with its prior sets or a default set.

    Prior sets that are missing, empty or invalid are replaced by a single
    default set without raising.

    Args:
        exercises: Catalog rows in plan order
        initial_sets: Optional prior sets keyed by exercise ID

    Returns:
        Exercises with sets and dense order
    """
    initial_sets = initial_sets or {}
    result = []
    for index, exercise in enumerate(exercises):
        existing = initial_sets.get(exercise["id"])
        if existing and validate_sets(existing):
            sets = list(existing)
        else:
            if existing:
                logger.warning(
                    f"Discarding invalid sets for exercise {exercise['id']}, using default set"
                )
            sets = [create_default_set(0)]
        result.append(
            ExerciseWithSets(exercise=exercise, engine=SetListEngine(sets), order=index)
        )
    return result


class ExerciseSetConfigurator:
    """
    Ordered exercises-with-sets for a whole plan.

    Args:
        exercises: Selected catalog rows in plan order
        initial_sets: Optional prior sets keyed by exercise ID
        on_exercise_removed: Called with the exercise ID after a removal
        on_config_changed: Called with the derived config after every mutation
    """

    def __init__(
        self,
        exercises: List[Dict],
        initial_sets: Optional[Dict[str, List[SetDescriptor]]] = None,
        on_exercise_removed: Optional[RemovalListener] = None,
        on_config_changed: Optional[ConfigListener] = None,
    ):
        self._items = initialize_exercises_with_sets(exercises, initial_sets)
        self._expanded_id: Optional[str] = (
            self._items[0].exercise_id if self._items else None
        )
        self._on_exercise_removed = on_exercise_removed
        self._on_config_changed = on_config_changed
        self._config: List[ExerciseSetConfig] = []
        self._refresh()

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def exercises_with_sets(self) -> List[ExerciseWithSets]:
        return list(self._items)

    @property
    def expanded_exercise_id(self) -> Optional[str]:
        return self._expanded_id

    @property
    def config(self) -> List[ExerciseSetConfig]:
        """Submission-ready configuration in plan order."""
        return list(self._config)

    @property
    def is_valid(self) -> bool:
        """True if there is at least one exercise and all set lists are valid."""
        return bool(self._items) and all(item.engine.is_valid for item in self._items)

    # -------------------------------------------------------------------------
    # Exercise-level operations
    # -------------------------------------------------------------------------

    def toggle(self, exercise_id: str) -> None:
        """Expand an exercise, or collapse it if it is already expanded."""
        if self._find(exercise_id) is None:
            return
        self._expanded_id = None if self._expanded_id == exercise_id else exercise_id

    def set_sets(self, exercise_id: str, sets: List[SetDescriptor]) -> None:
        """
        Replace one exercise's sets as given.

        Order fields are not renumbered.
        """
        item = self._find(exercise_id)
        if item is None:
            return
        item.engine.replace(sets)
        self._refresh()

    def remove_exercise(self, exercise_id: str) -> None:
        """
        Remove an exercise and renumber the rest.

        If the removed exercise was expanded, the first remaining exercise
        becomes expanded (or none when the list is empty).
        """
        if self._find(exercise_id) is None:
            return

        self._items = [item for item in self._items if item.exercise_id != exercise_id]
        if self._expanded_id == exercise_id:
            self._expanded_id = self._items[0].exercise_id if self._items else None
        self._renumber()
        self._refresh()

        if self._on_exercise_removed is not None:
            self._on_exercise_removed(exercise_id)

    def reorder(self, from_id: str, to_id: Optional[str]) -> None:
        """
        Move ``from_id`` to the position currently held by ``to_id``.

        This is an array move, not a swap. No-op when ``to_id`` is None
        (drag cancelled), when the IDs are equal, or when either is unknown.
        """
        if to_id is None or from_id == to_id:
            return

        ids = [item.exercise_id for item in self._items]
        if from_id not in ids or to_id not in ids:
            return

        old_index = ids.index(from_id)
        new_index = ids.index(to_id)
        item = self._items.pop(old_index)
        self._items.insert(new_index, item)
        self._renumber()
        self._refresh()

    # -------------------------------------------------------------------------
    # Set-level operations (delegated to each exercise's SetListEngine)
    # -------------------------------------------------------------------------

    def add_set(self, exercise_id: str) -> None:
        item = self._find(exercise_id)
        if item is None:
            return
        item.engine.add_set()
        self._refresh()

    def remove_set(self, exercise_id: str, index: int) -> None:
        item = self._find(exercise_id)
        if item is not None and item.engine.remove_set(index):
            self._refresh()

    def update_set(
        self,
        exercise_id: str,
        index: int,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
    ) -> None:
        item = self._find(exercise_id)
        if item is not None and item.engine.update_set(index, repetitions, weight):
            self._refresh()

    def bulk_add(self, exercise_id: str, request: BulkAddRequest) -> Dict[str, str]:
        """
        Append several identical sets to an exercise.

        Returns:
            Field errors; empty on success
        """
        item = self._find(exercise_id)
        if item is None:
            return {}
        errors = item.engine.bulk_add(request)
        if not errors:
            self._refresh()
        return errors

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _find(self, exercise_id: str) -> Optional[ExerciseWithSets]:
        for item in self._items:
            if item.exercise_id == exercise_id:
                return item
        return None

    def _renumber(self) -> None:
        for index, item in enumerate(self._items):
            item.order = index

    def _refresh(self) -> None:
        self._config = [
            ExerciseSetConfig(exercise_id=item.exercise_id, sets=item.sets)
            for item in self._items
        ]
        if self._on_config_changed is not None:
            self._on_config_changed(self.config)
