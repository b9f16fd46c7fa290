"""
Set list editing for a single exercise.

SetListEngine owns the ordered list of (repetitions, weight) sets for one
exercise in the plan wizard: add, remove, edit, bulk add and renumbering.
Values are stored as entered; validity is reported, never enforced, so the
wizard can gate navigation on it.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from core.constants import (
    DEFAULT_SET_REPETITIONS,
    DEFAULT_SET_WEIGHT,
    MAX_BULK_ADD_COUNT,
    MAX_REPETITIONS,
    MAX_WEIGHT,
    MIN_BULK_ADD_COUNT,
    MIN_REPETITIONS,
    MIN_WEIGHT,
)
from models.wizard import SetDescriptor


def create_default_set(order: int = 0) -> SetDescriptor:
    """Create the default set (1 repetition at 2.5 kg)."""
    return SetDescriptor(
        repetitions=DEFAULT_SET_REPETITIONS,
        weight=DEFAULT_SET_WEIGHT,
        order=order,
    )


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_set(set_: SetDescriptor) -> bool:
    """Check a single set against the repetition and weight bounds."""
    return (
        _is_number(set_.repetitions)
        and MIN_REPETITIONS <= set_.repetitions <= MAX_REPETITIONS
        and _is_number(set_.weight)
        and MIN_WEIGHT <= set_.weight <= MAX_WEIGHT
        and _is_number(set_.order)
        and set_.order >= 0
    )


def validate_sets(sets: Optional[List[SetDescriptor]]) -> bool:
    """
    Validate a full set list.

    Returns:
        True if the list is non-empty and every set is valid
    """
    if not sets:
        return False
    return all(is_valid_set(s) for s in sets)


def renumber_sets(sets: List[SetDescriptor]) -> List[SetDescriptor]:
    """Return copies of the sets with a dense 0-based order."""
    return [replace(s, order=index) for index, s in enumerate(sets)]


@dataclass
class BulkAddRequest:
    """Parameters for adding several identical sets at once."""

    count: int = 3
    repetitions: int = 10
    weight: float = 0.0

    def validate(self) -> Dict[str, str]:
        """
        Validate the request.

        Returns:
            Mapping of field name to error message; empty when valid
        """
        errors: Dict[str, str] = {}
        if not MIN_BULK_ADD_COUNT <= self.count <= MAX_BULK_ADD_COUNT:
            errors["count"] = (
                f"Number of sets must be between {MIN_BULK_ADD_COUNT} "
                f"and {MAX_BULK_ADD_COUNT}"
            )
        if not MIN_REPETITIONS <= self.repetitions <= MAX_REPETITIONS:
            errors["repetitions"] = (
                f"Repetitions must be between {MIN_REPETITIONS} and {MAX_REPETITIONS}"
            )
        if not MIN_WEIGHT <= self.weight <= MAX_WEIGHT:
            errors["weight"] = f"Weight must be between {MIN_WEIGHT:g} and {MAX_WEIGHT}"
        return errors


class SetListEngine:
    """
    Ordered set list for one exercise.

    The engine never drops below one set through ``remove_set``; an empty
    list can only come from ``replace`` with an empty list.
    """

    def __init__(self, sets: Optional[List[SetDescriptor]] = None):
        self._sets: List[SetDescriptor] = list(sets) if sets else []

    @property
    def sets(self) -> List[SetDescriptor]:
        """A copy of the current sets."""
        return list(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    @property
    def is_valid(self) -> bool:
        return validate_sets(self._sets)

    def replace(self, sets: List[SetDescriptor]) -> None:
        """Replace the whole list as given, without renumbering."""
        self._sets = list(sets)

    def add_set(self) -> SetDescriptor:
        """
        Append a set.

        Copies the last set when it has positive repetitions and weight,
        otherwise appends the default set.

        Returns:
            The appended set
        """
        last = self._sets[-1] if self._sets else None
        if (
            last is not None
            and _is_number(last.repetitions)
            and _is_number(last.weight)
            and last.repetitions > 0
            and last.weight > 0
        ):
            new_set = SetDescriptor(
                repetitions=last.repetitions,
                weight=last.weight,
                order=len(self._sets),
            )
        else:
            new_set = create_default_set(order=len(self._sets))
        self._sets.append(new_set)
        return new_set

    def remove_set(self, index: int) -> bool:
        """
        Remove the set at ``index`` and renumber the rest.

        Returns:
            True if a set was removed; False for an out-of-range index or
            when it is the only remaining set
        """
        if not 0 <= index < len(self._sets) or len(self._sets) == 1:
            return False
        del self._sets[index]
        self.renumber()
        return True

    def update_set(
        self,
        index: int,
        repetitions: Optional[int] = None,
        weight: Optional[float] = None,
    ) -> bool:
        """
        Edit the set at ``index``.

        Returns:
            True if the index exists
        """
        if not 0 <= index < len(self._sets):
            return False
        current = self._sets[index]
        self._sets[index] = replace(
            current,
            repetitions=current.repetitions if repetitions is None else repetitions,
            weight=current.weight if weight is None else weight,
        )
        return True

    def bulk_add(self, request: BulkAddRequest) -> Dict[str, str]:
        """
        Append ``request.count`` identical sets.

        Nothing is appended when the request is invalid.

        Returns:
            Field errors from validation; empty on success
        """
        errors = request.validate()
        if errors:
            return errors
        self._sets.extend(
            SetDescriptor(repetitions=request.repetitions, weight=request.weight)
            for _ in range(request.count)
        )
        self.renumber()
        return {}

    def renumber(self) -> None:
        """Rewrite every set's order as its 0-based position."""
        self._sets = renumber_sets(self._sets)

    def set_errors(self, index: int) -> Dict[str, str]:
        """Field error messages for the set at ``index``."""
        set_ = self._sets[index]
        errors: Dict[str, str] = {}
        if not _is_number(set_.repetitions) or not (
            MIN_REPETITIONS <= set_.repetitions <= MAX_REPETITIONS
        ):
            errors["repetitions"] = (
                f"Repetitions must be between {MIN_REPETITIONS} and {MAX_REPETITIONS}"
            )
        if not _is_number(set_.weight) or not MIN_WEIGHT <= set_.weight <= MAX_WEIGHT:
            errors["weight"] = (
                f"Weight must be between {MIN_WEIGHT:g} and {MAX_WEIGHT} kg"
            )
        return errors
