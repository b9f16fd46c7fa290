"""
Client-side working models for the plan wizard.

These are plain dataclasses rather than pydantic models: the wizard stores
whatever the user typed (including out-of-range values) and reports validity
through its step predicates instead of rejecting input.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from models.plan import PlanGoal


class WizardMode(str, Enum):
    """Wizard operating mode, fixed for the lifetime of a wizard."""

    CREATE = "create"
    EDIT = "edit"


FIRST_STEP = 1
LAST_STEP = 3


@dataclass
class SetDescriptor:
    """
    One prescribed set: repetitions x weight at a position.

    Attributes:
        repetitions: Number of repetitions (valid range 1-999)
        weight: Load in kilograms (valid range 0-999.99)
        order: 0-based position among the exercise's sets
        id: Persisted set ID when hydrated from an existing plan
    """

    repetitions: int
    weight: float
    order: int = 0
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "repetitions": self.repetitions,
            "weight": self.weight,
            "set_order": self.order,
        }
        if self.id:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SetDescriptor":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a set object, got {type(data).__name__}")
        return cls(
            repetitions=data["repetitions"],
            weight=data["weight"],
            order=data.get("set_order", data.get("order", 0)),
            id=data.get("id"),
        )


@dataclass
class PlanBasics:
    """Step 1 data: plan name, description and goal."""

    name: str
    description: Optional[str] = None
    goal: Optional[PlanGoal] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        if self.goal is not None:
            data["goal"] = PlanGoal(self.goal).value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanBasics":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a basics object, got {type(data).__name__}")
        goal = data.get("goal")
        return cls(
            name=data["name"],
            description=data.get("description"),
            goal=PlanGoal(goal) if goal else None,
        )


@dataclass
class ExerciseSetConfig:
    """The sets configured for one exercise, as propagated to the wizard."""

    exercise_id: str
    sets: List[SetDescriptor] = field(default_factory=list)


@dataclass
class WizardState:
    """
    The wizard's in-memory working document.

    Invariant: every key of ``sets_by_exercise`` is in
    ``selected_exercise_ids``.
    """

    mode: WizardMode
    current_step: int = FIRST_STEP
    completed_steps: List[int] = field(default_factory=list)
    basics: Optional[PlanBasics] = None
    selected_exercise_ids: List[str] = field(default_factory=list)
    sets_by_exercise: Dict[str, List[SetDescriptor]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when nothing has been entered yet."""
        return (
            self.basics is None
            and not self.selected_exercise_ids
            and not self.sets_by_exercise
        )


@dataclass
class Draft:
    """
    A durable snapshot of an unfinished create-mode wizard.

    ``timestamp`` is seconds since the epoch at the time of saving.
    """

    step: int
    timestamp: float
    basics: Optional[PlanBasics] = None
    selected_exercise_ids: List[str] = field(default_factory=list)
    sets_by_exercise: Dict[str, List[SetDescriptor]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "basics": self.basics.to_dict() if self.basics else None,
            "selected_exercise_ids": list(self.selected_exercise_ids),
            "sets_by_exercise": {
                exercise_id: [s.to_dict() for s in sets]
                for exercise_id, sets in self.sets_by_exercise.items()
            },
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Draft":
        """
        Parse a stored draft.

        Raises:
            KeyError: If step or timestamp is missing
            ValueError: If any part has the wrong shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a draft object, got {type(data).__name__}")
        basics = data.get("basics")
        selected_ids = data.get("selected_exercise_ids") or []
        sets_by_exercise = data.get("sets_by_exercise") or {}
        if not isinstance(selected_ids, list):
            raise ValueError("selected_exercise_ids must be a list")
        if not isinstance(sets_by_exercise, dict):
            raise ValueError("sets_by_exercise must be an object")
        if not all(isinstance(sets, list) for sets in sets_by_exercise.values()):
            raise ValueError("sets_by_exercise values must be lists")
        return cls(
            step=int(data["step"]),
            timestamp=float(data["timestamp"]),
            basics=PlanBasics.from_dict(basics) if basics else None,
            selected_exercise_ids=[str(i) for i in selected_ids],
            sets_by_exercise={
                exercise_id: [SetDescriptor.from_dict(s) for s in sets]
                for exercise_id, sets in sets_by_exercise.items()
            },
        )
