"""
Draft recovery for the create-mode plan wizard.

An unfinished wizard is mirrored into a single storage slot so it can be
offered back to the user later:
- Saves are skipped in edit mode, for an empty state, and when the content
  has not changed since the last write
- Drafts older than the TTL are deleted lazily on load
- Unreadable drafts are reported as "no draft"

DraftRecovery never mutates the wizard; restoring a draft is an explicit
caller step (see PlanWizard.restore_draft).
"""

import asyncio
import json
import logging
import time
from typing import Callable, Optional

from application.ports import DraftStorage
from core.constants import DRAFT_AUTOSAVE_INTERVAL_SECONDS, DRAFT_KEY, DRAFT_TTL_DAYS
from models.wizard import Draft, WizardMode, WizardState

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def wizard_state_to_draft(state: WizardState, timestamp: float) -> Draft:
    """Snapshot the draftable parts of a wizard state."""
    return Draft(
        step=state.current_step,
        timestamp=timestamp,
        basics=state.basics,
        selected_exercise_ids=list(state.selected_exercise_ids),
        sets_by_exercise={
            exercise_id: list(sets)
            for exercise_id, sets in state.sets_by_exercise.items()
        },
    )


def draft_to_wizard_state(draft: Draft) -> WizardState:
    """
    Convert a draft back into a create-mode wizard state.

    Completed steps are not part of a draft and start empty.
    """
    return WizardState(
        mode=WizardMode.CREATE,
        current_step=draft.step,
        basics=draft.basics,
        selected_exercise_ids=list(draft.selected_exercise_ids),
        sets_by_exercise={
            exercise_id: list(sets)
            for exercise_id, sets in draft.sets_by_exercise.items()
        },
    )


class DraftRecovery:
    """
    Save, load and discard the wizard draft.

    Args:
        storage: Key/value store holding the draft
        key: Storage slot for the draft
        ttl_seconds: Maximum draft age before it is discarded on load
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        storage: DraftStorage,
        key: str = DRAFT_KEY,
        ttl_seconds: float = DRAFT_TTL_DAYS * SECONDS_PER_DAY,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage
        self._key = key
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._last_content: Optional[str] = None

    @staticmethod
    def _content_of(draft: Draft) -> str:
        data = draft.to_dict()
        data.pop("timestamp", None)
        return json.dumps(data, sort_keys=True)

    def save(self, state: WizardState) -> bool:
        """
        Write the state to the draft slot if it changed.

        Returns:
            True if the draft was written
        """
        if state.mode == WizardMode.EDIT or state.is_empty:
            return False

        draft = wizard_state_to_draft(state, self._clock())
        try:
            content = self._content_of(draft)
            if content == self._last_content:
                return False
            self._storage.set(self._key, json.dumps(draft.to_dict()))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save plan draft: {e}")
            return False

        self._last_content = content
        return True

    def load(self) -> Optional[Draft]:
        """
        Read the draft, if any.

        Drafts older than the TTL are deleted and ignored.

        Returns:
            The draft, or None if absent, stale or unreadable
        """
        try:
            raw = self._storage.get(self._key)
            if not raw:
                return None
            draft = Draft.from_dict(json.loads(raw))
        except (OSError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable plan draft: {e}")
            return None

        age = self._clock() - draft.timestamp
        if age > self._ttl_seconds:
            logger.warning(f"Discarding plan draft older than {self._ttl_seconds:.0f}s")
            self._remove()
            return None

        return draft

    def discard(self) -> None:
        """Delete the draft and forget the last written content."""
        self._remove()
        self._last_content = None

    def _remove(self) -> None:
        try:
            self._storage.remove(self._key)
        except OSError as e:
            logger.error(f"Failed to remove plan draft: {e}")


class DraftAutosaver:
    """
    Periodic and change-triggered draft saves.

    Runs as an asyncio task on the wizard's event loop, so timer saves and
    change saves never interleave mid-write. Register ``on_change`` as a
    wizard listener to save on every mutation.

    Args:
        recovery: Draft recovery used for every save
        get_state: Returns the current wizard state
        interval_seconds: Delay between periodic saves
    """

    def __init__(
        self,
        recovery: DraftRecovery,
        get_state: Callable[[], WizardState],
        interval_seconds: float = DRAFT_AUTOSAVE_INTERVAL_SECONDS,
    ):
        self._recovery = recovery
        self._get_state = get_state
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_change(self, state: WizardState) -> None:
        self._recovery.save(state)

    def start(self) -> None:
        """Save now and schedule periodic saves on the running loop."""
        if self.is_running:
            return
        self._recovery.save(self._get_state())
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel periodic saves and wait for the task to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._recovery.save(self._get_state())
