"""
Factory for client-side plan wizard sessions.

Wires a PlanWizard to its submission transport, draft recovery and
autosaver using Settings, the same way create_app() wires the API.

Usage:
    from backend.wizard_session import create_wizard_session

    session = create_wizard_session(auth_token=token)
    if session.pending_draft:
        session.wizard.restore_draft(session.pending_draft)
    session.autosaver.start()
    ...
    await session.close()
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from backend.settings import Settings, get_settings
from infrastructure.draft_storage import FileDraftStorage
from infrastructure.plan_client import PlanApiClient
from models.wizard import Draft, WizardMode
from services.draft_recovery import DraftAutosaver, DraftRecovery
from services.plan_wizard import PlanWizard

logger = logging.getLogger(__name__)


@dataclass
class WizardSession:
    """A wired wizard with its draft machinery."""

    wizard: PlanWizard
    recovery: DraftRecovery
    autosaver: DraftAutosaver
    pending_draft: Optional[Draft] = None

    async def close(self) -> None:
        """Stop periodic autosaves and detach the change listener."""
        await self.autosaver.stop()
        self.wizard.remove_listener(self.autosaver.on_change)


def create_wizard_session(
    auth_token: str,
    mode: WizardMode = WizardMode.CREATE,
    plan_id: Optional[str] = None,
    initial_data: Optional[Dict[str, Any]] = None,
    settings: Optional[Settings] = None,
) -> WizardSession:
    """
    Create a wizard wired to the plans API and the local draft store.

    In create mode any saved draft is loaded (not applied) and returned as
    ``pending_draft`` so the caller can offer to restore it.

    Args:
        auth_token: Caller's bearer token for the plans API
        mode: Create or edit
        plan_id: Plan being edited (edit mode)
        initial_data: Plan detail for edit mode hydration
        settings: Optional Settings instance; defaults to get_settings()

    Returns:
        WizardSession: The wired session (autosaver not yet started)
    """
    if settings is None:
        settings = get_settings()

    recovery = DraftRecovery(
        storage=FileDraftStorage(settings.draft_storage_dir),
        ttl_seconds=settings.draft_ttl_seconds,
    )
    submitter = PlanApiClient(
        base_url=settings.plans_api_url,
        auth_token=auth_token,
        timeout=settings.plans_api_timeout_seconds,
    )
    wizard = PlanWizard(
        mode=mode,
        submitter=submitter,
        draft_recovery=recovery,
        plan_id=plan_id,
        initial_data=initial_data,
        max_plans=settings.max_plans_per_user,
    )
    autosaver = DraftAutosaver(
        recovery,
        get_state=lambda: wizard.state,
        interval_seconds=settings.draft_autosave_interval_seconds,
    )
    wizard.add_listener(autosaver.on_change)

    pending_draft = recovery.load() if mode == WizardMode.CREATE else None
    if pending_draft is not None:
        logger.info(f"Found plan draft from step {pending_draft.step}")

    return WizardSession(
        wizard=wizard,
        recovery=recovery,
        autosaver=autosaver,
        pending_draft=pending_draft,
    )
