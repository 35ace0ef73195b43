"""In-process wizard sessions, one per logged-in user.

Sessions are never persisted: a restart (or `discard`) drops any unsaved
wizard progress, same as closing the browser tab.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Optional

from rollcall.config import settings
from rollcall.wizard.gateway import RecordsGateway
from rollcall.wizard.session import WizardSession

logger = logging.getLogger(__name__)


class WizardSessionRegistry:
    def __init__(
        self,
        gateway_factory: Callable[[], RecordsGateway],
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self._gateway_factory = gateway_factory
        self._timezone = timezone or settings.timezone
        self._clock = clock
        self._sessions: dict[str, WizardSession] = {}

    def get(self, user_id: str) -> WizardSession:
        """Existing session for the user, or a new one dated today."""
        session = self._sessions.get(user_id)
        if session is None:
            wizard_date = self._clock() if self._clock else None
            session = WizardSession(self._gateway_factory(), wizard_date=wizard_date, timezone=self._timezone)
            self._sessions[user_id] = session
            logger.debug("Started wizard session for user %s dated %s", user_id, session.wizard_date)
        return session

    def restart(self, user_id: str) -> WizardSession:
        """Fresh session (new wizard date) replacing any previous one."""
        self.discard(user_id)
        return self.get(user_id)

    def discard(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
