from __future__ import annotations

import logging
from dataclasses import dataclass

from user_console.app.domain.models.session_context import SessionContext

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/signin"
DEFAULT_PROTECTED_PATH = "/dashboard"


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    redirect_to: str | None = None
    reason: str | None = None


class RouteGuard:
    """Presence-only session checks, evaluated on every navigation.

    The token is never decoded; the token store is read on each call.
    """

    def __init__(
        self,
        session: SessionContext,
        sign_in_path: str = SIGN_IN_PATH,
        default_protected_path: str = DEFAULT_PROTECTED_PATH,
    ) -> None:
        self.session = session
        self.sign_in_path = sign_in_path
        self.default_protected_path = default_protected_path

    def require_session(self, path: str) -> GuardDecision:
        if self.session.has_token():
            return GuardDecision(allowed=True)
        logger.debug("redirect %s -> %s (missing_token)", path, self.sign_in_path)
        return GuardDecision(allowed=False, redirect_to=self.sign_in_path, reason="missing_token")

    def require_no_session(self, path: str) -> GuardDecision:
        if not self.session.has_token():
            return GuardDecision(allowed=True)
        logger.debug("redirect %s -> %s (session_present)", path, self.default_protected_path)
        return GuardDecision(allowed=False, redirect_to=self.default_protected_path, reason="session_present")
