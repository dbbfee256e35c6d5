from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from user_console.app.domain.models.session_context import SessionContext
from user_console.app.session_guard import DEFAULT_PROTECTED_PATH, SIGN_IN_PATH, GuardDecision, RouteGuard

MAX_REDIRECTS = 5


class RouteAccess(str, Enum):
    GUEST = "guest"
    PROTECTED = "protected"


@dataclass(frozen=True)
class NavRoute:
    path: str
    label: str
    access: RouteAccess


ROUTES: list[NavRoute] = [
    NavRoute("/", "Sign in", RouteAccess.GUEST),
    NavRoute("/signin", "Sign in", RouteAccess.GUEST),
    NavRoute("/signup", "Sign up", RouteAccess.GUEST),
    NavRoute("/dashboard", "Dashboard", RouteAccess.PROTECTED),
    NavRoute("/users", "Users", RouteAccess.PROTECTED),
]


@dataclass(frozen=True)
class NavigationResult:
    requested: str
    path: str | None
    route: NavRoute | None = None
    redirected_from: str | None = None

    @property
    def found(self) -> bool:
        return self.route is not None

    @property
    def redirected(self) -> bool:
        return self.redirected_from is not None


def normalize_path(path: str) -> str:
    clean = path.split("?", 1)[0].split("#", 1)[0].strip() or "/"
    if not clean.startswith("/"):
        clean = f"/{clean}"
    if len(clean) > 1:
        clean = clean.rstrip("/") or "/"
    return clean


class Navigator:
    def __init__(
        self,
        session: SessionContext,
        guard: RouteGuard | None = None,
        routes: list[NavRoute] | None = None,
    ) -> None:
        self.session = session
        self.guard = guard or RouteGuard(session)
        self.routes = routes or ROUTES

    def resolve(self, path: str) -> NavRoute | None:
        normalized = normalize_path(path)
        return next((route for route in self.routes if route.path == normalized), None)

    def check(self, route: NavRoute) -> GuardDecision:
        if route.access is RouteAccess.PROTECTED:
            return self.guard.require_session(route.path)
        return self.guard.require_no_session(route.path)

    def navigate(self, path: str) -> NavigationResult:
        requested = normalize_path(path)
        current = requested
        redirected_from: str | None = None
        for _ in range(MAX_REDIRECTS + 1):
            route = self.resolve(current)
            if route is None:
                return NavigationResult(requested=requested, path=None, redirected_from=redirected_from)
            decision = self.check(route)
            if decision.allowed:
                self.session.current_path = route.path
                return NavigationResult(
                    requested=requested,
                    path=route.path,
                    route=route,
                    redirected_from=redirected_from,
                )
            redirected_from = current
            current = normalize_path(decision.redirect_to or SIGN_IN_PATH)
        raise RuntimeError(f"too many redirects navigating to {requested}")

    def sign_in(self, token: str) -> NavigationResult:
        self.session.sign_in(token)
        return self.navigate(DEFAULT_PROTECTED_PATH)

    def logout(self) -> NavigationResult:
        self.session.sign_out()
        return self.navigate(SIGN_IN_PATH)

    def menu(self) -> list[NavRoute]:
        """Routes the current session may open directly, without a redirect."""
        return [route for route in self.routes if route.path != "/" and self.check(route).allowed]
