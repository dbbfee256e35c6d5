import pytest

from user_console.app.domain.models.session_context import SessionContext
from user_console.app.navigation_shell import Navigator, normalize_path
from user_console.app.session_guard import RouteGuard
from user_console.clients.users_api_sdk.auth_store import MemoryTokenStore


class CountingTokenStore(MemoryTokenStore):
    def __init__(self, token: str | None = None) -> None:
        super().__init__(token)
        self.reads = 0

    def get_token(self) -> str | None:
        self.reads += 1
        return super().get_token()


def test_require_session_redirects_to_sign_in_without_token() -> None:
    guard = RouteGuard(SessionContext(MemoryTokenStore()))

    decision = guard.require_session("/users")

    assert decision.allowed is False
    assert decision.redirect_to == "/signin"


def test_require_no_session_redirects_to_dashboard_with_token() -> None:
    guard = RouteGuard(SessionContext(MemoryTokenStore("abc")))

    decision = guard.require_no_session("/signin")

    assert decision.allowed is False
    assert decision.redirect_to == "/dashboard"
    assert guard.require_session("/users").allowed is True


def test_protected_view_without_token_lands_on_sign_in() -> None:
    navigator = Navigator(SessionContext(MemoryTokenStore()))

    result = navigator.navigate("/users")

    assert result.path == "/signin"
    assert result.redirected_from == "/users"
    assert navigator.session.current_path == "/signin"


def test_sign_in_view_with_token_lands_on_dashboard() -> None:
    navigator = Navigator(SessionContext(MemoryTokenStore("abc")))

    result = navigator.navigate("/signin")

    assert result.path == "/dashboard"
    assert result.redirected is True


def test_every_navigation_rereads_the_token_store() -> None:
    tokens = CountingTokenStore("abc")
    navigator = Navigator(SessionContext(tokens))

    assert navigator.navigate("/users").path == "/users"
    reads_after_first = tokens.reads
    tokens.clear()
    assert navigator.navigate("/users").path == "/signin"

    assert reads_after_first >= 1
    assert tokens.reads > reads_after_first


def test_logout_clears_token_and_forces_sign_in() -> None:
    tokens = MemoryTokenStore("abc")
    navigator = Navigator(SessionContext(tokens))

    result = navigator.logout()

    assert tokens.get_token() is None
    assert result.path == "/signin"
    assert navigator.navigate("/dashboard").path == "/signin"


def test_sign_in_stores_token_and_opens_dashboard() -> None:
    tokens = MemoryTokenStore()
    navigator = Navigator(SessionContext(tokens))

    result = navigator.sign_in("  fresh-token  ")

    assert tokens.get_token() == "fresh-token"
    assert result.path == "/dashboard"
    with pytest.raises(ValueError):
        navigator.sign_in("   ")


def test_unknown_path_is_not_found() -> None:
    navigator = Navigator(SessionContext(MemoryTokenStore("abc")))

    result = navigator.navigate("/reports")

    assert result.found is False
    assert result.path is None


def test_menu_lists_only_reachable_routes() -> None:
    tokens = MemoryTokenStore()
    navigator = Navigator(SessionContext(tokens))
    assert [route.path for route in navigator.menu()] == ["/signin", "/signup"]

    tokens.set_token("abc")
    assert [route.path for route in navigator.menu()] == ["/dashboard", "/users"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("/users/", "/users"), ("users", "/users"), ("", "/"), ("/signin?next=/users", "/signin")],
)
def test_normalize_path(raw, expected) -> None:
    assert normalize_path(raw) == expected
