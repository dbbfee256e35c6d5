from __future__ import annotations

import asyncio

import httpx

from user_console.app.application.confirmation_flow import ConfirmationFlow
from user_console.app.application.operation_coordinator import OperationCoordinator
from user_console.app.application.state.record_store import RecordStore
from user_console.app.config import ConsoleSettings
from user_console.app.domain.models.session_context import SessionContext
from user_console.app.infrastructure.logging.logger import configure_logging
from user_console.app.infrastructure.sdk_adapter.users_adapter import UsersAdapter
from user_console.app.navigation_shell import NavigationResult, Navigator
from user_console.app.ui.table_model import TableModel, ViewParams
from user_console.app.ui.views.dashboard_view import DashboardView
from user_console.app.ui.views.login_view import LoginView
from user_console.app.ui.views.users_view import UsersView
from user_console.clients.users_api_sdk.auth_store import FileTokenStore, MemoryTokenStore, TokenStore
from user_console.clients.users_api_sdk.http_client import HttpClient


def build_token_store(settings: ConsoleSettings) -> TokenStore:
    if settings.token_store == "memory":
        return MemoryTokenStore()
    return FileTokenStore()


def _print_runtime_config(settings: ConsoleSettings) -> None:
    print("USER CONSOLE")
    print(f"Base URL: {settings.base_url}")
    print(f"Timeout: {settings.timeout_seconds}s")
    print(f"GET Retry: {settings.retry_max_attempts} attempts, base backoff {settings.retry_backoff_ms}ms")
    print(f"Bulk delete: {settings.bulk_delete_strategy}")


class ConsoleApp:
    """Text-mode shell: every screen change goes through the navigator and its guard."""

    def __init__(
        self,
        settings: ConsoleSettings | None = None,
        token_store: TokenStore | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or ConsoleSettings()
        self.session = SessionContext(token_store or build_token_store(self.settings))
        self.navigator = Navigator(self.session)
        self.runner = asyncio.Runner()
        self.http = HttpClient(self.settings.sdk_config(), client=client)
        self.store = RecordStore()
        self.coordinator = OperationCoordinator(
            UsersAdapter(self.http, self.session.token_store),
            self.store,
            bulk_strategy=self.settings.bulk_delete_strategy,
        )
        self.table = TableModel(self.store, ViewParams(page_size=self.settings.page_size))
        self.confirmation = ConfirmationFlow(self.coordinator)
        self.login_view = LoginView()
        self.dashboard_view = DashboardView()
        self.users_view = UsersView(self.coordinator, self.table, self.confirmation, run=self.runner.run)

    def run(self, start_path: str = "/") -> None:
        try:
            result: NavigationResult | None = self.navigator.navigate(start_path)
            while result is not None:
                result = self.show(result)
        finally:
            self.runner.run(self.http.aclose())
            self.runner.close()

    def show(self, result: NavigationResult) -> NavigationResult | None:
        if result.redirected:
            print(f"[redirect] {result.redirected_from} -> {result.path}")
        if not result.found:
            print(f"[not-found] {result.requested}")
            return self.navigator.navigate("/")

        if result.path in ("/", "/signin"):
            return self.sign_in()
        if result.path == "/signup":
            self.login_view.sign_up_notice()
            return self.navigator.navigate("/signin")
        if result.path == "/users":
            self.users_view.render()
            return self.navigator.navigate("/dashboard")
        return self.dashboard()

    def sign_in(self) -> NavigationResult | None:
        token = self.login_view.prompt_token()
        if not token:
            return None
        if token.lower() == "u":
            return self.navigator.navigate("/signup")
        return self.navigator.sign_in(token)

    def dashboard(self) -> NavigationResult | None:
        option = self.dashboard_view.render(self.navigator.menu())
        if option == "0":
            return None
        if option == "l":
            # selection and cached rows belong to the signed-out session
            self.table.clear_selection()
            self.store.replace_all(())
            return self.navigator.logout()
        if option.startswith("/"):
            return self.navigator.navigate(option)
        print("Invalid option.")
        return self.navigator.navigate("/dashboard")


def main() -> None:
    settings = ConsoleSettings()
    configure_logging(settings.log_level)
    _print_runtime_config(settings)
    ConsoleApp(settings).run()


if __name__ == "__main__":
    main()
