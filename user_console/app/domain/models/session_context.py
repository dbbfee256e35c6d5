from __future__ import annotations

from dataclasses import dataclass

from user_console.clients.users_api_sdk.auth_store import TokenStore


@dataclass
class SessionContext:
    """Session marker threaded through the route guard and the logout action.

    The token store is read on every call; nothing is cached here.
    """

    token_store: TokenStore
    current_path: str = "/signin"

    def has_token(self) -> bool:
        return bool(self.token_store.get_token())

    def sign_in(self, token: str) -> None:
        cleaned = token.strip()
        if not cleaned:
            raise ValueError("token must not be empty")
        self.token_store.set_token(cleaned)

    def sign_out(self) -> None:
        self.token_store.clear()
