from user_console.clients.users_api_sdk.auth_store import FileTokenStore, MemoryTokenStore, TokenStore
from user_console.clients.users_api_sdk.config import SDKConfig
from user_console.clients.users_api_sdk.errors import ApiError, RemoteRejected, TransportError, ValidationError
from user_console.clients.users_api_sdk.http_client import HttpClient
from user_console.clients.users_api_sdk.modules.users_client import UsersClient

__all__ = [
    "SDKConfig",
    "ApiError",
    "ValidationError",
    "RemoteRejected",
    "TransportError",
    "HttpClient",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
    "UsersClient",
]
