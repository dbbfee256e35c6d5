from user_console.app.infrastructure.errors.error_mapper import DetailMessage, ErrorMapper, FieldErrorList
from user_console.clients.users_api_sdk.errors import RemoteRejected, TransportError, ValidationError


def _rejected(details, status_code: int = 422) -> RemoteRejected:
    return RemoteRejected(code="VALIDATION_ERROR", message="HTTP 422", details=details, status_code=status_code)


def test_field_error_list_is_flattened_one_line_per_field() -> None:
    error = _rejected(
        [
            {"type": "string_too_short", "loc": ["body", "name"], "msg": "String should have at least 3 characters"},
            {"type": "value_error", "loc": ["body", "email"], "msg": "Value error, value is not a valid email address"},
            {"type": "string_too_short", "loc": ["body", "new_password"], "msg": "String should have at least 8 characters"},
        ]
    )

    message = ErrorMapper.to_display_message(error, "Failed to update user.")

    assert message.splitlines() == [
        "Name: Must be at least 3 characters.",
        "Email: Enter a valid email address.",
        "New password: Must be at least 8 characters.",
    ]


def test_unknown_field_and_message_pass_through() -> None:
    error = _rejected([{"loc": ["body", "nickname"], "msg": "Too fancy"}])

    assert ErrorMapper.to_display_message(error) == "nickname: Too fancy"


def test_string_detail_used_as_is() -> None:
    error = _rejected("Email already registered", status_code=400)

    assert ErrorMapper.parse_detail(error.details) == DetailMessage("Email already registered")
    assert ErrorMapper.to_display_message(error, "Failed to create user.") == "Email already registered"


def test_missing_detail_falls_back_to_operation_message() -> None:
    error = RemoteRejected(code="INTERNAL_ERROR", message="HTTP 500", details=None, status_code=500)

    assert ErrorMapper.to_display_message(error, "Failed to create user.") == "Failed to create user."


def test_malformed_detail_list_is_not_a_field_error_list() -> None:
    assert ErrorMapper.parse_detail([{"unexpected": True}]) is None
    assert isinstance(ErrorMapper.parse_detail([{"loc": ["body"], "msg": "bad"}]), FieldErrorList)


def test_transport_and_validation_errors_use_their_message() -> None:
    transport = TransportError(code="NETWORK_ERROR", message="Could not reach the users service.")
    validation = ValidationError(code="VALIDATION_ERROR", message="Password must be at least 8 characters.")

    assert ErrorMapper.to_display_message(transport, "Failed to delete user.") == "Could not reach the users service."
    assert ErrorMapper.to_display_message(validation) == "Password must be at least 8 characters."


def test_payload_for_unexpected_exception() -> None:
    payload = ErrorMapper.to_payload(RuntimeError("boom"), "Failed to load users.")

    assert payload["code"] == "INTERNAL_ERROR"
    assert payload["message"] == "Failed to load users."
