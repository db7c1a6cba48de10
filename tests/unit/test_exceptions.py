"""
Unit tests for application errors.
"""
from app.core.exceptions import (
    AlreadyMember,
    AppError,
    EmptyContent,
    FileNotFound,
    InvalidToken,
    NotAMember,
    NotFound,
    PayloadTooLarge,
    StorageError,
    UnsupportedType,
)


def test_errors_carry_code_and_status():
    """Each error maps to a stable code and HTTP status."""
    cases = [
        (NotAMember(), "NOT_A_MEMBER", 403),
        (EmptyContent(), "EMPTY_CONTENT", 400),
        (PayloadTooLarge(), "PAYLOAD_TOO_LARGE", 413),
        (UnsupportedType(), "UNSUPPORTED_TYPE", 415),
        (FileNotFound(), "FILE_NOT_FOUND", 404),
        (AlreadyMember(), "ALREADY_MEMBER", 409),
        (InvalidToken(), "INVALID_TOKEN", 401),
        (StorageError(), "SERVICE_ERROR", 503),
    ]
    for error, code, status in cases:
        assert isinstance(error, AppError)
        assert error.code == code
        assert error.status_code == status
        assert error.detail["code"] == code
        assert error.detail["message"] == error.message


def test_custom_message_overrides_default():
    error = NotAMember("Only room owners can add members.")
    assert error.message == "Only room owners can add members."
    assert error.detail == {"code": "NOT_A_MEMBER", "message": "Only room owners can add members."}


def test_not_found_names_resource():
    assert NotFound("Message").message == "Message not found."
