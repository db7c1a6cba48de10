"""
Application exceptions.
Each one is an HTTPException with detail={"code", "message"} so routers can
let them propagate; the WebSocket handler turns them into error events.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ERROR"
    default_message = "Request failed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(
            status_code=self.status_code,
            detail={"code": self.code, "message": self.message},
        )


# --- Authentication ---

class NotAuthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "NOT_AUTHENTICATED"
    default_message = "Authentication required."


class SessionExpired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "SESSION_EXPIRED"
    default_message = "Session expired or invalid. Please log in again."


class InvalidToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_TOKEN"
    default_message = "Missing or invalid token."


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password."


class EmailAlreadyExists(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "EMAIL_EXISTS"
    default_message = "A user with this email already exists."


# --- Authorization / conflicts ---

class NotAMember(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "NOT_A_MEMBER"
    default_message = "You are not a member of this room."


class AlreadyMember(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_MEMBER"
    default_message = "User is already a member of this room."


# --- Input validation ---

class EmptyContent(AppError):
    code = "EMPTY_CONTENT"
    default_message = "Message content cannot be empty or whitespace only."


class PayloadTooLarge(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "PAYLOAD_TOO_LARGE"
    default_message = "File exceeds the maximum upload size."


class UnsupportedType(AppError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    code = "UNSUPPORTED_TYPE"
    default_message = "File type is not allowed."


# --- Lookups ---

class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found.")


class FileNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "FILE_NOT_FOUND"
    default_message = "File not found in this room."


# --- Storage ---

class StorageError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_ERROR"
    default_message = "Storage failure. Please try again."
