"""Domain errors raised by the service layer.

Services never raise ``HTTPException``; ``main.create_app`` maps each of these
to a status code. Input-shape violations are reported by pydantic before a
service is reached and are not redeclared here.
"""


class ArchiveError(Exception):
    status_code = 500
    detail = "Internal error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class DuplicateEmail(ArchiveError):
    status_code = 409
    detail = "User with this email already exists"


class InvalidCredentials(ArchiveError):
    status_code = 401
    detail = "Invalid credentials"


class Unauthenticated(ArchiveError):
    status_code = 401
    detail = "Not authenticated"


class UserNotFound(ArchiveError):
    status_code = 404
    detail = "User not found"


class NotFoundOrForbidden(ArchiveError):
    status_code = 404
    detail = "Document not found or access denied"


class StorageFailure(ArchiveError):
    status_code = 500
    detail = "Storage failure"
