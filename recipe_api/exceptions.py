from typing import Optional


class RecipeApiError(Exception):
    """Base error carrying the HTTP status and machine-readable code for the response envelope."""

    status_code: int = 500
    error_code: Optional[str] = "INTERNAL_ERROR"

    def __init__(self, message: str, *, error_code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class InvalidUrlError(RecipeApiError, ValueError):
    status_code = 400
    error_code = "INVALID_URL"


class UrlResolutionError(RecipeApiError):
    status_code = 502
    error_code = "URL_RESOLUTION_FAILED"


class AuthenticationError(RecipeApiError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class ProfileNotFoundError(RecipeApiError):
    status_code = 404
    error_code = "PROFILE_NOT_FOUND"


class UpstreamUnavailableError(RecipeApiError):
    status_code = 502
    error_code = "UPSTREAM_UNAVAILABLE"


class StorageError(RecipeApiError):
    status_code = 500
    error_code = "STORAGE_ERROR"


class AccountDeletionError(RecipeApiError):
    status_code = 500
    error_code = "ACCOUNT_DELETION_ERROR"
