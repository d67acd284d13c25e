"""
Domain errors for the link page service.

Services raise these; ``main.py`` registers a single handler that turns them
into ``{"detail": ..., "code": ...}`` JSON responses. The ``code`` lets
clients tell an upgrade prompt apart from a generic failure.
"""

from fastapi import status


class LinkPageError(Exception):
    """Base class for every error the service raises on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationFailed(LinkPageError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class AccessDenied(LinkPageError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "access_denied"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class UpgradeRequired(LinkPageError):
    """The caller's plan tier does not include the requested feature."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "upgrade_required"

    def __init__(self, message: str = "This feature requires a Pro plan subscription"):
        super().__init__(message)


class NotFound(LinkPageError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(LinkPageError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class StorageError(LinkPageError):
    code = "storage_error"


class PageUnavailable(AccessDenied):
    """The page exists but is not published."""

    code = "page_unavailable"

    def __init__(self, message: str = "Page not available"):
        super().__init__(message)
