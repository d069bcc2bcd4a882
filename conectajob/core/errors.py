from fastapi import status


class MarketplaceError(Exception):
    """Base class for every rejected marketplace operation."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(MarketplaceError):
    """Malformed input: bad email, short password, non-positive budget..."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(MarketplaceError):
    """Bad credentials or no active session."""
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(MarketplaceError):
    """The caller's role or ownership does not allow the operation."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(MarketplaceError):
    """Duplicate proposal, duplicate rating or already registered email."""
    status_code = status.HTTP_409_CONFLICT
