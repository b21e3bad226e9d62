"""Domain errors raised by the services and translated to HTTP responses in app.main."""


class DevMatchError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DevMatchError):
    """Malformed input. Rejected before anything is persisted."""
    status_code = 400
    default_message = "Invalid request"


class ForbiddenError(DevMatchError):
    """Acting on a match the caller is not a member of.

    Also raised when the match does not exist, so the response never reveals
    whether a match id is taken.
    """
    status_code = 403
    default_message = "Not authorized for this match"


class NotFoundError(DevMatchError):
    status_code = 404
    default_message = "Not found"


class DuplicateActionError(DevMatchError):
    """The caller already swiped on this target. Clients should just skip the card."""
    status_code = 409
    default_message = "Already swiped on this target"


class RateLimitExceeded(DevMatchError):
    status_code = 429
    default_message = "Too many requests"

    def __init__(self, retry_after: int, message: str = None):
        self.retry_after = retry_after
        super().__init__(message or f"Too many requests. Retry in {retry_after} seconds.")


class ChannelAuthFailure(DevMatchError):
    """A realtime credential could not be verified. Never surfaced over HTTP."""
    status_code = 401
    default_message = "Invalid realtime credential"
