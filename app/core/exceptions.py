class CommentServiceError(Exception):
    """
    Base class for every error the comment core surfaces to callers.

    Subclasses form a closed taxonomy; ``code`` is the stable machine-readable
    name used in HTTP error bodies and in ``error`` replies on the channel.
    """

    code: str = "internal"
    default_message: str = "Internal error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidID(CommentServiceError):
    """Malformed comment, post or user identifier."""

    code = "invalid_id"
    default_message = "Invalid identifier."


class InvalidArgument(CommentServiceError):
    """Malformed request field, e.g. an empty body."""

    code = "invalid_argument"
    default_message = "Invalid argument."


class UserNotFound(CommentServiceError):
    code = "user_not_found"
    default_message = "User not found."

    def __init__(self, user_id: int | None = None, message: str | None = None):
        if message is None and user_id is not None:
            message = f"User with id '{user_id}' not found."
        super().__init__(message)


class CommentNotFound(CommentServiceError):
    code = "comment_not_found"
    default_message = "Comment not found."

    def __init__(self, comment_id: str | None = None, message: str | None = None):
        if message is None and comment_id is not None:
            message = f"Comment '{comment_id}' not found."
        super().__init__(message)


class Unauthorized(CommentServiceError):
    """Caller is not the author of the comment."""

    code = "unauthorized"
    default_message = "Not authorized to modify this comment."


class Internal(CommentServiceError):
    code = "internal"
    default_message = "Internal error."


class DeadlineExceeded(CommentServiceError):
    """The operation's deadline expired before its collaborators answered."""

    code = "deadline_exceeded"
    default_message = "Operation timed out."


class UnknownEventType(Exception):
    """Envelope carries a ``type`` outside the protocol vocabulary."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"unknown event type '{event_type}'")


PASS_THROUGH_ERRORS: tuple[type[CommentServiceError], ...] = (
    InvalidID,
    InvalidArgument,
    UserNotFound,
    CommentNotFound,
    Unauthorized,
)
