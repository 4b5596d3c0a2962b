"""Request-scoped context: correlation id and the authenticated user id."""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id_var: ContextVar[int | None] = ContextVar("user_id", default=None)


class RequestContext:
    """Async-safe storage for request-scoped identifiers.

    The correlation id is set by the request context middleware; the user id
    is set by the auth dependency once the bearer credential is verified.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context."""
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def set_user_id(user_id: int) -> None:
        """Set the authenticated user id for the current context."""
        _user_id_var.set(user_id)

    @staticmethod
    def get_user_id() -> int | None:
        """Get the authenticated user id, if the request was authenticated."""
        return _user_id_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)
        _user_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a UUID4 correlation ID.

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID in the form ``req-<uuid4>``.

    Examples:
        >>> generate_request_id().startswith("req-")
        True
    """
    return f"req-{uuid.uuid4()}"
