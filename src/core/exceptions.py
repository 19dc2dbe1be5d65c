"""
Error kinds raised by MVP Arena services.

Validation failures are raised before any store call. Store and identity
failures surface as ``BackendError`` chained to the underlying sqlite error.
"""


class GameError(Exception):
    """Base class for all game errors shown to the user."""

    pass


class ValidationError(GameError):
    """Raised when input or round state rejects an action."""

    pass


class NotFoundError(GameError):
    """Raised when a profile or bet lookup misses."""

    pass


class BackendError(GameError):
    """Raised when a store or identity call fails."""

    pass
