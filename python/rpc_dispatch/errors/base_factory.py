"""Abstract base class for error factories.

An error factory turns one family of exceptions into a client-safe Error.
Factories are tried in registration order by the Errors chain; the first
one whose ``supports()`` returns True creates the Error.

Example Implementation:
    class PermissionErrorFactory(BaseErrorFactory):
        def supports(self, exc: BaseException) -> bool:
            return isinstance(unwrap(exc), PermissionError)

        def create(self, exc: BaseException) -> Error:
            return Error(code=403, message="Forbidden", kind="Forbidden")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..exceptions import ApplicationError

if TYPE_CHECKING:
    from ..types import Error


class BaseErrorFactory(ABC):
    """Abstract base class for exception-to-Error translation strategies."""

    @property
    def name(self) -> str:
        """Factory name for logging."""
        return type(self).__name__

    @abstractmethod
    def supports(self, exc: BaseException) -> bool:
        """Check whether this factory translates the exception.

        Args:
            exc: The exception caught at the dispatcher boundary.

        Returns:
            True if ``create`` should be called for it.
        """
        ...

    @abstractmethod
    def create(self, exc: BaseException) -> Error:
        """Build a fresh Error for the exception.

        The Error must not carry the exception's message or traceback unless
        the exception was explicitly designed for client exposure.
        """
        ...


def unwrap(exc: BaseException) -> BaseException:
    """Return the exception raised by the action target, if wrapped.

    ApplicationError wraps whatever an action raised; factories that match
    on application exception types look through it.
    """
    if isinstance(exc, ApplicationError):
        return exc.original
    return exc


__all__ = ["BaseErrorFactory", "unwrap"]
