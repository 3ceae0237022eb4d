"""Errors - first-match chain of error factories.

Translation Contract:
1. Factories are consulted in registration order
2. The first factory whose ``supports()`` is True creates the Error
3. A factory that raises from ``supports()`` or ``create()`` is logged and
   skipped
4. When nothing matches, the fallback InternalError (-32603) is returned

``translate`` therefore always returns an Error and never raises.

Usage:
    errors = Errors([ExceptionMappingFactory({PermissionError: 403})])
    errors.add_factory(ExposedErrorFactory())
    errors.add_factory(DispatchErrorFactory())

    error = errors.translate(exc)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..exceptions import AlreadyBuiltError
from ..logging import describe_exception, log_debug, log_warn
from .factories import internal_error

if TYPE_CHECKING:
    from ..types import Error
    from .base_factory import BaseErrorFactory


class Errors:
    """Registration-ordered chain of error factories."""

    def __init__(self, factories: Iterable[BaseErrorFactory] = ()) -> None:
        self._factories: list[BaseErrorFactory] = []
        self._frozen = False
        for factory in factories:
            self.add_factory(factory)

    def add_factory(self, factory: BaseErrorFactory) -> Errors:
        """Append a factory to the chain.

        Adding the same factory object twice is a no-op.

        Returns:
            Self for method chaining.

        Raises:
            AlreadyBuiltError: If the chain is frozen.
        """
        if self._frozen:
            raise AlreadyBuiltError("The error factory chain is already built")
        if any(existing is factory for existing in self._factories):
            return self
        self._factories.append(factory)
        return self

    def freeze(self) -> None:
        """Reject further factory registration."""
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def translate(self, exc: BaseException) -> Error:
        """Translate an exception into a client-safe Error.

        Args:
            exc: The exception caught at the dispatcher boundary.

        Returns:
            The Error from the first matching factory, or the InternalError
            fallback.
        """
        for factory in self._factories:
            try:
                if not factory.supports(exc):
                    continue
                error = factory.create(exc)
            except Exception as e:
                log_warn(
                    f"Errors: Factory {factory.name} failed while translating "
                    f"{type(exc).__name__} ({describe_exception(e)})",
                    {"factory": factory.name, "error_type": type(e).__name__},
                )
                continue

            log_debug(f"Errors: {type(exc).__name__} translated by {factory.name}")
            return error

        log_debug(f"Errors: No factory matched {type(exc).__name__}, using fallback")
        return internal_error()

    @property
    def factory_names(self) -> list[str]:
        """Names of factories in registration order."""
        return [f.name for f in self._factories]

    def chain_info(self) -> list[dict[str, Any]]:
        """Get chain info for debugging."""
        return [
            {"name": factory.name, "position": index}
            for index, factory in enumerate(self._factories)
        ]

    def __len__(self) -> int:
        return len(self._factories)


__all__ = ["Errors"]
