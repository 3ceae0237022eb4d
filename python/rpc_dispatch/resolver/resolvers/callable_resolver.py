"""Callable resolver for directly invocable targets.

Handles functions, lambdas, bound methods, ``functools.partial`` objects
and instances defining ``__call__``. The target is used as-is.

Example:
    >>> resolver = CallableResolver()
    >>> binding = resolver.resolve(Action(name="add", target=add))
    >>> binding.invocable is add
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..base_resolver import BaseResolver

if TYPE_CHECKING:
    from ...action import Action, CallableBinding


class CallableResolver(BaseResolver):
    """Resolver for targets that are already callable."""

    def __init__(self, name: str = "callable") -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def supports(self, action: Action) -> bool:
        return action.target_kind() == "callable"

    def resolve(self, action: Action) -> CallableBinding:
        return self.bind(action, action.target)
