"""Abstract base class for callable resolvers.

This module defines the contract that all resolvers must implement.
Resolvers are tried in registration order by the ChainResolver until one
reports support for the action.

Resolution Contract:
1. name - Human-readable identifier for logging and resolver hints
2. supports() - Quick check whether this resolver handles the action's
   target kind
3. resolve() - Produce the CallableBinding, or raise
   UnresolvableActionError if the supported target turns out to be broken

Example Implementation:
    class RemoteResolver(BaseResolver):
        @property
        def name(self) -> str:
            return "remote"

        def supports(self, action: Action) -> bool:
            return isinstance(action.target, RemoteRef)

        def resolve(self, action: Action) -> CallableBinding:
            proxy = self._client.proxy(action.target)
            return self.bind(action, proxy.call)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..action import CallableBinding
from ..parameters.signature import return_annotation, shape_for

if TYPE_CHECKING:
    from ..action import Action


class BaseResolver(ABC):
    """Abstract base class for callable resolvers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this resolver (for logging and hints).

        Returns:
            The resolver name.
        """
        ...

    @abstractmethod
    def supports(self, action: Action) -> bool:
        """Quick eligibility check (called before resolve).

        Args:
            action: The action to resolve.

        Returns:
            True if this resolver handles the action's target.
        """
        ...

    @abstractmethod
    def resolve(self, action: Action) -> CallableBinding:
        """Resolve the action into an invocable binding.

        Args:
            action: The action to resolve.

        Returns:
            The binding.

        Raises:
            UnresolvableActionError: If the target cannot be made invocable.
        """
        ...

    def bind(self, action: Action, invocable: Callable[..., Any]) -> CallableBinding:
        """Build a binding for an invocable, with its parameter shape.

        Convenience method for subclasses.
        """
        return CallableBinding(
            action=action,
            invocable=invocable,
            parameters=shape_for(action, invocable),
            resolver=self.name,
            returns=return_annotation(invocable),
        )
