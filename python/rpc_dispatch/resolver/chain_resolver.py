"""Chain Resolver - Registration-Ordered Callable Resolution.

The ChainResolver turns an Action into a CallableBinding by asking its
resolvers, in registration order, whether they support the action. The
first supporting resolver produces the binding.

Resolution Contract:
1. If the Action has a resolver hint, use ONLY that resolver
2. Otherwise, try resolvers in registration order
3. Raise UnresolvableActionError if no resolver supports the action
4. Bindings are cached per action once resolved

Usage:
    chain = ChainResolver([CallableResolver(), ObjectMethodResolver()])
    chain.add_resolver(ImportPathResolver())

    binding = chain.resolve(action)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..exceptions import AlreadyBuiltError, UnresolvableActionError
from ..logging import log_debug, log_warn

if TYPE_CHECKING:
    from ..action import Action, CallableBinding
    from .base_resolver import BaseResolver


class ChainResolver:
    """Registration-ordered chain of callable resolvers.

    Resolvers can only be added before the chain is frozen; the builder
    freezes it when the handler is built.
    """

    def __init__(self, resolvers: Iterable[BaseResolver] = (), *, cache: bool = True) -> None:
        """Initialize the chain.

        Args:
            resolvers: Initial resolvers, in order.
            cache: Cache bindings per action.
        """
        self._resolvers: list[BaseResolver] = []
        self._resolvers_by_name: dict[str, BaseResolver] = {}
        self._cache_enabled = cache
        self._cache: dict[str, CallableBinding] = {}
        self._lock = threading.Lock()
        self._frozen = False
        for resolver in resolvers:
            self.add_resolver(resolver)

    def add_resolver(self, resolver: BaseResolver) -> ChainResolver:
        """Append a resolver to the chain.

        Adding the same resolver object twice is a no-op.

        Returns:
            Self for method chaining.

        Raises:
            AlreadyBuiltError: If the chain is frozen.
        """
        if self._frozen:
            raise AlreadyBuiltError("The resolver chain is already built")
        if any(existing is resolver for existing in self._resolvers):
            return self
        self._resolvers.append(resolver)
        self._resolvers_by_name.setdefault(resolver.name, resolver)
        return self

    def freeze(self) -> None:
        """Reject further resolver registration."""
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def get_resolver(self, name: str) -> BaseResolver | None:
        return self._resolvers_by_name.get(name)

    def supports(self, action: Action) -> bool:
        """Check if any resolver (or the hinted one) supports this action."""
        if action.has_resolver_hint():
            resolver = self._resolvers_by_name.get(action.resolver or "")
            return resolver.supports(action) if resolver else False
        return any(r.supports(action) for r in self._resolvers)

    def resolve(self, action: Action) -> CallableBinding:
        """Resolve an action into a binding.

        Args:
            action: The action to resolve.

        Returns:
            The binding produced by the first supporting resolver.

        Raises:
            UnresolvableActionError: If no resolver supports the action,
                the resolver hint is unknown, or the supporting resolver
                fails to resolve the target.
        """
        if self._cache_enabled:
            cached = self._cache.get(action.name)
            if cached is not None and cached.action is action:
                return cached

        if action.has_resolver_hint():
            binding = self._resolve_with_hint(action)
        else:
            binding = self._resolve_with_chain(action)

        if self._cache_enabled:
            with self._lock:
                self._cache[action.name] = binding
        return binding

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def resolver_names(self) -> list[str]:
        """Names of resolvers in registration order."""
        return [r.name for r in self._resolvers]

    def chain_info(self) -> list[dict[str, Any]]:
        """Get chain info for debugging."""
        return [
            {"name": resolver.name, "position": index}
            for index, resolver in enumerate(self._resolvers)
        ]

    def __len__(self) -> int:
        return len(self._resolvers)

    def _resolve_with_hint(self, action: Action) -> CallableBinding:
        resolver_name = action.resolver or ""
        resolver = self._resolvers_by_name.get(resolver_name)

        if resolver is None:
            log_warn(f"ChainResolver: Unknown resolver hint '{resolver_name}'", {"action": action.name})
            raise UnresolvableActionError(action.name, f"unknown resolver '{resolver_name}'")

        if not resolver.supports(action):
            raise UnresolvableActionError(
                action.name, f"resolver '{resolver_name}' does not support the target"
            )

        log_debug(f"ChainResolver: Resolving '{action.name}' via hint '{resolver_name}'")
        return resolver.resolve(action)

    def _resolve_with_chain(self, action: Action) -> CallableBinding:
        for resolver in self._resolvers:
            if not resolver.supports(action):
                continue

            log_debug(f"ChainResolver: Resolving '{action.name}' via '{resolver.name}'")
            return resolver.resolve(action)

        log_debug(f"ChainResolver: No resolver supports '{action.name}'")
        raise UnresolvableActionError(action.name, f"no resolver supports {action.target_kind()} targets")


__all__ = ["ChainResolver"]
