r"""Callable resolution infrastructure.

This module turns loaded Actions into invocable CallableBindings through a
registration-ordered chain of resolvers.

Built-in Resolvers:
- CallableResolver: functions, bound methods and other callables
- ObjectMethodResolver: methods on objects, instantiating classes lazily
- ImportPathResolver: ``"package.module.function"`` strings

Custom Resolvers:
Extend BaseResolver:

    from rpc_dispatch.resolver import BaseResolver

    class ServiceLocatorResolver(BaseResolver):
        @property
        def name(self) -> str:
            return "services"

        def supports(self, action: Action) -> bool:
            return isinstance(action.target, str) and action.target.startswith("@")

        def resolve(self, action: Action) -> CallableBinding:
            service, method = action.target[1:].split(":")
            return self.bind(action, getattr(self._locator.get(service), method))

Resolver Hints:
An action may name a resolver to bypass the chain:

    loader.add("reports.build", "reports.jobs.build", resolver="import_path")
"""

from __future__ import annotations

from .base_resolver import BaseResolver
from .chain_resolver import ChainResolver
from .resolvers import CallableResolver, ImportPathResolver, ObjectMethodResolver

__all__ = [
    "BaseResolver",
    "ChainResolver",
    "CallableResolver",
    "ImportPathResolver",
    "ObjectMethodResolver",
]
