"""Handler builder: wiring loaders, resolvers and error factories.

The HandlerBuilder collects configuration-time registrations and turns
them into an immutable BaseHandler (and a doc Extractor sharing the same
registry and resolver chain). Once built, every mutating call raises
AlreadyBuiltError.

Build order:
1. Loaders in registration order, then a YamlLoader for
   ``config.actions_path`` if set, behind a ChainLoader
2. Resolvers in registration order, then ImportPathResolver last
3. Error factories in registration order, then ExposedErrorFactory and
   DispatchErrorFactory
4. SignatureParameterResolver if no parameter resolver was set; it also
   serves as extractor unless one was set separately

Example:
    >>> builder = HandlerBuilder()
    >>> loader = builder.add_callable_handle()
    >>> loader.add("add", lambda a, b: a + b)
    >>>
    >>> handler = builder.build_handler()
    >>> handler.dispatch("add", [2, 3]).result
    5
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from .config import load_config
from .doc import ActionExtractor, Extractor
from .errors import DispatchErrorFactory, Errors, ExposedErrorFactory
from .events import DispatchEvents
from .exceptions import AlreadyBuiltError, ConfigurationError
from .handler import BaseHandler
from .loader import CallableLoader, ChainLoader, ObjectLoader, YamlLoader
from .logging import configure_logging, log_info
from .parameters import ParameterExtractor, ParameterResolver, SignatureParameterResolver
from .registry import ActionRegistry
from .resolver import CallableResolver, ChainResolver, ImportPathResolver, ObjectMethodResolver
from .response import ResponseExtractor
from .types import DispatcherConfig

if TYPE_CHECKING:
    from collections.abc import Callable

    from .errors import BaseErrorFactory
    from .loader import BaseLoader
    from .resolver import BaseResolver


class HandlerBuilder:
    """Configuration-time assembly of a dispatcher.

    Registrations are keyed by object identity: adding the same loader,
    resolver or factory twice registers it once.
    """

    def __init__(self, config: DispatcherConfig | None = None) -> None:
        """Initialize the builder.

        Args:
            config: Dispatcher policies. Defaults to DispatcherConfig().
        """
        self._config = config or DispatcherConfig()
        self._error_factories: list[BaseErrorFactory] = []
        self._resolvers: list[BaseResolver] = []
        self._loaders: list[BaseLoader] = []
        self._events: DispatchEvents | None = None
        self._parameter_resolver: ParameterResolver | None = None
        self._parameter_extractor: ParameterExtractor | None = None
        self._response_extractor: ResponseExtractor | None = None

        self._handler: BaseHandler | None = None
        self._doc_extractor: Extractor | None = None
        self._registry: ActionRegistry | None = None
        self._resolver_chain: ChainResolver | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_environment(cls, overrides: dict[str, Any] | None = None) -> HandlerBuilder:
        """Create a builder configured from ``RPC_DISPATCH_*`` variables.

        Also applies the configured log level to the package logger.

        Raises:
            ConfigurationError: If the environment holds invalid values.
        """
        config = load_config(overrides)
        configure_logging(config.log_level)
        return cls(config)

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def is_built(self) -> bool:
        return self._handler is not None

    # Registration

    def add_error_factory(self, factory: BaseErrorFactory) -> HandlerBuilder:
        """Register an error factory ahead of the built-in ones.

        Returns:
            Self for method chaining.
        """
        self._ensure_not_built()
        _append_unique(self._error_factories, factory)
        return self

    def add_callable_handle(self) -> CallableLoader:
        """Register a CallableLoader with a CallableResolver.

        Returns:
            The new loader, for adding actions to.
        """
        self._ensure_not_built()
        loader = CallableLoader()
        self.add_callable_resolver(CallableResolver())
        self.add_action_loader(loader)
        return loader

    def add_object_handle(
        self,
        factory: Callable[[type], Any] | None = None,
    ) -> ObjectLoader:
        """Register an ObjectLoader with an ObjectMethodResolver.

        Args:
            factory: Instantiates classes registered on the loader.

        Returns:
            The new loader, for adding objects to.
        """
        self._ensure_not_built()
        loader = ObjectLoader()
        self.add_callable_resolver(ObjectMethodResolver(factory))
        self.add_action_loader(loader)
        return loader

    def add_action_loader(self, loader: BaseLoader) -> HandlerBuilder:
        """Register an action loader.

        Returns:
            Self for method chaining.
        """
        self._ensure_not_built()
        _append_unique(self._loaders, loader)
        return self

    def add_callable_resolver(self, resolver: BaseResolver) -> HandlerBuilder:
        """Register a callable resolver ahead of the import-path fallback.

        Returns:
            Self for method chaining.
        """
        self._ensure_not_built()
        _append_unique(self._resolvers, resolver)
        return self

    def set_event_dispatcher(self, events: DispatchEvents) -> HandlerBuilder:
        self._ensure_not_built()
        self._events = events
        return self

    def set_parameter_resolver(self, resolver: ParameterResolver) -> HandlerBuilder:
        self._ensure_not_built()
        self._parameter_resolver = resolver
        return self

    def set_parameter_extractor(self, extractor: ParameterExtractor) -> HandlerBuilder:
        self._ensure_not_built()
        self._parameter_extractor = extractor
        return self

    def set_response_extractor(self, extractor: ResponseExtractor) -> HandlerBuilder:
        self._ensure_not_built()
        self._response_extractor = extractor
        return self

    def set_config(self, config: DispatcherConfig) -> HandlerBuilder:
        self._ensure_not_built()
        self._config = config
        return self

    # Building

    def build_handler(self) -> BaseHandler:
        """Build the handler, or return the one already built.

        Returns:
            The handler. The same object on every call.
        """
        if self._handler is not None:
            return self._handler

        with self._lock:
            if self._handler is not None:
                return self._handler

            self._registry = self._create_registry()
            self._resolver_chain = self._create_resolver_chain()
            errors = self._create_errors()

            if self._events is None:
                self._events = DispatchEvents()
            if self._parameter_resolver is None:
                self._parameter_resolver = self._create_parameter_resolver()
            if self._parameter_extractor is None:
                if not isinstance(self._parameter_resolver, ParameterExtractor):
                    raise ConfigurationError(
                        "A parameter extractor is required when the parameter "
                        "resolver cannot describe parameters"
                    )
                self._parameter_extractor = self._parameter_resolver

            self._handler = BaseHandler(
                self._registry,
                self._resolver_chain,
                self._parameter_resolver,
                errors,
                events=self._events,
                response_extractor=self._response_extractor or ResponseExtractor(),
            )
            log_info(
                "HandlerBuilder: Built handler",
                {
                    "loaders": len(self._loaders),
                    "resolvers": ",".join(self._resolver_chain.resolver_names),
                    "error_factories": len(errors),
                },
            )
            return self._handler

    def build_doc_extractor(self) -> Extractor:
        """Build the documentation extractor, or return the one already built.

        Builds the handler first if needed, so both share one registry and
        one resolver chain.
        """
        if self._doc_extractor is not None:
            return self._doc_extractor

        self.build_handler()
        assert self._registry is not None
        assert self._resolver_chain is not None
        assert self._parameter_extractor is not None

        with self._lock:
            if self._doc_extractor is None:
                action_extractor = ActionExtractor(self._resolver_chain, self._parameter_extractor)
                self._doc_extractor = Extractor(self._registry, action_extractor)
            return self._doc_extractor

    # Factory methods, overridable by subclasses

    def _create_registry(self) -> ActionRegistry:
        loaders = list(self._loaders)
        if self._config.actions_path:
            loaders.append(YamlLoader(self._config.actions_path))
        chain = ChainLoader(loaders, collision_policy=self._config.collision_policy)
        return ActionRegistry(chain)

    def _create_resolver_chain(self) -> ChainResolver:
        chain = ChainResolver(self._resolvers)
        chain.add_resolver(ImportPathResolver())
        chain.freeze()
        return chain

    def _create_errors(self) -> Errors:
        errors = Errors(self._error_factories)
        errors.add_factory(ExposedErrorFactory())
        errors.add_factory(
            DispatchErrorFactory(expose_application_errors=self._config.expose_application_errors)
        )
        errors.freeze()
        return errors

    def _create_parameter_resolver(self) -> ParameterResolver:
        return SignatureParameterResolver(self._config.parameter_policy)

    def _ensure_not_built(self) -> None:
        if self._handler is not None:
            raise AlreadyBuiltError("The handler is already built")


def _append_unique(items: list[Any], item: Any) -> None:
    if not any(existing is item for existing in items):
        items.append(item)


__all__ = ["HandlerBuilder"]
