"""Tests for HandlerBuilder wiring and the built/unbuilt split."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from rpc_dispatch import (
    AlreadyBuiltError,
    BaseHandler,
    BoundArguments,
    CallableLoader,
    CallableResolver,
    CollisionPolicy,
    ConfigurationError,
    DispatcherConfig,
    DispatchEvents,
    ExceptionMappingFactory,
    HandlerBuilder,
    ParameterPolicy,
    ParameterResolver,
    ResponseExtractor,
    SignatureParameterResolver,
    action,
)
from tests.handlers import example_actions


class Greeter:
    def __init__(self, greeting: str) -> None:
        self.greeting = greeting

    @action("greeter.greet")
    def greet(self, name: str) -> str:
        return f"{self.greeting}, {name}"


class DoublingResolver(ParameterResolver):
    """Parameter resolver without extraction support."""

    def bind(self, shape, raw_params) -> BoundArguments:
        return BoundArguments(args=tuple(v * 2 for v in raw_params))


class TestBuild:
    """Tests for building handlers and doc extractors."""

    def test_build_handler_is_idempotent(self, builder: HandlerBuilder):
        """build_handler returns the same handler every time."""
        handler = builder.build_handler()

        assert isinstance(handler, BaseHandler)
        assert builder.build_handler() is handler
        assert builder.is_built

    def test_build_doc_extractor_is_idempotent(self, builder: HandlerBuilder):
        """build_doc_extractor returns the same extractor and builds the handler."""
        extractor = builder.build_doc_extractor()

        assert builder.build_doc_extractor() is extractor
        assert builder.is_built

    def test_callable_handle(self, builder: HandlerBuilder):
        """add_callable_handle returns a loader served by a callable resolver."""
        loader = builder.add_callable_handle()
        loader.add("add", example_actions.add)

        assert builder.build_handler().dispatch("add", [1, 2]).result == 3

    def test_object_handle_with_factory(self, builder: HandlerBuilder):
        """add_object_handle passes the factory to its resolver."""
        builder.add_object_handle(factory=lambda cls: cls("Hi")).add(Greeter)

        assert builder.build_handler().dispatch("greeter.greet", ["Bo"]).result == "Hi, Bo"

    def test_import_path_resolver_always_last(self, builder: HandlerBuilder):
        """The import-path fallback follows every registered resolver."""
        builder.add_callable_handle()
        builder.add_object_handle()

        handler = builder.build_handler()

        assert handler.resolver.resolver_names == ["callable", "object_method", "import_path"]
        assert handler.resolver.is_frozen

    def test_error_factories_user_first(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """User factories come before the built-in ones."""
        builder.add_error_factory(ExceptionMappingFactory({RuntimeError: (503, "Unavailable")}))

        handler = builder.build_handler()
        response = handler.dispatch("explode")

        assert handler.errors.factory_names == [
            "ExceptionMappingFactory",
            "ExposedErrorFactory",
            "DispatchErrorFactory",
        ]
        assert response.error.code == 503
        assert response.error.message == "Unavailable"

    def test_identity_keyed_registration(self, builder: HandlerBuilder):
        """Registering the same object twice registers it once."""
        resolver = CallableResolver()
        loader = CallableLoader()
        loader.add("add", example_actions.add)
        builder.add_callable_resolver(resolver).add_callable_resolver(resolver)
        builder.add_action_loader(loader).add_action_loader(loader)

        handler = builder.build_handler()

        assert handler.resolver.resolver_names == ["callable", "import_path"]
        assert handler.registry.names() == ["add"]

    def test_custom_event_dispatcher_used(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """A configured event hub is used by the handler."""
        events = DispatchEvents()
        builder.set_event_dispatcher(events)

        assert builder.build_handler().events is events

    def test_custom_response_extractor(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """A configured response extractor converts results."""

        class Stringify(ResponseExtractor):
            def extract(self, value: Any) -> Any:
                return str(value)

        builder.set_response_extractor(Stringify())

        assert builder.build_handler().dispatch("add", [1, 2]).result == "3"

    def test_resolver_without_extractor_rejected(self, builder: HandlerBuilder):
        """A non-describing parameter resolver needs a separate extractor."""
        builder.set_parameter_resolver(DoublingResolver())

        with pytest.raises(ConfigurationError):
            builder.build_handler()

    def test_resolver_with_separate_extractor(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """A custom resolver works when an extractor is provided."""
        builder.set_parameter_resolver(DoublingResolver())
        builder.set_parameter_extractor(SignatureParameterResolver())

        assert builder.build_handler().dispatch("add", [1, 2]).result == 6


class TestAlreadyBuilt:
    """Tests for mutation after build."""

    @pytest.mark.parametrize(
        "mutation",
        [
            lambda b: b.add_error_factory(ExceptionMappingFactory()),
            lambda b: b.add_callable_handle(),
            lambda b: b.add_object_handle(),
            lambda b: b.add_action_loader(CallableLoader()),
            lambda b: b.add_callable_resolver(CallableResolver()),
            lambda b: b.set_event_dispatcher(DispatchEvents()),
            lambda b: b.set_parameter_resolver(SignatureParameterResolver()),
            lambda b: b.set_parameter_extractor(SignatureParameterResolver()),
            lambda b: b.set_response_extractor(ResponseExtractor()),
            lambda b: b.set_config(DispatcherConfig()),
        ],
    )
    def test_mutation_after_build_raises(
        self,
        builder: HandlerBuilder,
        mutation: Callable[[HandlerBuilder], Any],
    ):
        """Every registration call is rejected once built."""
        builder.build_handler()

        with pytest.raises(AlreadyBuiltError):
            mutation(builder)

    def test_loader_frozen_after_first_dispatch(self, builder: HandlerBuilder):
        """Loaders accept actions until the registry has been built."""
        loader = builder.add_callable_handle()
        handler = builder.build_handler()
        loader.add("add", example_actions.add)

        assert handler.dispatch("add", [1, 1]).result == 2
        with pytest.raises(AlreadyBuiltError):
            loader.add("late", example_actions.greet)


class TestConfiguration:
    """Tests for config-driven wiring."""

    def test_actions_path_adds_yaml_loader(self, actions_dir: Path):
        """Configured YAML actions are loaded after registered loaders."""
        builder = HandlerBuilder(DispatcherConfig(actions_path=str(actions_dir)))
        builder.add_callable_handle().add("first", example_actions.add)

        handler = builder.build_handler()

        assert handler.registry.names()[0] == "first"
        assert handler.dispatch("math.add", {"a": 1, "b": 2}).result == 3
        assert handler.dispatch("math.multiply", [3]).result == 3

    def test_parameter_policy_applied(self, callable_loader: CallableLoader, builder: HandlerBuilder):
        """The loose policy ignores extras."""
        builder.set_config(DispatcherConfig(parameter_policy=ParameterPolicy.LOOSE))

        assert builder.build_handler().dispatch("add", {"a": 1, "b": 2, "c": 3}).result == 3

    def test_collision_policy_applied(self):
        """last_wins lets the later loader override."""
        builder = HandlerBuilder(DispatcherConfig(collision_policy=CollisionPolicy.LAST_WINS))
        builder.add_callable_handle().add("calc", example_actions.add)
        builder.add_callable_handle().add("calc", lambda a, b: a * b)

        assert builder.build_handler().dispatch("calc", [3, 4]).result == 12

    def test_expose_application_errors(self, callable_loader: CallableLoader, builder: HandlerBuilder):
        """The exception type name is exposed when configured."""
        builder.set_config(DispatcherConfig(expose_application_errors=True))

        assert builder.build_handler().dispatch("explode").error.data == {"type": "RuntimeError"}

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch):
        """from_environment reads RPC_DISPATCH_* variables."""
        monkeypatch.setenv("RPC_DISPATCH_PARAMETER_POLICY", "loose")
        monkeypatch.setenv("RPC_DISPATCH_LOG_LEVEL", "debug")

        builder = HandlerBuilder.from_environment()

        assert builder.config.parameter_policy is ParameterPolicy.LOOSE
        assert builder.config.log_level == "debug"

    def test_from_environment_invalid(self, monkeypatch: pytest.MonkeyPatch):
        """Invalid environment values raise ConfigurationError."""
        monkeypatch.setenv("RPC_DISPATCH_COLLISION_POLICY", "coin_flip")

        with pytest.raises(ConfigurationError):
            HandlerBuilder.from_environment()


class TestResolutionHints:
    """Tests for resolver hints through the builder."""

    def test_hint_restricts_resolution(self, builder: HandlerBuilder):
        """A hinted action only uses the named resolver."""
        loader = builder.add_callable_handle()
        loader.add("add", example_actions.add, resolver="import_path")

        response = builder.build_handler().dispatch("add", [1, 2])

        assert response.error.code == -32001
        assert response.state.value == "resolving_callable"
