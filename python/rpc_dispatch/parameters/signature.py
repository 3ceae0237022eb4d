"""Signature-based parameter resolver and extractor.

Parameter shapes come from the action's explicit schema when it has one,
otherwise from the invocable's declared signature (``inspect.signature``
plus ``typing.get_type_hints``). Values are coerced to the declared types
with pydantic's lax validation, so ``"5"`` binds to an ``int`` parameter
but ``"five"`` raises ParameterTypeError.

Extra parameter policy:
- STRICT (default): undeclared parameters raise UnexpectedParameterError
- LOOSE: undeclared parameters are ignored
A ``*args`` / ``**kwargs`` in the signature absorbs extras under both.
"""

from __future__ import annotations

import inspect
import threading
import typing
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from ..action import MISSING, BoundArguments, ParameterDescriptor, ParameterKind
from ..exceptions import (
    MissingParameterError,
    ParameterTypeError,
    UnexpectedParameterError,
)
from ..logging import log_trace
from ..types import ParameterPolicy
from .base import ParameterExtractor, ParameterResolver

if TYPE_CHECKING:
    from ..action import Action, CallableBinding

_POSITIONAL_KINDS = (ParameterKind.POSITIONAL_ONLY, ParameterKind.POSITIONAL_OR_KEYWORD)

# Shape used for invocables whose signature cannot be inspected
OPAQUE_SHAPE = (
    ParameterDescriptor("args", kind=ParameterKind.VAR_POSITIONAL),
    ParameterDescriptor("kwargs", kind=ParameterKind.VAR_KEYWORD),
)


def extract_shape(invocable: Callable[..., Any]) -> tuple[ParameterDescriptor, ...]:
    """Build a parameter shape from an invocable's declared signature.

    Unresolvable string annotations are treated as ``Any``.
    """
    try:
        signature = inspect.signature(invocable)
    except (TypeError, ValueError):
        return OPAQUE_SHAPE

    hints = _type_hints(invocable)
    shape: list[ParameterDescriptor] = []
    for parameter in signature.parameters.values():
        annotation = hints.get(parameter.name, parameter.annotation)
        if annotation is inspect.Parameter.empty or isinstance(annotation, str):
            annotation = Any
        default = MISSING if parameter.default is inspect.Parameter.empty else parameter.default
        shape.append(
            ParameterDescriptor(
                name=parameter.name,
                annotation=annotation,
                default=default,
                kind=ParameterKind.from_inspect(parameter.kind),
            )
        )
    return tuple(shape)


def return_annotation(invocable: Callable[..., Any]) -> Any:
    """Declared return type of an invocable, ``Any`` when undeclared."""
    annotation = _type_hints(invocable).get("return", Any)
    return Any if isinstance(annotation, str) else annotation


def shape_for(action: Action, invocable: Callable[..., Any]) -> tuple[ParameterDescriptor, ...]:
    """Explicit action schema when present, declared signature otherwise.

    Resolvers and the extractor both go through this function so that
    documentation matches runtime binding.
    """
    if action.parameters is not None:
        return action.parameters
    return extract_shape(invocable)


def type_name(annotation: Any) -> str:
    """Render an annotation for error messages and documentation."""
    if annotation is Any or annotation is inspect.Parameter.empty:
        return "any"
    if annotation is type(None):
        return "None"
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _type_hints(invocable: Callable[..., Any]) -> dict[str, Any]:
    target = invocable
    if not (inspect.isfunction(target) or inspect.ismethod(target)):
        target = getattr(invocable, "__call__", invocable)
    try:
        return typing.get_type_hints(target)
    except Exception:
        # Forward references that cannot be evaluated; fall back to raw annotations
        return dict(getattr(target, "__annotations__", {}) or {})


class SignatureParameterResolver(ParameterResolver, ParameterExtractor):
    """Parameter resolver and extractor driven by parameter descriptors.

    Thread-safe: the only shared state is a cache of pydantic adapters.
    """

    def __init__(self, policy: ParameterPolicy = ParameterPolicy.STRICT) -> None:
        """Initialize the resolver.

        Args:
            policy: Handling of undeclared request parameters.
        """
        self._policy = ParameterPolicy(policy)
        self._adapters: dict[Any, TypeAdapter[Any] | None] = {}
        self._lock = threading.Lock()

    @property
    def policy(self) -> ParameterPolicy:
        return self._policy

    def describe(self, binding: CallableBinding) -> tuple[ParameterDescriptor, ...]:
        return shape_for(binding.action, binding.invocable)

    def bind(
        self,
        shape: Sequence[ParameterDescriptor],
        raw_params: Sequence[Any] | Mapping[str, Any] | None,
    ) -> BoundArguments:
        if raw_params is None:
            raw_params = {}

        if isinstance(raw_params, Mapping):
            return self._bind_named(shape, raw_params)
        if isinstance(raw_params, (list, tuple)):
            return self._bind_positional(shape, raw_params)

        raise ParameterTypeError("params", "list or object", type(raw_params).__name__)

    def _bind_named(
        self,
        shape: Sequence[ParameterDescriptor],
        raw_params: Mapping[str, Any],
    ) -> BoundArguments:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        declared: set[str] = set()
        accepts_extra = False

        for descriptor in shape:
            if descriptor.kind is ParameterKind.VAR_KEYWORD:
                accepts_extra = True
                continue
            if descriptor.kind is ParameterKind.VAR_POSITIONAL:
                continue

            declared.add(descriptor.name)
            if descriptor.name in raw_params:
                value = self._coerce(descriptor, raw_params[descriptor.name])
            elif descriptor.required:
                raise MissingParameterError(descriptor.name)
            else:
                value = descriptor.default

            if descriptor.kind is ParameterKind.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[descriptor.name] = value

        extras = [key for key in raw_params if key not in declared]
        if extras:
            if accepts_extra:
                for key in extras:
                    kwargs[key] = raw_params[key]
            else:
                self._handle_extras(extras)

        return BoundArguments(args=tuple(args), kwargs=kwargs)

    def _bind_positional(
        self,
        shape: Sequence[ParameterDescriptor],
        raw_params: Sequence[Any],
    ) -> BoundArguments:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        var_index = next(
            (i for i, d in enumerate(shape) if d.kind is ParameterKind.VAR_POSITIONAL),
            None,
        )
        accepts_extra = var_index is not None

        # Parameters after *args can only be supplied by name
        if var_index is None:
            fillable = [d for d in shape if not d.is_variadic]
            trailing: list[ParameterDescriptor] = []
        else:
            fillable = [d for d in shape[:var_index] if not d.is_variadic]
            trailing = [d for d in shape[var_index + 1 :] if not d.is_variadic]

        for index, descriptor in enumerate(fillable):
            if index < len(raw_params):
                value = self._coerce(descriptor, raw_params[index])
            elif descriptor.required:
                raise MissingParameterError(descriptor.name)
            else:
                value = descriptor.default

            if descriptor.kind in _POSITIONAL_KINDS:
                args.append(value)
            else:
                kwargs[descriptor.name] = value

        for descriptor in trailing:
            if descriptor.required:
                raise MissingParameterError(descriptor.name)
            kwargs[descriptor.name] = descriptor.default

        extras = list(raw_params[len(fillable):])
        if extras:
            if accepts_extra:
                args.extend(extras)
            else:
                self._handle_extras([str(i) for i in range(len(fillable), len(raw_params))])

        return BoundArguments(args=tuple(args), kwargs=kwargs)

    def _handle_extras(self, extras: list[str]) -> None:
        if self._policy is ParameterPolicy.STRICT:
            raise UnexpectedParameterError(extras)
        log_trace(f"Ignoring undeclared parameters: {', '.join(extras)}")

    def _coerce(self, descriptor: ParameterDescriptor, value: Any) -> Any:
        annotation = descriptor.annotation
        if annotation is Any:
            return value

        adapter = self._adapter(annotation)
        if adapter is None:
            if isinstance(annotation, type) and not isinstance(value, annotation):
                raise ParameterTypeError(descriptor.name, type_name(annotation))
            return value

        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            errors = e.errors()
            detail = errors[0]["msg"] if errors else None
            raise ParameterTypeError(descriptor.name, type_name(annotation), detail) from e

    def _adapter(self, annotation: Any) -> TypeAdapter[Any] | None:
        try:
            cached = self._adapters.get(annotation, MISSING)
        except TypeError:
            # Unhashable annotation; build without caching
            return _build_adapter(annotation)

        if cached is not MISSING:
            return cached

        adapter = _build_adapter(annotation)
        with self._lock:
            self._adapters[annotation] = adapter
        return adapter


def _build_adapter(annotation: Any) -> TypeAdapter[Any] | None:
    try:
        return TypeAdapter(annotation)
    except PydanticSchemaGenerationError:
        return None


__all__ = [
    "OPAQUE_SHAPE",
    "SignatureParameterResolver",
    "extract_shape",
    "return_annotation",
    "shape_for",
    "type_name",
]
