"""Action and binding value types.

An Action describes one callable endpoint: its unique name, the target to
invoke and optional metadata used for parameter binding and documentation.
Loaders produce Actions, resolvers turn them into CallableBindings, and the
parameter resolver produces BoundArguments for one invocation.

Example:
    >>> def add(a: int, b: int) -> int:
    ...     return a + b
    >>>
    >>> act = Action(name="add", target=add)
    >>> act.target_kind()
    'callable'
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

ACTION_MARKER = "__rpc_action__"


class _Missing:
    """Sentinel for parameters without a default."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ParameterKind(str, Enum):
    """How a parameter may be supplied, mirroring inspect.Parameter kinds."""

    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"

    @classmethod
    def from_inspect(cls, kind: Any) -> ParameterKind:
        return _INSPECT_KINDS[kind]


_INSPECT_KINDS = {
    inspect.Parameter.POSITIONAL_ONLY: ParameterKind.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD: ParameterKind.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL: ParameterKind.VAR_POSITIONAL,
    inspect.Parameter.KEYWORD_ONLY: ParameterKind.KEYWORD_ONLY,
    inspect.Parameter.VAR_KEYWORD: ParameterKind.VAR_KEYWORD,
}


@dataclass(frozen=True)
class ParameterDescriptor:
    """One entry of a parameter shape.

    Attributes:
        name: Parameter name as supplied in named requests.
        annotation: Declared type; Any when undeclared.
        default: Default value, or MISSING when the parameter is required.
        kind: How the parameter may be supplied.
        description: Optional human-readable description.

    Example:
        >>> ParameterDescriptor("a", int).required
        True
        >>> ParameterDescriptor("limit", int, default=10).required
        False
    """

    name: str
    annotation: Any = Any
    default: Any = MISSING
    kind: ParameterKind = ParameterKind.POSITIONAL_OR_KEYWORD
    description: str | None = None

    @property
    def required(self) -> bool:
        """True when the parameter has no default and is not variadic."""
        if self.is_variadic:
            return False
        return self.default is MISSING

    @property
    def is_variadic(self) -> bool:
        """True for *args and **kwargs style parameters."""
        return self.kind in (ParameterKind.VAR_POSITIONAL, ParameterKind.VAR_KEYWORD)


@dataclass(frozen=True)
class Action:
    """A named, invocable endpoint.

    Attributes:
        name: Unique action name within a registry.
        target: What to invoke. A function or bound method, an
            ``(object_or_class, "method")`` pair, or a dotted import path
            string such as ``"myapp.math.add"``.
        parameters: Explicit parameter shape. When None, the shape is
            extracted from the target's declared signature.
        summary: One-line description for documentation.
        description: Longer description for documentation.
        resolver: Resolver hint. When set, only the named resolver is tried.
        loader: Name of the loader that produced the action.
    """

    name: str
    target: Any
    parameters: tuple[ParameterDescriptor, ...] | None = None
    summary: str | None = None
    description: str | None = None
    resolver: str | None = None
    loader: str | None = field(default=None, compare=False)

    def has_resolver_hint(self) -> bool:
        """Check if a resolver hint is specified."""
        return bool(self.resolver)

    def has_explicit_parameters(self) -> bool:
        """Check if the action carries an explicit parameter shape."""
        return self.parameters is not None

    def target_kind(self) -> str:
        """Classify the target for logging and resolver eligibility.

        Returns:
            One of ``"callable"``, ``"object_method"``, ``"import_path"`` or
            ``"unknown"``.
        """
        target = self.target
        if isinstance(target, str):
            return "import_path"
        if (
            isinstance(target, tuple)
            and len(target) == 2
            and isinstance(target[1], str)
        ):
            return "object_method"
        if callable(target):
            return "callable"
        return "unknown"


@dataclass(frozen=True)
class CallableBinding:
    """A resolved, directly invocable handle for an Action.

    Attributes:
        action: The action this binding was produced for.
        invocable: The callable to invoke with bound arguments.
        parameters: Ordered parameter shape.
        resolver: Name of the resolver that produced the binding.
        returns: Declared return annotation, Any when undeclared.
    """

    action: Action
    invocable: Callable[..., Any]
    parameters: tuple[ParameterDescriptor, ...]
    resolver: str
    returns: Any = Any

    @property
    def name(self) -> str:
        return self.action.name

    def parameter(self, name: str) -> ParameterDescriptor | None:
        """Look up a parameter descriptor by name."""
        for descriptor in self.parameters:
            if descriptor.name == name:
                return descriptor
        return None


@dataclass(frozen=True)
class BoundArguments:
    """Arguments bound for a single invocation."""

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def invoke(self, invocable: Callable[..., Any]) -> Any:
        return invocable(*self.args, **self.kwargs)

    def as_dict(self, parameters: tuple[ParameterDescriptor, ...] = ()) -> dict[str, Any]:
        """Name-keyed view for observation events and logging.

        Positional values are labelled with the matching parameter names
        where the shape is known. Surplus values are grouped under the
        ``*args`` name, or labelled by index when there is none.
        """
        named: dict[str, Any] = {}
        positional = [
            p
            for p in parameters
            if p.kind in (ParameterKind.POSITIONAL_ONLY, ParameterKind.POSITIONAL_OR_KEYWORD)
        ]
        for descriptor, value in zip(positional, self.args):
            named[descriptor.name] = value

        surplus = self.args[len(positional) :]
        var_positional = next(
            (p for p in parameters if p.kind is ParameterKind.VAR_POSITIONAL), None
        )
        if surplus and var_positional is not None:
            named[var_positional.name] = list(surplus)
        else:
            for index, value in enumerate(surplus, start=len(positional)):
                named[str(index)] = value
        named.update(self.kwargs)
        return named


@dataclass(frozen=True)
class ActionMeta:
    """Metadata attached to functions by the ``action`` decorator."""

    name: str | None = None
    summary: str | None = None
    description: str | None = None
    parameters: tuple[ParameterDescriptor, ...] | None = None


def action(
    name: str | None = None,
    *,
    summary: str | None = None,
    description: str | None = None,
    parameters: list[ParameterDescriptor] | tuple[ParameterDescriptor, ...] | None = None,
) -> Callable[[F], F]:
    """Mark a function or method as an exposed action.

    The decorated object is returned unchanged apart from the marker
    attribute read by ``CallableLoader.add_function`` and ``ObjectLoader``.

    Args:
        name: Action name. Defaults to the function name.
        summary: One-line documentation.
        description: Longer documentation. Defaults to the docstring.
        parameters: Explicit parameter shape overriding the signature.

    Example:
        >>> class Calculator:
        ...     @action("math.add", summary="Add two integers")
        ...     def add(self, a: int, b: int) -> int:
        ...         return a + b
    """

    def decorator(func: F) -> F:
        meta = ActionMeta(
            name=name,
            summary=summary,
            description=description,
            parameters=tuple(parameters) if parameters is not None else None,
        )
        setattr(func, ACTION_MARKER, meta)
        return func

    return decorator


def get_action_meta(obj: Any) -> ActionMeta | None:
    """Return the ``action`` decorator metadata of an object, if any."""
    meta = getattr(obj, ACTION_MARKER, None)
    return meta if isinstance(meta, ActionMeta) else None


__all__ = [
    "MISSING",
    "ParameterKind",
    "ParameterDescriptor",
    "Action",
    "CallableBinding",
    "BoundArguments",
    "ActionMeta",
    "action",
    "get_action_meta",
]
