"""
rpc-dispatch

JSON-RPC style action dispatch: resolve a named action to a callable,
bind request parameters to its signature, invoke it, and translate any
failure into a client-safe error object. The same registry and resolvers
power a self-description of every action.

Example:
    >>> from rpc_dispatch import HandlerBuilder, DispatchRequest
    >>>
    >>> builder = HandlerBuilder()
    >>> loader = builder.add_callable_handle()
    >>>
    >>> @loader.register("add")
    ... def add(a: int, b: int) -> int:
    ...     return a + b
    >>>
    >>> handler = builder.build_handler()
    >>> handler.dispatch(DispatchRequest(action="add", params={"a": 2, "b": 3})).result
    5

    >>> # Describe the service
    >>> from rpc_dispatch.doc import to_smd
    >>> smd = to_smd(builder.build_doc_extractor().extract(), target="/rpc")

    >>> # Serve decoded JSON-RPC 2.0 envelopes
    >>> from rpc_dispatch import JsonRpcServer
    >>> JsonRpcServer(handler).handle({"jsonrpc": "2.0", "method": "add", "params": [2, 3], "id": 1})
    {'jsonrpc': '2.0', 'id': 1, 'result': 5}
"""

from __future__ import annotations

from rpc_dispatch.action import (
    MISSING,
    Action,
    BoundArguments,
    CallableBinding,
    ParameterDescriptor,
    ParameterKind,
    action,
)
from rpc_dispatch.builder import HandlerBuilder
from rpc_dispatch.config import load_config
from rpc_dispatch.doc import ActionExtractor, Extractor, to_smd
from rpc_dispatch.errors import (
    BaseErrorFactory,
    DispatchErrorFactory,
    Errors,
    ExceptionMappingFactory,
    ExposedErrorFactory,
)
from rpc_dispatch.events import DispatchEvents, EventNames
from rpc_dispatch.exceptions import (
    ActionNotFoundError,
    AlreadyBuiltError,
    ApplicationError,
    ConfigurationError,
    DispatchError,
    ExposedError,
    InternalError,
    LoadError,
    MissingParameterError,
    ParameterError,
    ParameterTypeError,
    ResponseExtractError,
    SetupError,
    UnexpectedParameterError,
    UnresolvableActionError,
)
from rpc_dispatch.handler import BaseHandler
from rpc_dispatch.jsonrpc import JsonRpcRequest, JsonRpcServer
from rpc_dispatch.loader import (
    BaseLoader,
    CallableLoader,
    ChainLoader,
    ObjectLoader,
    YamlLoader,
)
from rpc_dispatch.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from rpc_dispatch.parameters import (
    ParameterExtractor,
    ParameterResolver,
    SignatureParameterResolver,
)
from rpc_dispatch.registry import ActionRegistry
from rpc_dispatch.resolver import (
    BaseResolver,
    CallableResolver,
    ChainResolver,
    ImportPathResolver,
    ObjectMethodResolver,
)
from rpc_dispatch.response import ResponseExtractor
from rpc_dispatch.types import (
    ActionDescription,
    CollisionPolicy,
    DispatcherConfig,
    DispatchEvent,
    DispatchRequest,
    DispatchResponse,
    DispatchState,
    Error,
    ErrorCode,
    LogContext,
    ParameterDescription,
    ParameterPolicy,
    ServiceDescription,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Actions
    "MISSING",
    "Action",
    "BoundArguments",
    "CallableBinding",
    "ParameterDescriptor",
    "ParameterKind",
    "action",
    # Building and dispatch
    "HandlerBuilder",
    "BaseHandler",
    "ActionRegistry",
    "JsonRpcRequest",
    "JsonRpcServer",
    "ResponseExtractor",
    # Loaders
    "BaseLoader",
    "CallableLoader",
    "ChainLoader",
    "ObjectLoader",
    "YamlLoader",
    # Resolvers
    "BaseResolver",
    "CallableResolver",
    "ChainResolver",
    "ImportPathResolver",
    "ObjectMethodResolver",
    # Parameters
    "ParameterExtractor",
    "ParameterResolver",
    "SignatureParameterResolver",
    # Errors
    "BaseErrorFactory",
    "DispatchErrorFactory",
    "Errors",
    "ExceptionMappingFactory",
    "ExposedErrorFactory",
    # Documentation
    "ActionExtractor",
    "Extractor",
    "to_smd",
    # Events
    "DispatchEvents",
    "EventNames",
    # Configuration and logging
    "load_config",
    "configure_logging",
    "log_debug",
    "log_error",
    "log_info",
    "log_trace",
    "log_warn",
    # Exceptions
    "ActionNotFoundError",
    "AlreadyBuiltError",
    "ApplicationError",
    "ConfigurationError",
    "DispatchError",
    "ExposedError",
    "InternalError",
    "LoadError",
    "MissingParameterError",
    "ParameterError",
    "ParameterTypeError",
    "ResponseExtractError",
    "SetupError",
    "UnexpectedParameterError",
    "UnresolvableActionError",
    # Types
    "ActionDescription",
    "CollisionPolicy",
    "DispatcherConfig",
    "DispatchEvent",
    "DispatchRequest",
    "DispatchResponse",
    "DispatchState",
    "Error",
    "ErrorCode",
    "LogContext",
    "ParameterDescription",
    "ParameterPolicy",
    "ServiceDescription",
]
