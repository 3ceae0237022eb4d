"""Dispatcher configuration from the environment.

Configuration is a DispatcherConfig pydantic model. ``load_config`` builds
one from ``RPC_DISPATCH_*`` environment variables, applies explicit
overrides on top, and validates the result.

Environment variables:
- RPC_DISPATCH_PARAMETER_POLICY: ``strict`` or ``loose``
- RPC_DISPATCH_COLLISION_POLICY: ``reject`` or ``last_wins``
- RPC_DISPATCH_EXPOSE_APPLICATION_ERRORS: boolean (``true``/``false``, ``1``/``0``)
- RPC_DISPATCH_LOG_LEVEL: ``trace``, ``debug``, ``info``, ``warn`` or ``error``
- RPC_DISPATCH_ACTIONS_PATH: YAML action file or directory

Example:
    >>> os.environ["RPC_DISPATCH_PARAMETER_POLICY"] = "loose"
    >>> load_config().parameter_policy
    <ParameterPolicy.LOOSE: 'loose'>
    >>> load_config({"parameter_policy": "strict"}).parameter_policy
    <ParameterPolicy.STRICT: 'strict'>
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .logging import log_debug
from .types import DispatcherConfig

ENV_PREFIX = "RPC_DISPATCH_"


def load_config(
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> DispatcherConfig:
    """Build a validated DispatcherConfig.

    Args:
        overrides: Values taking precedence over the environment.
        environ: Environment to read instead of ``os.environ``.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If any value is invalid or unknown.
    """
    values = _from_environment(os.environ if environ is None else environ)
    if overrides:
        values.update(overrides)

    try:
        config = DispatcherConfig.model_validate(values)
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid dispatcher configuration: {', '.join(fields)}",
            metadata={"fields": fields},
        ) from e

    log_debug(
        "Loaded dispatcher configuration",
        {k: v for k, v in config.model_dump(mode="json").items() if v is not None},
    )
    return config


def _from_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field_name in DispatcherConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is None or raw == "":
            continue
        values[field_name] = raw.strip().lower() if field_name != "actions_path" else raw
    return values


__all__ = ["ENV_PREFIX", "load_config"]
