"""Response extraction: turning action return values into response data.

Actions may return anything; transports need plain data (dicts, lists,
strings, numbers, booleans, None). The ResponseExtractor performs that
conversion and raises ResponseExtractError for values it cannot convert,
which the dispatcher routes through the error chain like any other failure.

Conversions:
- pydantic models: ``model_dump(mode="json")``
- dataclass instances: field-by-field, recursively
- enums: their value
- datetime/date/time: ISO 8601 strings
- UUID and Decimal: strings
- mappings: dicts with string keys, values converted recursively
- lists, tuples, sets and frozensets: lists, items converted recursively
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from .exceptions import ResponseExtractError

_SCALARS = (str, int, float, bool, type(None))


class ResponseExtractor:
    """Converts return values into transport-ready data."""

    def extract(self, value: Any) -> Any:
        """Convert a return value.

        Args:
            value: What the action returned.

        Returns:
            Plain data.

        Raises:
            ResponseExtractError: If the value (or a nested value) has no
                known conversion.
        """
        return self._convert(value, "result")

    def _convert(self, value: Any, path: str) -> Any:
        if isinstance(value, Enum):
            return self._convert(value.value, path)
        if isinstance(value, _SCALARS):
            return value
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {
                f.name: self._convert(getattr(value, f.name), f"{path}.{f.name}")
                for f in dataclasses.fields(value)
            }
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        if isinstance(value, (UUID, Decimal)):
            return str(value)
        if isinstance(value, Mapping):
            return {
                self._key(k, path): self._convert(v, f"{path}.{k}")
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._convert(item, f"{path}[{i}]") for i, item in enumerate(value)]

        raise ResponseExtractError(
            f"Cannot extract response value of type {type(value).__name__} at {path}",
            metadata={"path": path, "type": type(value).__name__},
        )

    def _key(self, key: Any, path: str) -> str:
        if isinstance(key, Enum):
            key = key.value
        if isinstance(key, (str, int, float, bool)):
            return str(key)
        raise ResponseExtractError(
            f"Cannot use key of type {type(key).__name__} at {path}",
            metadata={"path": path, "type": type(key).__name__},
        )


__all__ = ["ResponseExtractor"]
