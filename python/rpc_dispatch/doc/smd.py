"""Service Mapping Description (SMD 2.0) rendering.

Renders a ServiceDescription as an SMD document that JSON-RPC client
generators understand. Only the data structure is produced; encoding it
as JSON is left to the transport.

Example:
    >>> smd = to_smd(extractor.extract(), target="/rpc")
    >>> smd["services"]["add"]["parameters"][0]
    {'name': 'a', 'type': 'integer', 'optional': False}
"""

from __future__ import annotations

import re
from typing import Any

from ..types import ActionDescription, ParameterDescription, ServiceDescription

SMD_VERSION = "2.0"

# Rendered Python type names -> JSON Schema type names
JSON_SCHEMA_TYPES: dict[str, str] = {
    "any": "any",
    "str": "string",
    "int": "integer",
    "float": "number",
    "Decimal": "number",
    "bool": "boolean",
    "None": "null",
    "NoneType": "null",
    "list": "array",
    "tuple": "array",
    "set": "array",
    "frozenset": "array",
    "dict": "object",
}

_GENERIC = re.compile(r"^(\w+)\[.*\]$")


def json_schema_type(rendered: str) -> str:
    """Map a rendered annotation to a JSON Schema type name.

    Subscripted generics map by their origin (``list[int]`` -> ``array``),
    optionals by their non-None member. Unknown classes map to ``object``.
    """
    rendered = rendered.strip()
    if rendered in JSON_SCHEMA_TYPES:
        return JSON_SCHEMA_TYPES[rendered]

    members = [m.strip() for m in _split_union(rendered)]
    if len(members) > 1:
        types = [json_schema_type(m) for m in members if m not in ("None", "NoneType")]
        return types[0] if len(set(types)) == 1 else "any"

    match = _GENERIC.match(rendered)
    if match:
        origin = match.group(1)
        if origin in ("Optional",):
            return json_schema_type(rendered[len(origin) + 1 : -1])
        if origin in ("Union",):
            return json_schema_type(" | ".join(_split_top_level(rendered[len(origin) + 1 : -1])))
        if origin in ("List", "Sequence", "Tuple", "Set", "FrozenSet", "Iterable"):
            return "array"
        if origin in ("Dict", "Mapping"):
            return "object"
        return JSON_SCHEMA_TYPES.get(origin, "object")

    return "object"


def to_smd(description: ServiceDescription, target: str | None = None) -> dict[str, Any]:
    """Render a ServiceDescription as an SMD 2.0 document.

    Args:
        description: Output of Extractor.extract().
        target: Endpoint URL clients should post to.

    Returns:
        The SMD document as a dict.
    """
    smd: dict[str, Any] = {
        "transport": "POST",
        "envelope": "JSON-RPC-2.0",
        "contentType": "application/json",
        "SMDVersion": SMD_VERSION,
    }
    if target is not None:
        smd["target"] = target
    smd["services"] = {action.name: _service(action) for action in description.actions}
    return smd


def _service(action: ActionDescription) -> dict[str, Any]:
    service: dict[str, Any] = {}
    text = action.description or action.summary
    if text:
        service["description"] = text
    service["parameters"] = [_parameter(p) for p in action.parameters]
    service["returns"] = {"type": json_schema_type(action.returns)}
    return service


def _parameter(parameter: ParameterDescription) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "name": parameter.name,
        "type": json_schema_type(parameter.type),
        "optional": not parameter.required,
    }
    if not parameter.required:
        entry["default"] = parameter.default
    if parameter.description:
        entry["description"] = parameter.description
    return entry


def _split_union(rendered: str) -> list[str]:
    return _split_top_level(rendered, "|")


def _split_top_level(text: str, separator: str = ",") -> list[str]:
    parts: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append(current)
            current = ""
            continue
        current += char
    parts.append(current)
    return parts


__all__ = ["SMD_VERSION", "JSON_SCHEMA_TYPES", "json_schema_type", "to_smd"]
