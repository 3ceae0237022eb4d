"""Self-description of the registered actions.

- ActionExtractor: one action -> ActionDescription
- Extractor: whole registry -> ServiceDescription
- to_smd: ServiceDescription -> SMD 2.0 document
"""

from __future__ import annotations

from .action_extractor import ActionExtractor
from .extractor import Extractor
from .smd import json_schema_type, to_smd

__all__ = [
    "ActionExtractor",
    "Extractor",
    "json_schema_type",
    "to_smd",
]
