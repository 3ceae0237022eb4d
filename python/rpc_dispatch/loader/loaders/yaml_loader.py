"""YAML loader for declaratively defined actions.

Reads action definitions from a YAML file, or from every ``.yaml``/``.yml``
file below a directory (sorted, so the order is stable). Targets are
dotted import paths resolved later by the ImportPathResolver.

File format:

    actions:
      - name: math.add
        callable: myapp.math.add
        summary: Add two integers
        parameters:          # optional explicit shape
          - name: a
            type: int
          - name: b
            type: int
            default: 0

A mapping of ``name: {callable: ..., ...}`` under ``actions`` is accepted
as well.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ...action import MISSING, Action, ParameterDescriptor, ParameterKind
from ...exceptions import LoadError
from ...logging import log_debug
from ..base_loader import BaseLoader

# Type names accepted in the ``type`` field of a parameter
TYPE_NAMES: dict[str, Any] = {
    "any": Any,
    "str": str,
    "string": str,
    "int": int,
    "integer": int,
    "float": float,
    "number": float,
    "bool": bool,
    "boolean": bool,
    "list": list,
    "array": list,
    "dict": dict,
    "object": dict,
}


class YamlLoader(BaseLoader):
    """Loader for YAML action definition files.

    Malformed files raise LoadError: a definition file named explicitly in
    configuration must load completely or not at all.
    """

    def __init__(self, path: str | Path, name: str = "yaml") -> None:
        """Initialize the loader.

        Args:
            path: YAML file or directory of YAML files.
            name: Loader name for identification.
        """
        self._path = Path(path)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def definition_files(self) -> list[Path]:
        """List the files this loader reads, in load order."""
        if self._path.is_file():
            return [self._path]
        if not self._path.is_dir():
            raise LoadError(f"Action definition path does not exist: {self._path}")

        files: list[Path] = []
        for pattern in ("**/*.yaml", "**/*.yml"):
            files.extend(self._path.glob(pattern))
        files.sort()
        return files

    def load(self) -> list[Action]:
        actions: list[Action] = []
        seen: set[str] = set()

        for definition_file in self.definition_files():
            for action in self._load_file(definition_file):
                if action.name in seen:
                    raise LoadError(
                        f"Action '{action.name}' is declared twice under {self._path}",
                        metadata={"action": action.name, "loaders": [self._name]},
                    )
                seen.add(action.name)
                actions.append(action)

        log_debug(f"YamlLoader: Loaded {len(actions)} actions from {self._path}")
        return actions

    def _load_file(self, definition_file: Path) -> list[Action]:
        try:
            with definition_file.open() as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise LoadError(f"Failed to parse action file {definition_file}: {e}") from e

        if data is None:
            return []
        if not isinstance(data, dict):
            raise LoadError(f"Action file {definition_file} must contain a mapping")

        entries = data.get("actions", [])
        if isinstance(entries, dict):
            entries = [{"name": name, **(spec or {})} for name, spec in entries.items()]
        if not isinstance(entries, list):
            raise LoadError(f"'actions' in {definition_file} must be a list or mapping")

        return [self._parse_action(entry, definition_file) for entry in entries]

    def _parse_action(self, entry: Any, source: Path) -> Action:
        if not isinstance(entry, dict):
            raise LoadError(f"Invalid action entry in {source}: {entry!r}")

        name = entry.get("name")
        target = entry.get("callable")
        if not name or not isinstance(name, str):
            raise LoadError(f"Action entry without a name in {source}")
        if not target or not isinstance(target, str):
            raise LoadError(
                f"Action '{name}' in {source} needs a 'callable' import path",
                metadata={"action": name},
            )

        raw_parameters = entry.get("parameters")
        parameters = None
        if raw_parameters is not None:
            if not isinstance(raw_parameters, list):
                raise LoadError(f"Parameters of action '{name}' must be a list")
            parameters = tuple(self._parse_parameter(name, p) for p in raw_parameters)

        return Action(
            name=name,
            target=target,
            parameters=parameters,
            summary=entry.get("summary"),
            description=entry.get("description"),
            resolver=entry.get("resolver"),
            loader=self._name,
        )

    @staticmethod
    def _parse_parameter(action_name: str, raw: Any) -> ParameterDescriptor:
        if isinstance(raw, str):
            return ParameterDescriptor(name=raw)
        if not isinstance(raw, dict) or not raw.get("name"):
            raise LoadError(f"Invalid parameter in action '{action_name}': {raw!r}")

        type_name = str(raw.get("type", "any")).lower()
        if type_name not in TYPE_NAMES:
            raise LoadError(
                f"Unknown parameter type '{type_name}' in action '{action_name}'",
                metadata={"action": action_name, "parameter": raw["name"]},
            )

        default = raw["default"] if "default" in raw else MISSING
        if raw.get("required") is False and default is MISSING:
            default = None

        return ParameterDescriptor(
            name=str(raw["name"]),
            annotation=TYPE_NAMES[type_name],
            default=default,
            kind=ParameterKind.POSITIONAL_OR_KEYWORD,
            description=raw.get("description"),
        )
