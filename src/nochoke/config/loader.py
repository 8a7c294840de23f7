"""Load engine config from YAML or JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .schema import EngineConfig

ENGINE_SECTION = "engine"


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or parsed."""


def load_config(path: str | Path | None = None, overrides: Mapping[str, Any] | None = None) -> EngineConfig:
    """Build an engine config from a YAML/JSON file and explicit overrides.

    The file may hold the engine keys at its root or under an ``engine``
    section, so one file can be shared with other tools. Overrides whose
    value is ``None`` are ignored; the rest win over the file.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(_read_engine_section(Path(path)))
    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})

    return EngineConfig.model_validate(data)


def _read_engine_section(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    reader = _READERS.get(config_path.suffix.lower())
    if reader is None:
        raise ConfigLoadError(
            f"Unsupported config format '{config_path.suffix.lower()}'. Use .yaml/.yml or .json."
        )

    with config_path.open("r", encoding="utf-8") as file:
        parsed = reader(file)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigLoadError("Config root must be a JSON/YAML object.")

    section = parsed.get(ENGINE_SECTION, parsed)
    if not isinstance(section, dict):
        raise ConfigLoadError(f"Config section '{ENGINE_SECTION}' must be an object.")
    return section


_READERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}
