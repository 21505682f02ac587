from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML

from opschema.errors import OpschemaError

from .model import EmitterConfig


class ConfigError(OpschemaError):
    pass


_yaml = YAML(typ="safe")


def load_emitter_config(path: Path | str) -> EmitterConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Missing config: {path}")
    data = _load_yaml(path)
    if data is None:
        return EmitterConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config must be a YAML mapping at the top level.")
    try:
        return EmitterConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def _load_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to parse YAML: {path}") from exc
