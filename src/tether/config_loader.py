"""Load TetherConfig from tether.yaml / tether.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from dataclasses import fields
from pathlib import Path

import yaml

from tether._errors import ConfigError
from tether.config import TetherConfig

_KNOWN_KEYS = frozenset(f.name for f in fields(TetherConfig))


def load_config(root: Path, **overrides: object) -> TetherConfig:
    """Load TetherConfig from root, optionally merging tether.yaml.

    Looks for tether.yaml, tether.yml, or tether.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; ``None``
    overrides are ignored so CLI flags left unset fall through to the file.
    """
    file_config = _read_tether_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = set(merged) - _KNOWN_KEYS
    if unknown:
        msg = f"Unknown config keys: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)
    return TetherConfig(**merged)  # type: ignore[arg-type]


def _read_tether_config(root: Path) -> dict[str, object]:
    """Read tether config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("tether.yaml", "tether.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "tether.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        return {}
    return _flatten_tether_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_tether_section(data)


def _flatten_tether_section(data: dict[str, object]) -> dict[str, object]:
    """Extract tether.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("tether")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "tether" and k in _KNOWN_KEYS:
            result[k] = v
    return result
