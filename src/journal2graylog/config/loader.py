"""Configuration loading pipeline."""

from __future__ import annotations

import importlib
import json
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Mapping, cast

from platformdirs import user_config_dir

from ..core.validation import ConfigurationError, validate_configuration
from .schema import ShipperConfig, build_config, default_config

try:  # pragma: no cover
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

try:  # pragma: no cover
    yaml_module = importlib.import_module("yaml")
except ModuleNotFoundError:  # pragma: no cover
    yaml_module = None

yaml: ModuleType | None = yaml_module


APP_NAME = "journal2graylog"
_ENV_PREFIX = "JOURNAL2GRAYLOG__"
_FILENAMES = ("journal2graylog.toml", "journal2graylog.yaml", "journal2graylog.yml")


def _load_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        try:
            return tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def _load_yaml(path: Path) -> Dict[str, Any]:
    if yaml is None or not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        loader = getattr(yaml, "safe_load", None)
        if not callable(loader):
            return {}
        yaml_loader = cast(Callable[[Any], Any], loader)
        data = yaml_loader(fh)
    if isinstance(data, Mapping):
        return {str(key): value for key, value in data.items()}
    return {}


def _load_file(path: Path) -> Dict[str, Any]:
    if path.suffix in {".yaml", ".yml"}:
        return _load_yaml(path)
    return _load_toml(path)


def _merge(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        existing = base.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge(existing, value)
        elif isinstance(value, Mapping) and isinstance(existing, Mapping):
            nested = dict(existing)
            base[key] = _merge(nested, value)
        elif isinstance(value, Mapping):
            base[key] = _merge({}, value)
        else:
            base[key] = value
    return base


def _load_from_dir(directory: Path) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for filename in _FILENAMES:
        payload = _load_file(directory / filename)
        if payload:
            data = _merge(data, payload)
    return data


def _load_user_config() -> Dict[str, Any]:
    cfg_dir = Path(user_config_dir(APP_NAME))
    if not cfg_dir.exists():
        return {}
    return _load_from_dir(cfg_dir)


def _load_local_config() -> Dict[str, Any]:
    return _load_from_dir(Path.cwd())


def _load_pyproject() -> Dict[str, Any]:
    path = Path("pyproject.toml")
    if not path.exists():
        return {}
    data = _load_toml(path)
    tool = data.get("tool", {})
    if not isinstance(tool, Mapping):
        return {}
    section = tool.get(APP_NAME, {})
    if isinstance(section, Mapping):
        return {str(key): value for key, value in section.items()}
    return {}


def _load_explicit(path: str | Path | None) -> Dict[str, Any]:
    if path is None:
        return {}
    explicit = Path(path)
    if not explicit.is_file():
        raise ConfigurationError(f"Configuration file not found: {explicit}")
    if explicit.suffix in {".yaml", ".yml"} and yaml is None:
        raise ConfigurationError(f"Reading {explicit} requires PyYAML to be installed")
    return _load_file(explicit)


def _coerce_value(value: str) -> Any:
    stripped = value.strip()
    lowered = stripped.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(stripped)
    except ValueError:
        try:
            return float(stripped)
        except ValueError:
            pass
    if stripped.startswith("[") or stripped.startswith("{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass
    return stripped


def _env_config() -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for env_key, raw_value in os.environ.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        path = env_key[len(_ENV_PREFIX) :].split("__")
        target: Dict[str, Any] = data
        for segment in path[:-1]:
            seg = segment.lower()
            child = target.setdefault(seg, {})
            target = cast(Dict[str, Any], child)
        target[path[-1].lower()] = _coerce_value(raw_value)
    return data


def _merge_overrides(*mappings: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = default_config()
    for mapping in mappings:
        if mapping:
            _merge(result, mapping)
    return result


def load_configuration(
    overrides: Dict[str, Any] | None = None,
    *,
    config_file: str | Path | None = None,
) -> ShipperConfig:
    """Load configuration from supported sources in precedence order."""

    overrides = overrides or {}
    merged = _merge_overrides(
        _load_user_config(),
        _load_local_config(),
        _load_pyproject(),
        _load_explicit(config_file),
        _env_config(),
        overrides,
    )
    try:
        config = build_config(merged)
    except (TypeError, ValueError) as exc:
        if isinstance(exc, ConfigurationError):
            raise
        raise ConfigurationError(str(exc)) from exc
    validate_configuration(config)
    return config
