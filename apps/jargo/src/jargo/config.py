from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from engine_runner import DEFAULT_BUILD_TASKS, DEFAULT_ENGINE_DIR_NAME

_CONFIG_VERSION = 1
CONFIG_FILENAME = "config.yaml"

ENV_HOME = "JARGO_HOME"
ENV_ENGINE_ARCHIVE = "JARGO_ENGINE_ARCHIVE"
ENV_TIMEOUT = "JARGO_BUILD_TIMEOUT_SECONDS"


@dataclass(frozen=True)
class JargoConfig:
    home: Path
    engine_dir_name: str = DEFAULT_ENGINE_DIR_NAME
    engine_archive: Path | None = None
    build_tasks: tuple[str, ...] = DEFAULT_BUILD_TASKS
    timeout_seconds: float | None = None


class ConfigError(ValueError):
    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint or f"Fix {CONFIG_FILENAME} under the jargo home or the JARGO_* variables."


def default_home() -> Path:
    return Path.home() / ".jargo"


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Failed to decode {path} as UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _parse_timeout(value: Any, *, where: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"Expected a number of seconds for timeout_seconds in {where}.")
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Expected a number of seconds for timeout_seconds in {where}.") from e
    if timeout < 0:
        raise ConfigError(f"timeout_seconds must be >= 0 in {where}.")
    # 0 disables the timeout.
    return timeout or None


def _apply_file(config: JargoConfig, path: Path) -> JargoConfig:
    data = _load_yaml_mapping(path)
    allowed = {"version", "engine_dir_name", "engine_archive", "build_tasks", "timeout_seconds"}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigError(
            f"Unknown keys in {path}: {', '.join(sorted(unknown))}. "
            f"Allowed: {', '.join(sorted(allowed))}."
        )

    version = data.get("version", _CONFIG_VERSION)
    if version != _CONFIG_VERSION:
        raise ConfigError(f"Unsupported config version in {path}: {version!r}.")

    updates: dict[str, Any] = {}
    if "engine_dir_name" in data:
        name = data["engine_dir_name"]
        if not isinstance(name, str) or not name.strip() or "/" in name or "\\" in name:
            raise ConfigError(f"Expected a plain directory name for engine_dir_name in {path}.")
        updates["engine_dir_name"] = name.strip()
    if "engine_archive" in data:
        archive = data["engine_archive"]
        if not isinstance(archive, str) or not archive.strip():
            raise ConfigError(f"Expected non-empty string for engine_archive in {path}.")
        candidate = Path(archive).expanduser()
        if not candidate.is_absolute():
            candidate = path.parent / candidate
        updates["engine_archive"] = candidate
    if "build_tasks" in data:
        tasks = data["build_tasks"]
        if (
            not isinstance(tasks, list)
            or not tasks
            or not all(isinstance(t, str) and t.strip() for t in tasks)
        ):
            raise ConfigError(f"Expected a non-empty list of task names for build_tasks in {path}.")
        updates["build_tasks"] = tuple(t.strip() for t in tasks)
    if "timeout_seconds" in data:
        updates["timeout_seconds"] = _parse_timeout(data["timeout_seconds"], where=str(path))
    return replace(config, **updates)


def load_config(
    *,
    home: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout_seconds: float | None = None,
    build_tasks: list[str] | None = None,
) -> JargoConfig:
    """
    Resolve configuration: defaults < `<home>/config.yaml` < JARGO_* environment < arguments.

    `home` is the engine cache root (`~/.jargo` unless `JARGO_HOME` or the argument says
    otherwise); a missing config file is not an error.
    """

    environ = os.environ if env is None else env

    env_home = environ.get(ENV_HOME, "").strip()
    if home is not None:
        resolved_home = home
    elif env_home:
        resolved_home = Path(env_home).expanduser()
    else:
        resolved_home = default_home()

    config = JargoConfig(home=resolved_home)
    config_path = resolved_home / CONFIG_FILENAME
    if config_path.is_file():
        config = _apply_file(config, config_path)

    env_archive = environ.get(ENV_ENGINE_ARCHIVE, "").strip()
    if env_archive:
        config = replace(config, engine_archive=Path(env_archive).expanduser())
    env_timeout = environ.get(ENV_TIMEOUT, "").strip()
    if env_timeout:
        config = replace(config, timeout_seconds=_parse_timeout(env_timeout, where=ENV_TIMEOUT))

    if timeout_seconds is not None:
        config = replace(
            config, timeout_seconds=_parse_timeout(timeout_seconds, where="--timeout-seconds")
        )
    if build_tasks:
        config = replace(config, build_tasks=tuple(build_tasks))
    return config
