from __future__ import annotations

from pathlib import Path

import pytest

from jargo import ConfigError, load_config
from jargo.config import default_home


def test_defaults_without_env(tmp_path: Path) -> None:
    config = load_config(env={})
    assert config.home == default_home()
    assert config.engine_dir_name == "gradle-wrapper"
    assert config.engine_archive is None
    assert config.build_tasks == ("clean", "shadowJar")
    assert config.timeout_seconds is None


def test_env_overrides(tmp_path: Path) -> None:
    config = load_config(
        env={
            "JARGO_HOME": str(tmp_path / "h"),
            "JARGO_ENGINE_ARCHIVE": str(tmp_path / "w.zip"),
            "JARGO_BUILD_TIMEOUT_SECONDS": "90",
        }
    )
    assert config.home == tmp_path / "h"
    assert config.engine_archive == tmp_path / "w.zip"
    assert config.timeout_seconds == 90.0


def test_zero_timeout_disables(tmp_path: Path) -> None:
    config = load_config(env={"JARGO_HOME": str(tmp_path), "JARGO_BUILD_TIMEOUT_SECONDS": "0"})
    assert config.timeout_seconds is None


def test_config_file_then_env_then_arguments(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text(
        "\n".join(
            [
                "version: 1",
                "engine_dir_name: gw-8",
                "engine_archive: wrappers/gw.zip",
                "build_tasks: [clean, build]",
                "timeout_seconds: 30",
                "",
            ]
        ),
        encoding="utf-8",
    )

    from_file = load_config(home=tmp_path, env={})
    assert from_file.engine_dir_name == "gw-8"
    assert from_file.engine_archive == tmp_path / "wrappers" / "gw.zip"
    assert from_file.build_tasks == ("clean", "build")
    assert from_file.timeout_seconds == 30.0

    with_env = load_config(home=tmp_path, env={"JARGO_BUILD_TIMEOUT_SECONDS": "60"})
    assert with_env.timeout_seconds == 60.0

    with_args = load_config(
        home=tmp_path,
        env={"JARGO_BUILD_TIMEOUT_SECONDS": "60"},
        timeout_seconds=5,
        build_tasks=["jar"],
    )
    assert with_args.timeout_seconds == 5.0
    assert with_args.build_tasks == ("jar",)


@pytest.mark.parametrize(
    ("body", "needle"),
    [
        ("surprise: 1\n", "Unknown keys"),
        ("- a\n- b\n", "Expected a YAML mapping"),
        ("version: 2\n", "Unsupported config version"),
        ("build_tasks: []\n", "build_tasks"),
        ("timeout_seconds: soon\n", "timeout_seconds"),
        ("engine_dir_name: a/b\n", "engine_dir_name"),
        ("key: [unclosed\n", "Failed to parse YAML"),
    ],
)
def test_invalid_config_file(tmp_path: Path, body: str, needle: str) -> None:
    (tmp_path / "config.yaml").write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        load_config(home=tmp_path, env={})
    assert needle in str(exc.value)


def test_invalid_env_timeout(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(home=tmp_path, env={"JARGO_BUILD_TIMEOUT_SECONDS": "-1"})


def test_config_file_with_non_utf8_bytes(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_bytes(b"engine_dir_name: \xff\n")
    with pytest.raises(ConfigError) as exc:
        load_config(home=tmp_path, env={})
    assert "Failed to decode" in str(exc.value)
