from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

WrapperZipFactory = Callable[[str], Path]


@pytest.fixture
def fake_wrapper_zip(tmp_path: Path) -> WrapperZipFactory:
    """Build a wrapper zip whose CRLF `gradlew` runs the given shell body."""

    def _make(gradlew_body: str) -> Path:
        path = tmp_path / "gradle-wrapper.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("gradlew", "#!/bin/sh\r\n" + gradlew_body.replace("\n", "\r\n"))
            zf.writestr("gradlew.bat", "@echo off\r\nexit /b 0\r\n")
            zf.writestr("gradle/wrapper/gradle-wrapper.properties", "distributionUrl=x\n")
        return path

    return _make


DEMO_MANIFEST = "\n".join(
    [
        "[package]",
        'name = "demo"',
        'version = "1.0"',
        'main = "com.x.Main"',
        "",
        "[dependencies]",
        'a = "org:lib:1.0"',
        'b = { value = "org:lib2:2.0", scope = "Runtime" }',
        "",
    ]
)


@pytest.fixture
def demo_project(tmp_path: Path) -> Path:
    project = tmp_path / "demo"
    project.mkdir()
    (project / "Jargo.toml").write_text(DEMO_MANIFEST, encoding="utf-8")
    return project


@pytest.fixture(autouse=True)
def _isolated_jargo_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("JARGO_HOME", str(tmp_path / "jargo-home"))
    monkeypatch.delenv("JARGO_ENGINE_ARCHIVE", raising=False)
    monkeypatch.delenv("JARGO_BUILD_TIMEOUT_SECONDS", raising=False)
