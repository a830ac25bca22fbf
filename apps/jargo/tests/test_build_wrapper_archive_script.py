from __future__ import annotations

import importlib.util
import zipfile
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parents[3] / "scripts" / "build_wrapper_archive.py"


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("build_wrapper_archive", _SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_default_output_is_the_packaged_resource() -> None:
    script = _load_script()
    assert script._DEFAULT_OUT.parts[-3:] == ("engine_runner", "resources", "gradle-wrapper.zip")
    assert script._DEFAULT_OUT.parent.is_dir()


def test_packs_an_existing_wrapper_directory(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "project"
    (source / "gradle" / "wrapper").mkdir(parents=True)
    for rel in (
        "gradlew",
        "gradlew.bat",
        "gradle/wrapper/gradle-wrapper.jar",
        "gradle/wrapper/gradle-wrapper.properties",
    ):
        (source / rel).write_bytes(b"x")
    out = tmp_path / "gradle-wrapper.zip"

    code = _load_script().main(["--source", str(source), "--out", str(out)])

    assert code == 0
    assert f"Wrote {out}" in capsys.readouterr().out
    with zipfile.ZipFile(out) as zf:
        assert "gradlew" in zf.namelist()


def test_incomplete_wrapper_directory_exits_2(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = _load_script().main(["--source", str(tmp_path), "--out", str(tmp_path / "o.zip")])

    assert code == 2
    err = capsys.readouterr().err
    assert "Not a Gradle wrapper directory" in err
    assert "hint:" in err


def test_gradle_version_without_gradle_on_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    script = _load_script()
    monkeypatch.setattr(script.shutil, "which", lambda name: None)

    code = script.main(["--gradle-version", "8.5", "--out", str(tmp_path / "o.zip")])

    assert code == 2
    assert "`gradle` is not on PATH" in capsys.readouterr().err
