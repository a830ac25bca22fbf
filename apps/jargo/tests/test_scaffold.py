from __future__ import annotations

from pathlib import Path

import pytest
from jargo_manifest import load_manifest

from jargo import ScaffoldError, create_new_project
from jargo.scaffold import slugify


def test_new_project_manifest_parses(tmp_path: Path) -> None:
    manifest_path = create_new_project(tmp_path / "hello-jvm")

    model = load_manifest(manifest_path)
    assert model.package.name == "hello-jvm"
    assert model.package.version == "0.1.0"
    assert model.package.main == "com.example.Main"
    assert dict(model.dependencies) == {}

    gitignore = (tmp_path / "hello-jvm" / ".gitignore").read_text(encoding="utf-8")
    assert gitignore.splitlines() == [
        "build/",
        ".gradle/",
        "build.gradle.kts",
        "settings.gradle.kts",
    ]


def test_new_project_refuses_to_overwrite(tmp_path: Path) -> None:
    (tmp_path / "Jargo.toml").write_text("keep me\n", encoding="utf-8")
    with pytest.raises(ScaffoldError):
        create_new_project(tmp_path)
    assert (tmp_path / "Jargo.toml").read_text(encoding="utf-8") == "keep me\n"

    create_new_project(tmp_path, force=True)
    assert "[package]" in (tmp_path / "Jargo.toml").read_text(encoding="utf-8")


def test_new_project_rejects_file_path(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(ScaffoldError):
        create_new_project(target)


def test_slugify() -> None:
    assert slugify("My Project!") == "My-Project"
    assert slugify("...") == "project"
    assert slugify("a/b/c") == "c"
