from __future__ import annotations

import re
from pathlib import Path

import tomlkit
from jargo_manifest import MANIFEST_FILENAME

DEFAULT_VERSION = "0.1.0"
DEFAULT_MAIN_CLASS = "com.example.Main"

_GITIGNORE_LINES = (
    "build/",
    ".gradle/",
    "build.gradle.kts",
    "settings.gradle.kts",
)

_SLUG_RE = re.compile(r"[^a-zA-Z0-9._-]+")


class ScaffoldError(RuntimeError):
    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint or "Pass --force to overwrite the existing project files."


def slugify(value: str) -> str:
    s = value.strip()
    s = s.replace("\\", "/")
    s = s.rsplit("/", maxsplit=1)[-1]
    s = _SLUG_RE.sub("-", s)
    s = s.strip("-._")
    return s or "project"


def render_manifest(name: str) -> str:
    doc = tomlkit.document()
    package = tomlkit.table()
    package.add("name", name)
    package.add("version", DEFAULT_VERSION)
    package.add("main", DEFAULT_MAIN_CLASS)
    doc.add("package", package)
    doc.add("dependencies", tomlkit.table())
    return tomlkit.dumps(doc)


def create_new_project(project_dir: Path, *, force: bool = False) -> Path:
    """Write a starter `Jargo.toml` and `.gitignore` into `project_dir` and return the manifest."""
    project_dir = project_dir.resolve()
    manifest_path = project_dir / MANIFEST_FILENAME
    if manifest_path.exists() and not force:
        raise ScaffoldError(f"{manifest_path} already exists.")
    if project_dir.exists() and not project_dir.is_dir():
        raise ScaffoldError(
            f"Project path exists and is not a directory: {project_dir}",
            hint="Choose a different project directory.",
        )

    project_dir.mkdir(parents=True, exist_ok=True)
    manifest_path.write_text(render_manifest(slugify(project_dir.name)), encoding="utf-8")
    (project_dir / ".gitignore").write_text(
        "\n".join(_GITIGNORE_LINES) + "\n", encoding="utf-8", newline="\n"
    )
    return manifest_path
