from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from jargo_manifest import DependencyDeclaration, ManifestModel, resolve_directive

from gradle_scripts.kts import KtsWriter, kts_string, parse_kts_string

SETTINGS_FILENAME = "settings.gradle.kts"
BUILD_FILENAME = "build.gradle.kts"

SHADOW_PLUGIN_ID = "com.github.johnrengelman.shadow"
SHADOW_PLUGIN_VERSION = "8.1.1"
_SHADOW_JAR_TASK_TYPE = "com.github.jengelman.gradle.plugins.shadow.tasks.ShadowJar"

_ROOT_NAME_RE = re.compile(r'^\s*rootProject\.name\s*=\s*("(?:[^"\\]|\\.)*")\s*$', re.MULTILINE)


class ScriptWriteError(OSError):
    def __init__(self, path: Path, error: OSError) -> None:
        super().__init__(f"Failed to write {path}: {error}")
        self.filename = str(path)
        self.path = path
        self.hint = "Check that the project directory exists and is writable."


@dataclass(frozen=True)
class GeneratedScripts:
    settings_path: Path
    build_path: Path


def render_settings_script(model: ManifestModel) -> str:
    return f"rootProject.name = {kts_string(model.package.name)}\n"


def read_root_project_name(settings_text: str) -> str:
    m = _ROOT_NAME_RE.search(settings_text)
    if m is None:
        raise ValueError("No `rootProject.name = \"...\"` statement found.")
    return parse_kts_string(m.group(1))


def render_dependency_block(dependencies: Mapping[str, DependencyDeclaration]) -> str:
    """Return the body of `dependencies { }`: one indented directive line per entry, or ""."""
    lines: list[str] = []
    for decl in dependencies.values():
        resolved = resolve_directive(decl)
        lines.append(f"    {resolved.keyword}({kts_string(resolved.coordinate)})\n")
    return "".join(lines)


def render_build_script(model: ManifestModel) -> str:
    package = model.package
    w = KtsWriter()
    with w.block("plugins"):
        w.line("java")
        w.line("application")
        w.line(f"id({kts_string(SHADOW_PLUGIN_ID)}) version {kts_string(SHADOW_PLUGIN_VERSION)}")
    w.line()
    with w.block("repositories"):
        w.line("mavenCentral()")
    w.line()
    w.line("dependencies {")
    w.raw(render_dependency_block(model.dependencies))
    w.line("}")
    w.line()
    with w.block("application"):
        w.call("mainClass.set", package.main)
    w.line()
    with w.block("tasks"):
        with w.block(f"named<{_SHADOW_JAR_TASK_TYPE}>({kts_string('shadowJar')})"):
            w.call("archiveBaseName.set", package.name)
            w.call("archiveClassifier.set", "")
            w.call("archiveVersion.set", package.version)
        w.line()
        with w.block("build"):
            w.line("dependsOn(shadowJar)")
    return w.render()


def _write_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(text, encoding="utf-8", newline="\n")
        os.replace(tmp, path)
    except OSError as e:
        try:
            if tmp.exists():
                tmp.unlink()
        except OSError:
            pass
        raise ScriptWriteError(path, e) from e


def emit_gradle_project(model: ManifestModel, target_dir: Path) -> GeneratedScripts:
    """
    Write `settings.gradle.kts` and `build.gradle.kts` for `model` into `target_dir`.

    Both scripts are rendered in memory first; each file is then written to a sibling temp file
    and moved into place, so Gradle never sees a half-written script.
    """

    settings_text = render_settings_script(model)
    build_text = render_build_script(model)

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ScriptWriteError(target_dir, e) from e

    settings_path = target_dir / SETTINGS_FILENAME
    build_path = target_dir / BUILD_FILENAME
    _write_atomic(settings_path, settings_text)
    _write_atomic(build_path, build_text)
    return GeneratedScripts(settings_path=settings_path, build_path=build_path)
