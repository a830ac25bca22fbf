from gradle_scripts.emit import (
    BUILD_FILENAME,
    SETTINGS_FILENAME,
    GeneratedScripts,
    ScriptWriteError,
    emit_gradle_project,
    read_root_project_name,
    render_build_script,
    render_dependency_block,
    render_settings_script,
)
from gradle_scripts.kts import KtsWriter, kts_string, parse_kts_string

__all__ = [
    "BUILD_FILENAME",
    "SETTINGS_FILENAME",
    "GeneratedScripts",
    "KtsWriter",
    "ScriptWriteError",
    "emit_gradle_project",
    "kts_string",
    "parse_kts_string",
    "read_root_project_name",
    "render_build_script",
    "render_dependency_block",
    "render_settings_script",
]
