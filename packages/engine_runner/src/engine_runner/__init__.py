from engine_runner.bootstrap import (
    DEFAULT_ENGINE_DIR_NAME,
    EngineBootstrapError,
    ensure_engine_available,
    is_launcher_script,
    pack_wrapper_archive,
)
from engine_runner.launcher import (
    DEFAULT_BUILD_TASKS,
    BuildFailure,
    BuildOutcome,
    BuildProcessError,
    BuildSuccess,
    EngineMissing,
    launcher_path,
    outcome_status,
    run_build,
    write_build_transcript,
)

__all__ = [
    "DEFAULT_BUILD_TASKS",
    "DEFAULT_ENGINE_DIR_NAME",
    "BuildFailure",
    "BuildOutcome",
    "BuildProcessError",
    "BuildSuccess",
    "EngineBootstrapError",
    "EngineMissing",
    "ensure_engine_available",
    "is_launcher_script",
    "launcher_path",
    "outcome_status",
    "pack_wrapper_archive",
    "run_build",
    "write_build_transcript",
]
