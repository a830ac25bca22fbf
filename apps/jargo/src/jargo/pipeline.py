from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from engine_runner import (
    BuildOutcome,
    BuildSuccess,
    ensure_engine_available,
    run_build,
    write_build_transcript,
)
from gradle_scripts import GeneratedScripts, emit_gradle_project
from jargo_manifest import MANIFEST_FILENAME, load_manifest

from jargo.config import JargoConfig

BUILD_LOG_RELDIR = Path("build") / "jargo"


class BuildStage(Enum):
    IDLE = "idle"
    GENERATING_SCRIPTS = "generating_scripts"
    BOOTSTRAPPING_ENGINE = "bootstrapping_engine"
    INVOKING = "invoking"
    SUCCESS = "success"
    FAILURE = "failure"


_TRANSITIONS: dict[BuildStage, frozenset[BuildStage]] = {
    BuildStage.IDLE: frozenset({BuildStage.GENERATING_SCRIPTS}),
    BuildStage.GENERATING_SCRIPTS: frozenset({BuildStage.BOOTSTRAPPING_ENGINE}),
    BuildStage.BOOTSTRAPPING_ENGINE: frozenset({BuildStage.INVOKING}),
    BuildStage.INVOKING: frozenset({BuildStage.SUCCESS, BuildStage.FAILURE}),
    BuildStage.SUCCESS: frozenset(),
    BuildStage.FAILURE: frozenset(),
}


@dataclass(frozen=True)
class PipelineResult:
    stage: BuildStage
    scripts: GeneratedScripts
    engine_dir: Path
    outcome: BuildOutcome
    log_path: Path


class _StageTracker:
    def __init__(self) -> None:
        self.stage = BuildStage.IDLE

    def advance(self, nxt: BuildStage) -> None:
        if nxt not in _TRANSITIONS[self.stage]:
            raise RuntimeError(f"Illegal build stage transition: {self.stage.value} -> {nxt.value}")
        self.stage = nxt


def run_pipeline(
    project_dir: Path,
    config: JargoConfig,
    *,
    cancel_event: threading.Event | None = None,
    progress: Callable[[str], None] | None = None,
) -> PipelineResult:
    """
    Generate the Gradle scripts for `project_dir`, make sure the wrapper is extracted, and run it.

    Stages run once each in order; the first exception aborts the run and propagates. The
    manifest is fully parsed before anything is written, so a bad `Jargo.toml` leaves the
    project untouched. A build that runs and fails is not an exception: it is returned as a
    `PipelineResult` in the FAILURE stage.

    `progress`, when given, receives a one-line message as each stage completes and before the
    build starts.
    """

    tracker = _StageTracker()
    report = progress or (lambda message: None)

    tracker.advance(BuildStage.GENERATING_SCRIPTS)
    model = load_manifest(project_dir / MANIFEST_FILENAME)
    scripts = emit_gradle_project(model, project_dir)
    report(f"Gradle files generated in {project_dir}")

    tracker.advance(BuildStage.BOOTSTRAPPING_ENGINE)
    engine_dir = ensure_engine_available(
        config.home,
        archive=config.engine_archive,
        engine_dir_name=config.engine_dir_name,
    )
    report(f"Gradle wrapper ready in {engine_dir}")

    tracker.advance(BuildStage.INVOKING)
    report("Running gradlew " + " ".join(config.build_tasks))
    outcome = run_build(
        project_dir,
        engine_dir,
        tasks=config.build_tasks,
        timeout_seconds=config.timeout_seconds,
        cancel_event=cancel_event,
    )
    log_path = write_build_transcript(project_dir / BUILD_LOG_RELDIR, outcome)

    tracker.advance(
        BuildStage.SUCCESS if isinstance(outcome, BuildSuccess) else BuildStage.FAILURE
    )
    return PipelineResult(
        stage=tracker.stage,
        scripts=scripts,
        engine_dir=engine_dir,
        outcome=outcome,
        log_path=log_path,
    )
