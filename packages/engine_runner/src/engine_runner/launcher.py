from __future__ import annotations

import json
import os
import signal
import subprocess
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from engine_runner.bootstrap import POSIX_LAUNCHER, WINDOWS_LAUNCHER

DEFAULT_BUILD_TASKS: tuple[str, ...] = ("clean", "shadowJar")
_DRAIN_TIMEOUT_SECONDS = 5.0


class BuildProcessError(RuntimeError):
    def __init__(self, message: str, *, argv: Sequence[str], hint: str | None = None) -> None:
        super().__init__(message)
        self.argv = tuple(argv)
        self.hint = hint or (
            "Ensure a Java runtime is installed (JAVA_HOME or `java` on PATH) and the "
            "wrapper launcher is executable."
        )


@dataclass(frozen=True)
class BuildSuccess:
    argv: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int = 0


@dataclass(frozen=True)
class BuildFailure:
    argv: tuple[str, ...]
    exit_code: int | None
    stdout: str
    stderr: str
    interrupted: Literal["timeout", "cancelled"] | None = None


@dataclass(frozen=True)
class EngineMissing:
    launcher: Path


BuildOutcome = BuildSuccess | BuildFailure | EngineMissing


def launcher_path(engine_dir: Path, *, is_windows: bool | None = None) -> Path:
    windows = os.name == "nt" if is_windows is None else is_windows
    return engine_dir / (WINDOWS_LAUNCHER if windows else POSIX_LAUNCHER)


def _new_process_group_kwargs() -> dict[str, Any]:
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def _kill_process_tree(proc: subprocess.Popen[str]) -> None:
    # The launcher runs the JVM as a child; killing only the launcher orphans it.
    if os.name == "nt":
        try:
            subprocess.run(
                ["taskkill", "/T", "/F", "/PID", str(proc.pid)],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            pass
    else:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
    proc.kill()


def _drain(proc: subprocess.Popen[str]) -> tuple[str, str]:
    try:
        stdout, stderr = proc.communicate(timeout=_DRAIN_TIMEOUT_SECONDS)
    except subprocess.TimeoutExpired:
        # Something outside the process group still holds the pipes.
        for stream in (proc.stdout, proc.stderr):
            if stream is not None:
                stream.close()
        proc.wait()
        return "", ""
    return stdout or "", stderr or ""


def run_build(
    project_dir: Path,
    engine_dir: Path,
    *,
    tasks: Sequence[str] = DEFAULT_BUILD_TASKS,
    timeout_seconds: float | None = None,
    cancel_event: threading.Event | None = None,
    poll_interval_seconds: float = 0.1,
) -> BuildOutcome:
    """
    Run the Gradle wrapper from `engine_dir` against `project_dir` and wait for it to finish.

    Output is buffered in full and never inspected: the outcome depends only on the exit status.
    A missing launcher is reported as `EngineMissing` rather than raised. When
    `timeout_seconds` elapses or `cancel_event` is set, the launcher and every process it
    started (it runs in its own process group) are killed and a `BuildFailure` with
    `interrupted` set is returned.

    Raises
    ------
    BuildProcessError
        If the launcher could not be started at all.
    """

    launcher = launcher_path(engine_dir)
    if not launcher.is_file():
        return EngineMissing(launcher=launcher)

    argv = (str(launcher), *tasks)
    try:
        proc = subprocess.Popen(
            list(argv),
            cwd=str(project_dir),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            **_new_process_group_kwargs(),
        )
    except OSError as e:
        raise BuildProcessError(f"Failed to start {launcher}: {e}", argv=argv) from e

    start = time.monotonic()
    interrupted: Literal["timeout", "cancelled"] | None = None
    while True:
        try:
            stdout, stderr = proc.communicate(timeout=poll_interval_seconds)
            break
        except subprocess.TimeoutExpired:
            pass
        if cancel_event is not None and cancel_event.is_set():
            interrupted = "cancelled"
        elif timeout_seconds is not None and (time.monotonic() - start) > timeout_seconds:
            interrupted = "timeout"
        else:
            continue
        _kill_process_tree(proc)
        stdout, stderr = _drain(proc)
        break

    if interrupted is not None:
        note = (
            f"Build timed out after {timeout_seconds:.1f}s; process killed.\n"
            if interrupted == "timeout"
            else "Build cancelled; process killed.\n"
        )
        return BuildFailure(
            argv=argv,
            exit_code=proc.returncode,
            stdout=stdout or "",
            stderr=(stderr or "") + note,
            interrupted=interrupted,
        )
    if proc.returncode == 0:
        return BuildSuccess(argv=argv, stdout=stdout or "", stderr=stderr or "")
    return BuildFailure(
        argv=argv, exit_code=proc.returncode, stdout=stdout or "", stderr=stderr or ""
    )


def outcome_status(outcome: BuildOutcome) -> str:
    if isinstance(outcome, BuildSuccess):
        return "success"
    if isinstance(outcome, EngineMissing):
        return "engine_missing"
    if outcome.interrupted is not None:
        return outcome.interrupted
    return "failure"


def write_build_transcript(log_dir: Path, outcome: BuildOutcome) -> Path:
    """Write `build.log` (command, exit code, captured output) and `build.json` into `log_dir`."""
    lines: list[str] = []
    meta: dict[str, Any] = {"kind": "gradle_build", "status": outcome_status(outcome)}
    if isinstance(outcome, EngineMissing):
        lines.append(f"launcher not found: {outcome.launcher}")
        meta["launcher"] = str(outcome.launcher)
    else:
        lines.append("$ " + " ".join(outcome.argv))
        lines.append(f"exit_code={outcome.exit_code}")
        if outcome.stdout.strip():
            lines.append("stdout:")
            lines.append(outcome.stdout.rstrip())
        if outcome.stderr.strip():
            lines.append("stderr:")
            lines.append(outcome.stderr.rstrip())
        meta["argv"] = list(outcome.argv)
        meta["exit_code"] = outcome.exit_code

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "build.log"
    log_path.write_text("\n".join(lines).rstrip() + "\n", encoding="utf-8")
    (log_dir / "build.json").write_text(
        json.dumps(meta, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )
    return log_path
