from __future__ import annotations

import argparse
import sys
from pathlib import Path

from engine_runner import (
    BuildFailure,
    BuildProcessError,
    BuildSuccess,
    EngineBootstrapError,
    EngineMissing,
)
from gradle_scripts import ScriptWriteError
from jargo_manifest import ManifestParseError

from jargo.config import ConfigError, load_config
from jargo.pipeline import run_pipeline
from jargo.scaffold import ScaffoldError, create_new_project

EXIT_OK = 0
EXIT_ENGINE_MISSING = 1
EXIT_INVALID = 2
EXIT_BUILD_FAILED = 3
EXIT_PROCESS_ERROR = 4


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _report_error(e: BaseException) -> None:
    _eprint(f"error: {e}")
    hint = getattr(e, "hint", None)
    if isinstance(hint, str) and hint:
        _eprint(f"hint: {hint}")


def _print_progress(message: str) -> None:
    print(message, flush=True)


def _print_captured(stdout: str, stderr: str) -> None:
    if stdout.strip():
        _eprint("stdout:")
        _eprint(stdout.rstrip())
    if stderr.strip():
        _eprint("stderr:")
        _eprint(stderr.rstrip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jargo",
        description="Build tool for Java projects: Jargo.toml in, shadow jar out (via Gradle).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    new_p = sub.add_parser("new", help="Create a new project skeleton with a default Jargo.toml.")
    new_p.add_argument("directory", type=Path, metavar="DIR", help="Project directory to create.")
    new_p.add_argument(
        "--force",
        action="store_true",
        help="Overwrite Jargo.toml and .gitignore if they already exist.",
    )

    build_p = sub.add_parser("build", help="Generate Gradle files and run the build.")
    build_p.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=None,
        metavar="DIR",
        help="Project directory containing Jargo.toml (default: current directory).",
    )
    build_p.add_argument(
        "--home",
        type=Path,
        default=None,
        help="jargo home holding config.yaml and the extracted Gradle wrapper "
        "(default: $JARGO_HOME or ~/.jargo).",
    )
    build_p.add_argument(
        "--timeout-seconds",
        type=float,
        default=None,
        help="Kill the Gradle process after this many seconds (0 disables).",
    )
    build_p.add_argument(
        "--task",
        dest="tasks",
        action="append",
        default=None,
        help="Gradle task to run (repeatable; default: clean shadowJar).",
    )
    build_p.add_argument(
        "--show-output",
        action="store_true",
        help="Print Gradle stdout/stderr even when the build succeeds.",
    )
    return parser


def _cmd_new(args: argparse.Namespace) -> int:
    try:
        manifest_path = create_new_project(args.directory, force=args.force)
    except (ScaffoldError, OSError) as e:
        _report_error(e)
        return EXIT_INVALID
    print(f"Project created at {manifest_path.parent}")
    return EXIT_OK


def _cmd_build(args: argparse.Namespace) -> int:
    project_dir: Path = (args.directory or Path.cwd()).resolve()
    try:
        config = load_config(
            home=args.home,
            timeout_seconds=args.timeout_seconds,
            build_tasks=args.tasks,
        )
        result = run_pipeline(project_dir, config, progress=_print_progress)
    except (
        ConfigError,
        ManifestParseError,
        ScriptWriteError,
        EngineBootstrapError,
        OSError,
    ) as e:
        _report_error(e)
        return EXIT_INVALID
    except BuildProcessError as e:
        _report_error(e)
        return EXIT_PROCESS_ERROR

    outcome = result.outcome
    if isinstance(outcome, EngineMissing):
        _eprint(f"error: gradlew not found at {outcome.launcher}")
        _eprint(f"hint: remove {result.engine_dir} so the wrapper is extracted again.")
        return EXIT_ENGINE_MISSING
    if isinstance(outcome, BuildSuccess):
        if args.show_output:
            _print_captured(outcome.stdout, outcome.stderr)
        print("Build successful.")
        print(f"log: {result.log_path}")
        return EXIT_OK

    if not isinstance(outcome, BuildFailure):
        raise TypeError(f"Unexpected build outcome: {outcome!r}")
    _print_captured(outcome.stdout, outcome.stderr)
    if outcome.interrupted == "timeout":
        _eprint(f"Build timed out after {config.timeout_seconds}s.")
    elif outcome.interrupted == "cancelled":
        _eprint("Build cancelled.")
    else:
        _eprint(f"Build failed (exit_code={outcome.exit_code}).")
    _eprint(f"log: {result.log_path}")
    return EXIT_BUILD_FAILED


def main(argv: list[str] | None = None) -> None:
    """Run the CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd == "new":
        raise SystemExit(_cmd_new(args))
    if args.cmd == "build":
        raise SystemExit(_cmd_build(args))
    raise SystemExit(EXIT_INVALID)


if __name__ == "__main__":
    main()
