from __future__ import annotations

import argparse
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path

from engine_runner import EngineBootstrapError, pack_wrapper_archive

_REPO_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_OUT = (
    _REPO_ROOT
    / "packages"
    / "engine_runner"
    / "src"
    / "engine_runner"
    / "resources"
    / "gradle-wrapper.zip"
)


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _generate_wrapper(gradle_version: str, work_dir: Path) -> Path:
    gradle = shutil.which("gradle")
    if gradle is None:
        raise RuntimeError("`gradle` is not on PATH; pass --source with an existing wrapper.")
    # `gradle wrapper` needs a settings file to treat the directory as a build root.
    (work_dir / "settings.gradle.kts").write_text(
        'rootProject.name = "wrapper"\n', encoding="utf-8"
    )
    cmd = [gradle, "--no-daemon", "wrapper", "--gradle-version", gradle_version]
    proc = subprocess.run(cmd, cwd=str(work_dir), capture_output=True, text=True, check=False)
    if proc.returncode != 0:
        raise RuntimeError(
            f"`{' '.join(cmd)}` failed (exit_code={proc.returncode}):\n{proc.stderr.strip()}"
        )
    return work_dir


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Package the Gradle wrapper bundled with jargo (gradle-wrapper.zip)."
    )
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument(
        "--source",
        type=Path,
        help="Directory that already holds gradlew, gradlew.bat and gradle/wrapper/.",
    )
    src.add_argument(
        "--gradle-version",
        help="Run `gradle wrapper --gradle-version X` in a temp directory and pack the result.",
    )
    parser.add_argument("--out", type=Path, default=_DEFAULT_OUT)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        if args.source is not None:
            out = pack_wrapper_archive(args.source, args.out)
        else:
            with tempfile.TemporaryDirectory(prefix="jargo-wrapper-") as tmp:
                source = _generate_wrapper(args.gradle_version, Path(tmp))
                out = pack_wrapper_archive(source, args.out)
    except (EngineBootstrapError, RuntimeError) as e:
        _eprint(f"error: {e}")
        hint = getattr(e, "hint", None)
        if hint:
            _eprint(f"hint: {hint}")
        return 2
    print(f"Wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
