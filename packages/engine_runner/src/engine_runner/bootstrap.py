from __future__ import annotations

import importlib.resources
import os
import shutil
import stat
import tempfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import IO

DEFAULT_ENGINE_DIR_NAME = "gradle-wrapper"
BUNDLED_ARCHIVE_NAME = "gradle-wrapper.zip"
_BUNDLED_ARCHIVE_LABEL = f"engine_runner:resources/{BUNDLED_ARCHIVE_NAME}"
POSIX_LAUNCHER = "gradlew"
WINDOWS_LAUNCHER = "gradlew.bat"
WRAPPER_ARCHIVE_ENTRIES: tuple[str, ...] = (
    POSIX_LAUNCHER,
    WINDOWS_LAUNCHER,
    "gradle/wrapper/gradle-wrapper.jar",
    "gradle/wrapper/gradle-wrapper.properties",
)
_MISSING_BUNDLE_HINT = (
    "This install has no bundled Gradle wrapper. Set JARGO_ENGINE_ARCHIVE to a wrapper zip, "
    "or build one with scripts/build_wrapper_archive.py."
)

_LAUNCHER_MODE = (
    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
)  # 0o755


class EngineBootstrapError(OSError):
    def __init__(self, message: str, *, path: Path, hint: str | None = None) -> None:
        super().__init__(message)
        self.filename = str(path)
        self.path = path
        self.hint = hint or (
            f"Remove {path} if it is a leftover and rerun the build; "
            "set JARGO_ENGINE_ARCHIVE to use a different wrapper archive."
        )


def is_launcher_script(entry_name: str) -> bool:
    base = PurePosixPath(entry_name).name
    return base == POSIX_LAUNCHER or base.endswith((".sh", ".bat"))


def _safe_relpath(entry_name: str) -> PurePosixPath:
    rel = PurePosixPath(entry_name.replace("\\", "/"))
    if rel.is_absolute() or ".." in rel.parts or (rel.parts and rel.parts[0].endswith(":")):
        raise ValueError(f"Archive entry escapes the extraction directory: {entry_name!r}")
    return rel


@contextmanager
def _open_archive(archive: Path | None) -> Iterator[IO[bytes]]:
    if archive is not None:
        with archive.open("rb") as f:
            yield f
        return
    resource = importlib.resources.files("engine_runner") / "resources" / BUNDLED_ARCHIVE_NAME
    if not resource.is_file():
        raise FileNotFoundError(f"Bundled engine archive is missing: {_BUNDLED_ARCHIVE_LABEL}")
    with resource.open("rb") as f:
        yield f


def _extract_archive(zf: zipfile.ZipFile, dest: Path, *, normalize_line_endings: bool) -> None:
    for info in zf.infolist():
        rel = _safe_relpath(info.filename)
        out_path = dest.joinpath(*rel.parts)
        if info.is_dir():
            out_path.mkdir(parents=True, exist_ok=True)
            continue
        out_path.parent.mkdir(parents=True, exist_ok=True)
        data = zf.read(info)
        # Wrapper archives built on Windows ship CRLF launchers that /bin/sh cannot run.
        if normalize_line_endings and is_launcher_script(info.filename):
            data = data.replace(b"\r\n", b"\n")
        out_path.write_bytes(data)


def _make_launcher_executable(engine_dir: Path) -> None:
    if os.name != "posix":
        return
    launcher = engine_dir / POSIX_LAUNCHER
    if launcher.exists():
        launcher.chmod(_LAUNCHER_MODE)


def ensure_engine_available(
    cache_root: Path,
    *,
    archive: Path | None = None,
    engine_dir_name: str = DEFAULT_ENGINE_DIR_NAME,
) -> Path:
    """
    Return `<cache_root>/<engine_dir_name>`, extracting the Gradle wrapper archive on first use.

    An existing engine directory is returned as-is without touching the filesystem. A fresh
    extraction happens in a temp directory under `cache_root` and is renamed into place only
    once complete, so the final path never holds a half-extracted wrapper. When two processes
    race, the loser discards its copy and uses the winner's.

    Parameters
    ----------
    cache_root
        Per-user cache directory (normally `~/.jargo`).
    archive
        Zip file to extract. Defaults to the wrapper archive bundled with `engine_runner`.
    engine_dir_name
        Name of the extracted directory under `cache_root`.

    Raises
    ------
    EngineBootstrapError
        When the archive cannot be read or extracted, or the cache directory is not writable.
    """

    engine_dir = cache_root / engine_dir_name
    if engine_dir.exists():
        return engine_dir

    try:
        cache_root.mkdir(parents=True, exist_ok=True)
        staging = Path(
            tempfile.mkdtemp(prefix=f".{engine_dir_name}.", suffix=".partial", dir=cache_root)
        )
    except OSError as e:
        raise EngineBootstrapError(
            f"Failed to prepare engine cache directory {cache_root}: {e}", path=cache_root
        ) from e

    source = str(archive) if archive is not None else _BUNDLED_ARCHIVE_LABEL
    try:
        with _open_archive(archive) as raw, zipfile.ZipFile(raw) as zf:
            _extract_archive(zf, staging, normalize_line_endings=os.name == "posix")
        _make_launcher_executable(staging)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        shutil.rmtree(staging, ignore_errors=True)
        bundle_missing = archive is None and isinstance(e, FileNotFoundError)
        raise EngineBootstrapError(
            f"Failed to extract engine archive {source} into {engine_dir}: {e}",
            path=archive if archive is not None else engine_dir,
            hint=_MISSING_BUNDLE_HINT if bundle_missing else None,
        ) from e
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    try:
        os.rename(staging, engine_dir)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        if engine_dir.is_dir():
            return engine_dir
        raise EngineBootstrapError(
            f"Failed to move extracted engine into {engine_dir}: {e}", path=engine_dir
        ) from e
    return engine_dir


def pack_wrapper_archive(source_dir: Path, out_path: Path) -> Path:
    """
    Zip the Gradle wrapper files found in `source_dir` into `out_path`.

    `source_dir` is a directory where `gradle wrapper` has been run. Only the wrapper files are
    packed, with `/`-separated names at the archive root. The zip is written next to
    `out_path` and moved into place when complete.
    """

    missing = [rel for rel in WRAPPER_ARCHIVE_ENTRIES if not (source_dir / rel).is_file()]
    if missing:
        raise EngineBootstrapError(
            f"Not a Gradle wrapper directory: {source_dir} is missing {', '.join(missing)}",
            path=source_dir,
            hint="Run `gradle wrapper` in that directory first.",
        )

    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp = out_path.with_name(out_path.name + ".tmp")
    try:
        with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for rel in WRAPPER_ARCHIVE_ENTRIES:
                zf.write(source_dir / rel, arcname=rel)
        os.replace(tmp, out_path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise EngineBootstrapError(f"Failed to write {out_path}: {e}", path=out_path) from e
    return out_path
