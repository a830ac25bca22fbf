from __future__ import annotations

import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any

from jargo_manifest.model import (
    DependencyDeclaration,
    ManifestModel,
    PackageInfo,
    ScopedDependency,
    ScopeKind,
    SimpleDependency,
)
from jargo_manifest.schema import validate_manifest_document

MANIFEST_FILENAME = "Jargo.toml"


class ManifestParseError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        normalized_code = (
            code.strip()
            if isinstance(code, str) and code.strip()
            else "invalid_manifest"
        )
        normalized_details = dict(details) if isinstance(details, dict) else {}
        if not normalized_details:
            normalized_details = {"reason": message}
        normalized_hint = (
            hint.strip()
            if isinstance(hint, str) and hint.strip()
            else (
                f"Check {MANIFEST_FILENAME}: [package] needs name, version and main; "
                "each dependency is a coordinate string or { value = ..., scope = ... }."
            )
        )
        self.code = normalized_code
        self.details = normalized_details
        self.hint = normalized_hint


def _describe(source: Path | None) -> str:
    return str(source) if source is not None else MANIFEST_FILENAME


def _to_declaration(raw: str | dict[str, Any]) -> DependencyDeclaration:
    if isinstance(raw, str):
        return SimpleDependency(coordinate=raw)
    scope_raw = raw.get("scope")
    scope = ScopeKind(scope_raw) if scope_raw is not None else None
    return ScopedDependency(coordinate=raw["value"], scope=scope)


def parse_manifest(text: str, *, source: Path | None = None) -> ManifestModel:
    """
    Parse `Jargo.toml` contents into a `ManifestModel`.

    The TOML document is checked against `MANIFEST_SCHEMA` before any model object is built,
    so a failure never yields a partially populated model.

    Raises
    ------
    ManifestParseError
        On TOML syntax errors (including duplicate keys) and on schema violations. For schema
        violations, `details["errors"]` lists every problem as `"$.path: message"`.
    """

    where = _describe(source)
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(
            f"Failed to parse TOML in {where}: {e}",
            code="manifest_toml_parse_failed",
            details={"path": where, "error": str(e)},
            hint="Fix the TOML syntax (duplicate keys are not allowed).",
        ) from e

    errors = validate_manifest_document(document)
    if errors:
        raise ManifestParseError(
            f"Invalid manifest {where}: " + "; ".join(errors),
            code="manifest_schema_invalid",
            details={"path": where, "errors": errors},
        )

    package_raw = document["package"]
    package = PackageInfo(
        name=package_raw["name"],
        version=package_raw["version"],
        main=package_raw["main"],
    )
    dependencies = {
        name: _to_declaration(raw) for name, raw in document.get("dependencies", {}).items()
    }
    return ManifestModel(package=package, dependencies=MappingProxyType(dependencies))


def load_manifest(path: Path) -> ManifestModel:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestParseError(
            f"Failed to read {path}: {e}",
            code="manifest_read_failed",
            details={"path": str(path), "error": str(e)},
            hint=f"Run `jargo new` to create a {MANIFEST_FILENAME}, or pass the project directory.",
        ) from e
    except UnicodeDecodeError as e:
        raise ManifestParseError(
            f"Failed to decode {path} as UTF-8: {e}",
            code="manifest_decode_failed",
            details={"path": str(path), "error": str(e)},
            hint=f"Save {MANIFEST_FILENAME} as UTF-8.",
        ) from e
    return parse_manifest(text, source=path)
