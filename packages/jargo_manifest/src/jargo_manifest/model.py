from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum


class ScopeKind(Enum):
    COMPILE = "Compile"
    RUNTIME = "Runtime"


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    main: str


@dataclass(frozen=True)
class SimpleDependency:
    """A bare coordinate string, e.g. `gson = "com.google.code.gson:gson:2.10.1"`."""

    coordinate: str


@dataclass(frozen=True)
class ScopedDependency:
    """A `{ value = "...", scope = "..." }` table; a missing scope means compile scope."""

    coordinate: str
    scope: ScopeKind | None = None


DependencyDeclaration = SimpleDependency | ScopedDependency


@dataclass(frozen=True)
class ManifestModel:
    package: PackageInfo
    # Declaration order from the manifest; read-only after parsing.
    dependencies: Mapping[str, DependencyDeclaration]
