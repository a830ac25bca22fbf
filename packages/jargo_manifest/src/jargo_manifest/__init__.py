from jargo_manifest.model import (
    DependencyDeclaration,
    ManifestModel,
    PackageInfo,
    ScopedDependency,
    ScopeKind,
    SimpleDependency,
)
from jargo_manifest.parser import (
    MANIFEST_FILENAME,
    ManifestParseError,
    load_manifest,
    parse_manifest,
)
from jargo_manifest.scope import (
    IMPLEMENTATION,
    RUNTIME_ONLY,
    ResolvedDirective,
    resolve_directive,
)

__all__ = [
    "IMPLEMENTATION",
    "MANIFEST_FILENAME",
    "RUNTIME_ONLY",
    "DependencyDeclaration",
    "ManifestModel",
    "ManifestParseError",
    "PackageInfo",
    "ResolvedDirective",
    "ScopeKind",
    "ScopedDependency",
    "SimpleDependency",
    "load_manifest",
    "parse_manifest",
    "resolve_directive",
]
