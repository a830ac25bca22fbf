from __future__ import annotations

from dataclasses import dataclass

from jargo_manifest.model import DependencyDeclaration, ScopedDependency, ScopeKind

IMPLEMENTATION = "implementation"
RUNTIME_ONLY = "runtimeOnly"

_SCOPE_KEYWORDS: dict[ScopeKind, str] = {
    ScopeKind.COMPILE: IMPLEMENTATION,
    ScopeKind.RUNTIME: RUNTIME_ONLY,
}


@dataclass(frozen=True)
class ResolvedDirective:
    keyword: str
    coordinate: str


def resolve_directive(decl: DependencyDeclaration) -> ResolvedDirective:
    """Map a dependency declaration to its Gradle configuration keyword."""
    if isinstance(decl, ScopedDependency) and decl.scope is not None:
        return ResolvedDirective(keyword=_SCOPE_KEYWORDS[decl.scope], coordinate=decl.coordinate)
    return ResolvedDirective(keyword=IMPLEMENTATION, coordinate=decl.coordinate)
