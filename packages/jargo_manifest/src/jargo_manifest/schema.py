from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator

from jargo_manifest.model import ScopeKind

_NON_EMPTY_STRING: dict[str, Any] = {"type": "string", "minLength": 1}

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Jargo.toml",
    "type": "object",
    "required": ["package"],
    "properties": {
        "package": {
            "type": "object",
            "required": ["name", "version", "main"],
            "properties": {
                "name": _NON_EMPTY_STRING,
                "version": _NON_EMPTY_STRING,
                "main": _NON_EMPTY_STRING,
            },
            "additionalProperties": False,
        },
        "dependencies": {
            "type": "object",
            "additionalProperties": {"$ref": "#/$defs/dependency"},
        },
    },
    "$defs": {
        "dependency": {
            "oneOf": [
                {"$ref": "#/$defs/simple_dependency"},
                {"$ref": "#/$defs/scoped_dependency"},
            ],
        },
        "simple_dependency": _NON_EMPTY_STRING,
        "scoped_dependency": {
            "type": "object",
            "required": ["value"],
            "properties": {
                "value": _NON_EMPTY_STRING,
                "scope": {"enum": [kind.value for kind in ScopeKind]},
            },
            "additionalProperties": False,
        },
    },
}

_VALIDATOR = Draft202012Validator(MANIFEST_SCHEMA)


def _format_path(parts: Any) -> str:
    path = "$"
    for part in parts:
        path += f"[{part!r}]" if isinstance(part, int) else f".{part}"
    return path


def _leaf_errors(error: Any) -> list[Any]:
    # oneOf failures are easier to read through the branch that got furthest.
    if not error.context:
        return [error]
    best = max(error.context, key=lambda e: len(e.absolute_path))
    if len(best.absolute_path) <= len(error.absolute_path):
        return [error]
    return _leaf_errors(best)


def validate_manifest_document(document: Any) -> list[str]:
    errors = sorted(_VALIDATOR.iter_errors(document), key=lambda e: str(list(e.absolute_path)))
    formatted: list[str] = []
    for error in errors:
        for leaf in _leaf_errors(error):
            formatted.append(f"{_format_path(leaf.absolute_path)}: {leaf.message}")
    return formatted
