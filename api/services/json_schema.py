"""JSON Schema generation for translation files.

The primary language's file defines the shape every other language in the
version is expected to follow. The schema is inferred from that file.
"""

from typing import Any

SCHEMA_DIALECT = "http://json-schema.org/draft-07/schema#"


def infer_schema(value: Any) -> dict[str, Any]:
    """Infer a JSON Schema fragment describing `value`."""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return {"type": "boolean"}
    if isinstance(value, int):
        return {"type": "integer"}
    if isinstance(value, float):
        return {"type": "number"}
    if isinstance(value, str):
        return {"type": "string"}
    if value is None:
        return {"type": "null"}
    if isinstance(value, list):
        return {"type": "array", "items": infer_schema(value[0]) if value else {}}
    if isinstance(value, dict):
        return {
            "type": "object",
            "properties": {key: infer_schema(item) for key, item in value.items()},
            "required": sorted(value),
            "additionalProperties": False,
        }
    raise TypeError(f"Unsupported JSON value: {type(value).__name__}")


def build_schema(content: dict[str, Any]) -> dict[str, Any]:
    """Top-level schema document for a translation file."""
    return {"$schema": SCHEMA_DIALECT, **infer_schema(content)}
