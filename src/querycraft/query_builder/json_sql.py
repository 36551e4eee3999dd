"""Helpers that render Python structures as MySQL JSON constructors.

The output is SQL text with every key and scalar literal-escaped, meant
to be embedded in a field spec or raw expression.
"""

from typing import Any, Mapping, Sequence

from querycraft.query_builder.escaping import escape_literal


def _json_value(value: Any) -> str:
    if isinstance(value, Mapping):
        return json_object_sql(value)
    if isinstance(value, (list, tuple)):
        return json_array_sql(value)
    return escape_literal(value)


def json_object_sql(mapping: Mapping[str, Any]) -> str:
    """``{"a": 1, "b": {"c": "x"}}`` -> ``JSON_OBJECT('a', 1, 'b', JSON_OBJECT('c', 'x'))``."""
    pairs = ", ".join(
        f"{escape_literal(str(key))}, {_json_value(value)}" for key, value in mapping.items()
    )
    return f"JSON_OBJECT({pairs})"


def json_array_sql(items: Sequence[Any]) -> str:
    """``[{"a": 1}, 2]`` -> ``JSON_ARRAY(JSON_OBJECT('a', 1), 2)``."""
    return f"JSON_ARRAY({', '.join(_json_value(item) for item in items)})"
