"""Row-to-dataclass mapping with scalar coercion.

SQLite hands back whatever affinity the column stored, so fields
annotated ``int``/``float``/``bool``/``str`` are coerced on the way in.
Columns without a matching field are ignored, so ``SELECT *`` is fine.
"""

import dataclasses
import types
from functools import cache
from typing import Any, get_args, get_origin, get_type_hints

_COERCIBLE: dict[type, Any] = {
    int: int,
    float: float,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
}


@cache
def _coercion_map(cls: type) -> dict[str, type | None]:
    hints = get_type_hints(cls)
    result: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = hints.get(f.name, f.type)
        if get_origin(annotation) is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            annotation = args[0] if len(args) == 1 else None
        result[f.name] = annotation if annotation in _COERCIBLE else None
    return result


def _coerce(value: Any, target: type | None) -> Any:
    if target is None or value is None or isinstance(value, target):
        return value
    return _COERCIBLE[target](value)


def map_row[T](cls: type[T], row: dict[str, Any]) -> T:
    """Build a *cls* instance from a dict row.

    Raises ``TypeError`` if *cls* is not a dataclass or a required field
    is missing from the row.
    """
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass — roost.data maps rows to dataclasses"
        raise TypeError(msg)
    coercion = _coercion_map(cls)
    return cls(**{k: _coerce(v, coercion[k]) for k, v in row.items() if k in coercion})


def map_rows[T](cls: type[T], rows: list[dict[str, Any]]) -> list[T]:
    return [map_row(cls, row) for row in rows]
