"""Helpers over generic JSON trees.

JSON values are plain Python values: ``None``, ``bool``, ``int``, ``float``, ``str``,
``list`` and ``dict``. Functions here never mutate their inputs.
"""

from __future__ import annotations

import copy
import json
from collections import deque
from typing import Any
from typing import TypeAlias

from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError

JsonValue: TypeAlias = None | bool | int | float | str | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, Any]


def merge_up(document: JsonObject, key: str = "metadata", drop: tuple[str, ...] = ()) -> JsonObject:
    """Hoist the fields of a nested object up to its parent.

    Args:
        document: The JSON object to transform.
        key: Name of the nested object to hoist.
        drop: Nested fields discarded instead of hoisted.

    Returns:
        A new object where ``document[key]``'s fields (minus `drop`) live at the top
        level, overriding fields of the same name, and `key` itself is removed.

    Examples:
        >>> merge_up({"a": 1, "metadata": {"b": 2, "chunkGrid": {}}}, drop=("chunkGrid",))
        {'a': 1, 'b': 2}
    """
    result = copy.deepcopy(document)
    nested = result.pop(key, None)
    if not isinstance(nested, dict):
        if nested is not None:
            result[key] = nested
        return result

    for name, value in nested.items():
        if name in drop:
            continue
        result[name] = value
    return result


def check_conformance(persisted: JsonObject, supplied: JsonObject) -> None:
    """Validate that `supplied` agrees with `persisted`, breadth first.

    Every key of a persisted subtree must exist in the matching supplied subtree. When
    both values are objects they are compared recursively, otherwise they must be equal.
    Keys only present on the supplied side are allowed.

    Args:
        persisted: The stored document.
        supplied: The caller's expected document.

    Raises:
        NotFoundError: If a persisted key is missing from the supplied document.
        InvalidArgumentError: If a value differs between the two documents.
    """
    queue: deque[tuple[JsonObject, JsonObject]] = deque([(persisted, supplied)])
    while queue:
        current_persisted, current_supplied = queue.popleft()
        for key, value in current_persisted.items():
            if key not in current_supplied:
                msg = f"Field not found in JSON: {key}"
                raise NotFoundError(msg)

            other = current_supplied[key]
            if isinstance(value, dict) and isinstance(other, dict):
                queue.append((value, other))
            elif value != other:
                msg = (
                    f"Conflicting values for field: {key}. "
                    f"Expected: {json.dumps(value)}, but got: {json.dumps(other)}"
                )
                raise InvalidArgumentError(msg)


def is_blank(value: JsonValue) -> bool:
    """Whether a value is empty: ``None``, ``""``, ``[]`` or ``{}``."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, list | dict):
        return len(value) == 0
    return False
