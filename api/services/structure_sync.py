"""Keep a version's translation files in the primary language's shape.

The primary language defines which keys a translation file has. When it is
saved, every other language of the version receives the structural
operations that bring it back in line: keys missing from it are added with
the primary value as a placeholder, keys the primary no longer has are
removed. Existing translations of shared keys are never touched.

Objects are compared key by key. Anything else (strings, numbers, lists)
is a leaf; a leaf on one side and an object on the other is replaced by
the primary value.
"""

import copy
from dataclasses import dataclass
from typing import Any, Literal

Path = tuple[str, ...]


@dataclass(frozen=True)
class StructuralChange:
    type: Literal["add", "delete"]
    path: Path
    value: Any = None


def structural_changes(
    target: dict[str, Any], primary: dict[str, Any], path: Path = ()
) -> list[StructuralChange]:
    """Operations that give `target` the key structure of `primary`."""
    changes: list[StructuralChange] = []
    for key in target:
        if key not in primary:
            changes.append(StructuralChange("delete", path + (key,)))
    for key, value in primary.items():
        here = path + (key,)
        if key not in target:
            changes.append(StructuralChange("add", here, value))
            continue
        existing = target[key]
        if isinstance(existing, dict) and isinstance(value, dict):
            changes.extend(structural_changes(existing, value, here))
        elif isinstance(existing, dict) != isinstance(value, dict):
            changes.append(StructuralChange("add", here, value))
    return changes


def apply_changes(content: dict[str, Any], changes: list[StructuralChange]) -> dict[str, Any]:
    """Return a copy of `content` with `changes` applied in order."""
    result = copy.deepcopy(content)
    for change in changes:
        *parents, leaf = change.path
        node = result
        for key in parents:
            child = node.get(key)
            if not isinstance(child, dict):
                if change.type == "delete":
                    break
                child = node[key] = {}
            node = child
        else:
            if change.type == "add":
                node[leaf] = copy.deepcopy(change.value)
            else:
                node.pop(leaf, None)
    return result


def synchronize(target: dict[str, Any], primary: dict[str, Any]) -> tuple[dict[str, Any], int]:
    """Align `target` with `primary`.

    Returns:
        The aligned content and the number of operations applied
    """
    changes = structural_changes(target, primary)
    if not changes:
        return target, 0
    return apply_changes(target, changes), len(changes)
