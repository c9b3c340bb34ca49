from __future__ import annotations

import copy
from typing import Any, Dict, List, Union


class Arr:
    """Dot-notation helpers for nested configuration dictionaries."""

    @staticmethod
    def accessible(value: Any) -> bool:
        """Determine whether the given value can be walked with dot notation."""
        return isinstance(value, dict)

    @staticmethod
    def get(data: Dict[str, Any], key: str | None, default: Any = None) -> Any:
        """Get an item from a nested dictionary using dot notation."""
        if key is None:
            return data

        if key in data:
            return data[key]

        if '.' not in key:
            return default

        current: Any = data

        for segment in key.split('.'):
            if Arr.accessible(current) and segment in current:
                current = current[segment]
            else:
                return default

        return current

    @staticmethod
    def set(data: Dict[str, Any], key: str, value: Any) -> Dict[str, Any]:
        """Set a nested item to a given value using dot notation."""
        keys = key.split('.')
        current = data

        for segment in keys[:-1]:
            if segment not in current or not Arr.accessible(current[segment]):
                current[segment] = {}
            current = current[segment]

        current[keys[-1]] = value
        return data

    @staticmethod
    def has(data: Dict[str, Any], key: str) -> bool:
        """Check if an item exists using dot notation."""
        sentinel = object()
        return Arr.get(data, key, sentinel) is not sentinel

    @staticmethod
    def forget(data: Dict[str, Any], key: str) -> Dict[str, Any]:
        """Remove an item using dot notation."""
        if key in data:
            del data[key]
            return data

        keys = key.split('.')
        current: Any = data

        for segment in keys[:-1]:
            if not Arr.accessible(current) or segment not in current:
                return data
            current = current[segment]

        if Arr.accessible(current):
            current.pop(keys[-1], None)

        return data

    @staticmethod
    def dot(data: Dict[str, Any], prepend: str = '') -> Dict[str, Any]:
        """Flatten a nested dictionary into dotted keys."""
        results: Dict[str, Any] = {}

        def _dot_recursive(obj: Dict[str, Any], prefix: str) -> None:
            for key, value in obj.items():
                new_key = f"{prefix}{key}"
                if Arr.accessible(value) and value:
                    _dot_recursive(value, f"{new_key}.")
                else:
                    results[new_key] = value

        _dot_recursive(data, prepend)
        return results

    @staticmethod
    def merge_recursive(first: Dict[str, Any], second: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two dictionaries, values in `second` winning."""
        result = copy.deepcopy(first)

        for key, value in second.items():
            if key in result and Arr.accessible(result[key]) and Arr.accessible(value):
                result[key] = Arr.merge_recursive(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def wrap(value: Any) -> List[Any]:
        """Wrap the given value in a list if it isn't one already."""
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    @staticmethod
    def partition(data: List[Any], callback: Any) -> tuple[List[Any], List[Any]]:
        """Split a list in two by a predicate, keeping the original order."""
        passed: List[Any] = []
        failed: List[Any] = []

        for item in data:
            (passed if callback(item) else failed).append(item)

        return passed, failed

    @staticmethod
    def unique(data: List[Union[str, Any]]) -> List[Any]:
        """Remove duplicate values, keeping the first occurrence."""
        seen: List[Any] = []
        for item in data:
            if item not in seen:
                seen.append(item)
        return seen
