from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, List, Optional, Union

from hybrid.Support.Arr import Arr


class Repository(MutableMapping):
    """Configuration repository with dot-notation access."""

    def __init__(self, items: Optional[Dict[str, Any]] = None) -> None:
        self._items: Dict[str, Any] = items or {}

    def has(self, key: str) -> bool:
        """Determine if the given configuration value exists."""
        return Arr.has(self._items, key)

    def get(self, key: Union[str, List[str], None] = None, default: Any = None) -> Any:
        """Get the specified configuration value."""
        if isinstance(key, list):
            return self.get_many(key)

        return Arr.get(self._items, key, default)

    def get_many(self, keys: Union[List[str], Dict[str, Any]]) -> Dict[str, Any]:
        """Get many configuration values, with per-key defaults for a dict."""
        defaults = keys if isinstance(keys, dict) else {key: None for key in keys}
        return {key: Arr.get(self._items, key, default) for key, default in defaults.items()}

    def set(self, key: Union[str, Dict[str, Any]], value: Any = None) -> None:
        """Set a given configuration value, or many at once from a dict."""
        values = key if isinstance(key, dict) else {key: value}

        for item_key, item_value in values.items():
            Arr.set(self._items, item_key, item_value)

    def prepend(self, key: str, value: Any) -> None:
        """Prepend a value onto a list configuration value."""
        items = list(self.get(key, []))
        items.insert(0, value)
        self.set(key, items)

    def push(self, key: str, value: Any) -> None:
        """Push a value onto a list configuration value."""
        items = list(self.get(key, []))
        items.append(value)
        self.set(key, items)

    def forget(self, key: str) -> None:
        """Remove a configuration value."""
        Arr.forget(self._items, key)

    def all(self) -> Dict[str, Any]:
        """Get all of the configuration items."""
        return self._items

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.forget(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Repository({list(self._items.keys())!r})"
