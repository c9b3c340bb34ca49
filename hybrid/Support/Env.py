from __future__ import annotations

import os
from typing import Any, Optional


class Env:
    """Typed lookups over the process environment."""

    @staticmethod
    def get(key: str, default: Any = None) -> Any:
        """Get an environment variable, converting literal values."""
        value = os.environ.get(key)

        if value is None:
            return default() if callable(default) else default

        return Env._convert_type(value)

    @staticmethod
    def raw(key: str, default: Optional[str] = None) -> Optional[str]:
        """Get an environment variable without any conversion."""
        return os.environ.get(key, default)

    @staticmethod
    def set(key: str, value: Any) -> None:
        """Set an environment variable."""
        os.environ[key] = str(value)

    @staticmethod
    def has(key: str) -> bool:
        """Check if an environment variable exists."""
        return key in os.environ

    @staticmethod
    def _convert_type(value: str) -> Any:
        lowered = value.lower()

        if lowered in ('true', '(true)'):
            return True
        if lowered in ('false', '(false)'):
            return False
        if lowered in ('empty', '(empty)'):
            return ''
        if lowered in ('null', '(null)'):
            return None

        # Strip matching quotes left over from the env file.
        if len(value) > 1 and value[0] == value[-1] and value[0] in ('"', "'"):
            return value[1:-1]

        return value


def env(key: str, default: Any = None) -> Any:
    """Get an environment variable."""
    return Env.get(key, default)
