from __future__ import annotations

from typing import Any, Dict

from hybrid.Support.Env import env

# Default log channel
default = env('LOG_CHANNEL', 'stack')

channels: Dict[str, Dict[str, Any]] = {
    'stack': {
        'driver': 'stack',
        'channels': ['single'],
    },

    'single': {
        'driver': 'single',
        'path': 'storage/logs/hybrid.log',
        'level': env('LOG_LEVEL', 'debug'),
    },

    'daily': {
        'driver': 'daily',
        'path': 'storage/logs/hybrid.log',
        'level': env('LOG_LEVEL', 'debug'),
        'days': 14,
    },

    'stderr': {
        'driver': 'stderr',
        'level': env('LOG_LEVEL', 'debug'),
    },

    'json': {
        'driver': 'single',
        'path': 'storage/logs/json.log',
        'level': env('LOG_LEVEL', 'debug'),
        'formatter': 'json',
    },

    'null': {
        'driver': 'null',
    },
}
