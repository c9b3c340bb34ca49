from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


LEVELS: Dict[str, int] = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'notice': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
    'alert': logging.CRITICAL,
    'emergency': logging.CRITICAL,
}


class LogChannel:
    """A named logger with context-aware helpers."""

    def __init__(self, name: str, logger: logging.Logger) -> None:
        self.name = name
        self.logger = logger

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, context)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, message, context)

    def error(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.ERROR, message, context)

    def critical(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.CRITICAL, message, context)

    def log(self, level: Union[str, int], message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log message at specified level."""
        self._log(parse_level(level), message, context)

    def _log(self, level: int, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        extra = {'context': context} if context else {}
        self.logger.log(level, message, extra=extra)


class LaravelFormatter(logging.Formatter):
    """Formats records as `[time] channel.LEVEL: message {context}`."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        log_line = f"[{timestamp}] {record.name}.{record.levelname}: {record.getMessage()}"

        context = getattr(record, 'context', {})
        if context:
            log_line += f" {json.dumps(context, default=str)}"

        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'channel': record.name,
            'message': record.getMessage(),
            'context': getattr(record, 'context', {}),
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def parse_level(level: Union[str, int]) -> int:
    """Convert a configured level name into a logging level."""
    if isinstance(level, int):
        return level
    try:
        return LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Invalid log level [{level}].") from None


class LogManager:
    """Builds log channels from the `logging` configuration."""

    def __init__(self, app: Application) -> None:
        self.app = app
        self._channels: Dict[str, LogChannel] = {}
        self._custom_creators: Dict[str, Callable[[Application, Dict[str, Any]], logging.Handler]] = {}

    def channel(self, name: Optional[str] = None) -> LogChannel:
        """Get a log channel instance."""
        name = name or self.get_default_driver()

        if name not in self._channels:
            self._channels[name] = self._resolve(name)

        return self._channels[name]

    def stack(self, channels: List[str], name: Optional[str] = None) -> LogChannel:
        """Create an on-demand channel that writes to several channels."""
        name = name or f"stack_{'_'.join(channels)}"
        logger = self._make_logger(name, logging.DEBUG)

        for channel_name in channels:
            for handler in self.channel(channel_name).logger.handlers:
                logger.addHandler(handler)

        self._channels[name] = LogChannel(name, logger)
        return self._channels[name]

    def extend(self, driver: str, creator: Callable[[Application, Dict[str, Any]], logging.Handler]) -> None:
        """Register a custom driver creator returning a logging handler."""
        self._custom_creators[driver] = creator

    def get_default_driver(self) -> str:
        return self._config('logging.default', 'stack')

    def set_default_driver(self, name: str) -> None:
        self._set_config('logging.default', name)

    def get_channels(self) -> Dict[str, LogChannel]:
        return self._channels

    def forget_channel(self, name: Optional[str] = None) -> None:
        """Drop a resolved channel so it is rebuilt on next use."""
        self._channels.pop(name or self.get_default_driver(), None)

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().debug(message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().info(message, context)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().warning(message, context)

    def error(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().error(message, context)

    def critical(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().critical(message, context)

    def log(self, level: Union[str, int], message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.channel().log(level, message, context)

    def _resolve(self, name: str) -> LogChannel:
        config = self._config(f'logging.channels.{name}')

        if config is None:
            raise ValueError(f"Log [{name}] is not defined.")

        driver = config.get('driver', 'single')
        level = parse_level(config.get('level', 'debug'))
        logger = self._make_logger(name, level)

        if driver == 'stack':
            for channel_name in config.get('channels', []):
                for handler in self.channel(channel_name).logger.handlers:
                    logger.addHandler(handler)
            return LogChannel(name, logger)

        logger.addHandler(self._create_handler(driver, config))
        return LogChannel(name, logger)

    def _create_handler(self, driver: str, config: Dict[str, Any]) -> logging.Handler:
        if driver in self._custom_creators:
            handler = self._custom_creators[driver](self.app, config)
        elif driver == 'single':
            handler = logging.FileHandler(self._log_path(config), encoding='utf-8')
        elif driver == 'daily':
            handler = logging.handlers.TimedRotatingFileHandler(
                self._log_path(config), when='midnight', interval=1,
                backupCount=config.get('days', 14), encoding='utf-8'
            )
        elif driver == 'stderr':
            handler = logging.StreamHandler(sys.stderr)
        elif driver == 'null':
            handler = logging.NullHandler()
        else:
            raise ValueError(f"Driver [{driver}] is not supported.")

        handler.setFormatter(JsonFormatter() if config.get('formatter') == 'json' else LaravelFormatter())
        return handler

    def _log_path(self, config: Dict[str, Any]) -> str:
        path = Path(config.get('path') or self.app.storage_path('logs/hybrid.log'))
        if not path.is_absolute():
            path = Path(self.app.base_path(str(path)))
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)

    def _make_logger(self, name: str, level: int) -> logging.Logger:
        logger = logging.getLogger(f"hybrid.log.{name}")
        logger.setLevel(level)
        logger.propagate = False
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            # Stacks share handlers with their member channels.
            if not self._handler_in_use(handler):
                handler.close()
        return logger

    def _handler_in_use(self, handler: logging.Handler) -> bool:
        return any(handler in channel.logger.handlers for channel in self._channels.values())

    def _config(self, key: str, default: Any = None) -> Any:
        if not self.app.bound('config'):
            return default
        return self.app.make('config').get(key, default)

    def _set_config(self, key: str, value: Any) -> None:
        if self.app.bound('config'):
            self.app.make('config').set(key, value)
