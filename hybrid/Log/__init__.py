from .LogManager import JsonFormatter, LaravelFormatter, LogChannel, LogManager, parse_level

__all__ = ["LogManager", "LogChannel", "LaravelFormatter", "JsonFormatter", "parse_level"]
