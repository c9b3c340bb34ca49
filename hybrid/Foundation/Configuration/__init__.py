from .ApplicationBuilder import ApplicationBuilder

__all__ = ["ApplicationBuilder"]
