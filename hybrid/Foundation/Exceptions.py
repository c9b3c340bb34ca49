from __future__ import annotations


class NamespaceDetectionException(RuntimeError):
    """Raised when the application package cannot be determined."""

    def __init__(self, message: str = "Unable to detect application namespace.") -> None:
        super().__init__(message)


class ProviderResolutionException(TypeError):
    """Raised when a value cannot be turned into a service provider."""
    pass
