from __future__ import annotations


class ContainerException(RuntimeError):
    """Base class for every error raised by the container."""
    pass


class BindingResolutionException(ContainerException):
    """An abstract could not be resolved or its concrete could not be built."""
    pass


class CircularDependencyException(ContainerException):
    """An abstract was requested again while it was still being built."""

    def __init__(self, abstract: str, build_stack: list[str]) -> None:
        self.abstract = abstract
        self.build_stack = build_stack
        cycle = ' -> '.join(build_stack + [abstract])
        super().__init__(f"Circular dependency detected while resolving [{abstract}]: {cycle}")


class EntryNotFoundException(ContainerException, KeyError):
    """Raised by `Container.get()` for identifiers the container does not know."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ''


class LogicException(ContainerException):
    """A container operation was used in a way that can never succeed."""
    pass
