from .Attributes import Config, ContextualAttribute, Tag
from .Container import Binding, Container
from .ContextualBindingBuilder import ContextualBindingBuilder
from .Exceptions import (
    BindingResolutionException,
    CircularDependencyException,
    ContainerException,
    EntryNotFoundException,
    LogicException,
)

__all__ = [
    "Binding",
    "Config",
    "Container",
    "ContainerException",
    "ContextualAttribute",
    "ContextualBindingBuilder",
    "BindingResolutionException",
    "CircularDependencyException",
    "EntryNotFoundException",
    "LogicException",
    "Tag",
]
