from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Dict, Iterator, List, Optional, Union, get_args, get_origin, get_type_hints
from contextlib import contextmanager

from hybrid.Container.Attributes import ContextualAttribute
from hybrid.Container.ContextualBindingBuilder import ContextualBindingBuilder
from hybrid.Container.Exceptions import (
    BindingResolutionException,
    CircularDependencyException,
    EntryNotFoundException,
    LogicException,
)

# An abstract is either a plain string key or a class used as a typed token.
Abstract = Union[str, type]
Factory = Callable[..., Any]
ResolvingCallback = Callable[[Any, 'Container'], None]

_MISSING = object()


def _is_factory(value: Any) -> bool:
    return callable(value) and not inspect.isclass(value)


@dataclass
class Binding:
    """Registered concrete for an abstract identifier."""
    concrete: Any
    shared: bool = False


def abstract_name(abstract: Any) -> str:
    """Get a readable name for an abstract identifier."""
    if inspect.isclass(abstract):
        return f"{abstract.__module__}.{abstract.__qualname__}"
    return str(abstract)


class Container:
    """
    Binding registry and resolver.

    Abstracts are strings or classes. A binding maps an abstract to a factory
    (any non-class callable, called with the container and optionally the
    resolution parameters), to another abstract, or to a class that is built
    with constructor injection. Shared bindings are cached in the instance
    cache after their first resolution.
    """

    # The process-wide container, only for host-interop boundaries.
    _instance: Optional[Container] = None

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self._bindings: Dict[Any, Binding] = {}
        self._instances: Dict[Any, Any] = {}
        self._resolved: Dict[Any, bool] = {}
        self._aliases: Dict[Any, Any] = {}
        self._abstract_aliases: Dict[Any, List[Any]] = {}
        self._extenders: Dict[Any, List[Callable[[Any, Container], Any]]] = {}
        self._rebound_callbacks: Dict[Any, List[Callable[[Container, Any], None]]] = {}
        self._build_stack: List[Any] = []
        self._with: List[Dict[str, Any]] = []
        self._contextual: Dict[Any, Dict[Any, Any]] = {}
        self._tags: Dict[str, List[Any]] = {}

        self._global_before_resolving_callbacks: List[Callable[..., None]] = []
        self._global_resolving_callbacks: List[ResolvingCallback] = []
        self._global_after_resolving_callbacks: List[ResolvingCallback] = []
        self._before_resolving_callbacks: Dict[Any, List[Callable[..., None]]] = {}
        self._resolving_callbacks: Dict[Any, List[ResolvingCallback]] = {}
        self._after_resolving_callbacks: Dict[Any, List[ResolvingCallback]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def bind(self, abstract: Abstract, concrete: Any = None, shared: bool = False) -> None:
        """Register a binding with the container."""
        self._drop_stale_instances(abstract)

        if concrete is None:
            concrete = abstract

        self._bindings[abstract] = Binding(concrete=concrete, shared=shared)

        self.logger.debug(f"Bound {abstract_name(abstract)} ({'shared' if shared else 'transient'})")

        # A rebind of something already resolved must reach its listeners.
        if self.resolved(abstract):
            self._rebound(abstract)

    def bind_if(self, abstract: Abstract, concrete: Any = None, shared: bool = False) -> None:
        """Register a binding if it hasn't already been registered."""
        if not self.bound(abstract):
            self.bind(abstract, concrete, shared)

    def singleton(self, abstract: Abstract, concrete: Any = None) -> None:
        """Register a shared binding in the container."""
        self.bind(abstract, concrete, shared=True)

    def singleton_if(self, abstract: Abstract, concrete: Any = None) -> None:
        """Register a shared binding if it hasn't already been registered."""
        if not self.bound(abstract):
            self.singleton(abstract, concrete)

    def instance(self, abstract: Abstract, instance: Any) -> Any:
        """Register an existing instance as shared in the container."""
        self._remove_abstract_alias(abstract)

        is_bound = self.bound(abstract)

        self._aliases.pop(abstract, None)
        self._instances[abstract] = instance

        if is_bound:
            self._rebound(abstract)

        return instance

    def alias(self, abstract: Abstract, alias: Abstract) -> None:
        """Alias a type to a different name."""
        if alias == abstract:
            raise LogicException(f"[{abstract_name(abstract)}] is aliased to itself.")

        self._aliases[alias] = abstract
        self._abstract_aliases.setdefault(abstract, []).append(alias)

    def extend(self, abstract: Abstract, closure: Callable[[Any, Container], Any]) -> None:
        """Extend an abstract type in the container."""
        abstract = self.get_alias(abstract)

        if abstract in self._instances:
            self._instances[abstract] = closure(self._instances[abstract], self)
            self._rebound(abstract)
        else:
            self._extenders.setdefault(abstract, []).append(closure)

            if self.resolved(abstract):
                self._rebound(abstract)

    def rebinding(self, abstract: Abstract, callback: Callable[[Container, Any], None]) -> Any:
        """Bind a new callback to an abstract's rebind event."""
        abstract = self.get_alias(abstract)
        self._rebound_callbacks.setdefault(abstract, []).append(callback)

        if self.bound(abstract):
            return self.make(abstract)

        return None

    def when(self, concrete: Union[Abstract, List[Abstract]]) -> ContextualBindingBuilder:
        """Define a contextual binding for the given consumer(s)."""
        consumers = concrete if isinstance(concrete, list) else [concrete]
        return ContextualBindingBuilder(self, [self.get_alias(c) for c in consumers])

    def add_contextual_binding(self, concrete: Abstract, abstract: Abstract, implementation: Any) -> None:
        """Add a contextual binding to the container."""
        self._contextual.setdefault(concrete, {})[self.get_alias(abstract)] = implementation

    def tag(self, abstracts: Union[Abstract, List[Abstract]], *tags: str) -> None:
        """Assign a set of tags to the given binding(s)."""
        for tag in tags:
            entries = self._tags.setdefault(tag, [])
            for abstract in (abstracts if isinstance(abstracts, list) else [abstracts]):
                if abstract not in entries:
                    entries.append(abstract)

    def tagged(self, tag: str) -> List[Any]:
        """Resolve every binding registered under a tag."""
        return [self.make(abstract) for abstract in self._tags.get(tag, [])]

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def bound(self, abstract: Abstract) -> bool:
        """Determine if the given abstract type has been bound."""
        return (
            abstract in self._bindings
            or abstract in self._instances
            or self.is_alias(abstract)
        )

    def has(self, abstract: Abstract) -> bool:
        """Determine if the container knows the given identifier."""
        return self.bound(abstract)

    def resolved(self, abstract: Abstract) -> bool:
        """Determine if the given abstract type has been resolved."""
        if self.is_alias(abstract):
            abstract = self.get_alias(abstract)

        return abstract in self._resolved or abstract in self._instances

    def is_shared(self, abstract: Abstract) -> bool:
        """Determine if a given type is shared."""
        if abstract in self._instances:
            return True

        binding = self._bindings.get(abstract)
        return binding is not None and binding.shared

    def is_alias(self, name: Abstract) -> bool:
        """Determine if a given string is an alias."""
        return name in self._aliases

    def get_alias(self, abstract: Abstract) -> Abstract:
        """Get the canonical abstract for an alias, following chained aliases."""
        seen: List[Any] = []
        while abstract in self._aliases:
            if abstract in seen:
                raise LogicException(f"[{abstract_name(abstract)}] is part of an alias cycle.")
            seen.append(abstract)
            abstract = self._aliases[abstract]
        return abstract

    def get_bindings(self) -> Dict[Any, Binding]:
        """Get the container's bindings."""
        return self._bindings

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def make(self, abstract: Abstract, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve the given type from the container."""
        return self.resolve(abstract, parameters)

    def get(self, abstract: Abstract) -> Any:
        """Resolve an entry, raising `EntryNotFoundException` for unknown ids."""
        try:
            return self.resolve(abstract)
        except BindingResolutionException as e:
            if self.has(abstract):
                raise
            raise EntryNotFoundException(abstract_name(abstract)) from e

    def resolve(
        self,
        abstract: Abstract,
        parameters: Optional[Dict[str, Any]] = None,
        raise_events: bool = True,
    ) -> Any:
        """Resolve the given type from the container."""
        abstract = self.get_alias(abstract)
        parameters = parameters or {}

        if raise_events:
            self._fire_before_resolving_callbacks(abstract, parameters)

        # Explicit parameters produce a one-off object, never the cached one.
        needs_contextual_build = bool(parameters)

        if abstract in self._instances and not needs_contextual_build:
            return self._instances[abstract]

        if abstract in self._build_stack:
            raise CircularDependencyException(
                abstract_name(abstract), [abstract_name(item) for item in self._build_stack]
            )

        self._with.append(parameters)
        self._build_stack.append(abstract)

        try:
            concrete = self._get_concrete(abstract)

            if self._is_buildable(concrete, abstract):
                obj = self.build(concrete)
            else:
                obj = self.make(concrete)
        finally:
            self._build_stack.pop()
            self._with.pop()

        for extender in self._extenders.get(abstract, []):
            obj = extender(obj, self)

        if self.is_shared(abstract) and not needs_contextual_build:
            self._instances[abstract] = obj

        if raise_events:
            self._fire_resolving_callbacks(abstract, obj)

        self._resolved[abstract] = True

        return obj

    def build(self, concrete: Any) -> Any:
        """Instantiate a concrete instance of the given type."""
        parameters = self._with[-1] if self._with else {}

        if callable(concrete) and not inspect.isclass(concrete):
            return self._call_factory(concrete, parameters)

        if not inspect.isclass(concrete):
            raise BindingResolutionException(f"Target [{abstract_name(concrete)}] is not bound.")

        if inspect.isabstract(concrete):
            message = f"Target [{abstract_name(concrete)}] is not instantiable."
            if len(self._build_stack) > 1:
                previous = ', '.join(abstract_name(item) for item in self._build_stack[:-1])
                message = f"Target [{abstract_name(concrete)}] is not instantiable while building [{previous}]."
            raise BindingResolutionException(message)

        try:
            signature = inspect.signature(concrete)
        except (TypeError, ValueError):
            return concrete()

        arguments = self._resolve_dependencies(
            signature, self._type_hints(concrete.__init__), parameters, abstract_name(concrete)
        )

        return concrete(**arguments)

    def call(self, callback: Callable[..., Any], parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Call the given callable, injecting its dependencies."""
        try:
            signature = inspect.signature(callback)
        except (TypeError, ValueError):
            return callback()

        arguments = self._resolve_dependencies(
            signature, self._type_hints(callback), parameters or {}, getattr(callback, '__qualname__', repr(callback))
        )

        return callback(**arguments)

    def factory(self, abstract: Abstract) -> Callable[[], Any]:
        """Get a closure to resolve the given type from the container."""
        return lambda: self.make(abstract)

    # ------------------------------------------------------------------
    # Resolution callbacks
    # ------------------------------------------------------------------

    def before_resolving(self, abstract: Any, callback: Optional[Callable[..., None]] = None) -> None:
        """Register a callback run before an abstract is resolved."""
        if callback is None and callable(abstract) and not inspect.isclass(abstract):
            self._global_before_resolving_callbacks.append(abstract)
        else:
            self._before_resolving_callbacks.setdefault(self.get_alias(abstract), []).append(callback)

    def resolving(self, abstract: Any, callback: Optional[ResolvingCallback] = None) -> None:
        """Register a callback run while an abstract is resolved."""
        if callback is None and callable(abstract) and not inspect.isclass(abstract):
            self._global_resolving_callbacks.append(abstract)
        else:
            self._resolving_callbacks.setdefault(self.get_alias(abstract), []).append(callback)

    def after_resolving(self, abstract: Any, callback: Optional[ResolvingCallback] = None) -> None:
        """Register a callback run after an abstract is resolved."""
        if callback is None and callable(abstract) and not inspect.isclass(abstract):
            self._global_after_resolving_callbacks.append(abstract)
        else:
            self._after_resolving_callbacks.setdefault(self.get_alias(abstract), []).append(callback)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def forget_extenders(self, abstract: Abstract) -> None:
        """Remove all of the extender callbacks for a given type."""
        self._extenders.pop(self.get_alias(abstract), None)

    def forget_instance(self, abstract: Abstract) -> None:
        """Remove a resolved instance from the instance cache."""
        self._instances.pop(abstract, None)

    def forget_instances(self) -> None:
        """Clear all of the instances from the container."""
        self._instances.clear()

    def flush(self) -> None:
        """Flush the container of all bindings and resolved instances."""
        self._aliases.clear()
        self._abstract_aliases.clear()
        self._resolved.clear()
        self._bindings.clear()
        self._instances.clear()
        self._extenders.clear()
        self._rebound_callbacks.clear()
        self._build_stack.clear()
        self._with.clear()
        self._contextual.clear()
        self._tags.clear()
        self._global_before_resolving_callbacks.clear()
        self._global_resolving_callbacks.clear()
        self._global_after_resolving_callbacks.clear()
        self._before_resolving_callbacks.clear()
        self._resolving_callbacks.clear()
        self._after_resolving_callbacks.clear()

    @contextmanager
    def swap(self, abstract: Abstract, instance: Any) -> Iterator[Any]:
        """Temporarily replace an entry with the given instance.

        Aliases are swapped through their canonical entry so they keep
        pointing at it once the block exits.
        """
        abstract = self.get_alias(abstract)
        had_instance = abstract in self._instances
        previous = self._instances.get(abstract)
        self.instance(abstract, instance)
        try:
            yield instance
        finally:
            if had_instance:
                self._instances[abstract] = previous
            else:
                self._instances.pop(abstract, None)

    # ------------------------------------------------------------------
    # Global access
    # ------------------------------------------------------------------

    @classmethod
    def get_instance(cls) -> Container:
        """Get the globally available instance of the container."""
        if Container._instance is None:
            Container._instance = cls()
        return Container._instance

    @classmethod
    def set_instance(cls, container: Optional[Container] = None) -> Optional[Container]:
        """Set the shared instance of the container."""
        Container._instance = container
        return container

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: Abstract) -> Any:
        return self.make(key)

    def __setitem__(self, key: Abstract, value: Any) -> None:
        self.bind(key, value if callable(value) else (lambda container: value))

    def __contains__(self, key: Abstract) -> bool:
        return self.bound(key)

    def __delitem__(self, key: Abstract) -> None:
        self._bindings.pop(key, None)
        self._instances.pop(key, None)
        self._resolved.pop(key, None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_concrete(self, abstract: Abstract) -> Any:
        binding = self._bindings.get(abstract)
        if binding is not None:
            return binding.concrete
        return abstract

    def _is_buildable(self, concrete: Any, abstract: Abstract) -> bool:
        if concrete is abstract or concrete == abstract:
            return True
        return callable(concrete) and not inspect.isclass(concrete)

    def _call_factory(self, factory: Factory, parameters: Dict[str, Any]) -> Any:
        try:
            signature = inspect.signature(factory)
        except (TypeError, ValueError):
            return factory(self)

        positional = [
            p for p in signature.parameters.values()
            if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        ]
        variadic = any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in signature.parameters.values())

        if variadic or len(positional) >= 2:
            return factory(self, parameters)
        if not positional:
            return factory()
        return factory(self)

    def _type_hints(self, target: Any) -> Dict[str, Any]:
        try:
            return get_type_hints(target, include_extras=True)
        except (NameError, TypeError, AttributeError):
            return {}

    def _resolve_dependencies(
        self,
        signature: inspect.Signature,
        hints: Dict[str, Any],
        parameters: Dict[str, Any],
        target: str,
    ) -> Dict[str, Any]:
        arguments: Dict[str, Any] = {}

        for name, parameter in signature.parameters.items():
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            if name in parameters:
                arguments[name] = parameters[name]
                continue

            contextual = self._contextual_concrete(f'${name}')
            if contextual is not _MISSING:
                arguments[name] = self._call_factory(contextual, {}) if _is_factory(contextual) else contextual
                continue

            annotation = hints.get(name, parameter.annotation)
            attribute = self._contextual_attribute(annotation)

            if attribute is not None:
                arguments[name] = attribute.resolve(self)
                continue

            dependency = self._class_dependency(annotation)

            if dependency is not None:
                contextual = self._contextual_concrete(dependency)
                if contextual is not _MISSING:
                    arguments[name] = (
                        self._call_factory(contextual, {}) if _is_factory(contextual) else self.make(contextual)
                    )
                    continue

                try:
                    arguments[name] = self.make(dependency)
                    continue
                except BindingResolutionException:
                    if parameter.default is inspect.Parameter.empty:
                        raise

            if parameter.default is not inspect.Parameter.empty:
                arguments[name] = parameter.default
                continue

            raise BindingResolutionException(
                f"Unresolvable dependency resolving [Parameter <required> {name}] in [{target}]"
            )

        return arguments

    def _class_dependency(self, annotation: Any) -> Optional[type]:
        if annotation is inspect.Parameter.empty or annotation is None:
            return None

        if get_origin(annotation) is Annotated:
            return self._class_dependency(get_args(annotation)[0])

        if get_origin(annotation) is Union:
            candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
            return self._class_dependency(candidates[0]) if len(candidates) == 1 else None

        if inspect.isclass(annotation) and annotation.__module__ != 'builtins':
            return annotation

        return None

    def _contextual_attribute(self, annotation: Any) -> Optional[ContextualAttribute]:
        if get_origin(annotation) is not Annotated:
            return None

        for marker in get_args(annotation)[1:]:
            if isinstance(marker, ContextualAttribute):
                return marker

        return None

    def _contextual_concrete(self, abstract: Any) -> Any:
        # The consumer is whatever is being built right now.
        if not self._build_stack:
            return _MISSING

        bindings = self._contextual.get(self._build_stack[-1])
        if not bindings:
            return _MISSING

        abstract = self.get_alias(abstract)

        if abstract in bindings:
            return bindings[abstract]

        for alias in self._abstract_aliases.get(abstract, []):
            if alias in bindings:
                return bindings[alias]

        return _MISSING

    def _drop_stale_instances(self, abstract: Abstract) -> None:
        self._instances.pop(abstract, None)
        self._aliases.pop(abstract, None)

    def _remove_abstract_alias(self, searched: Abstract) -> None:
        if searched not in self._aliases:
            return

        for aliases in self._abstract_aliases.values():
            while searched in aliases:
                aliases.remove(searched)

    def _rebound(self, abstract: Abstract) -> None:
        callbacks = self._rebound_callbacks.get(abstract, [])
        if not callbacks:
            return

        instance = self.make(abstract)

        for callback in callbacks:
            callback(self, instance)

    def _fire_before_resolving_callbacks(self, abstract: Abstract, parameters: Dict[str, Any]) -> None:
        for callback in self._global_before_resolving_callbacks:
            callback(abstract, parameters, self)

        for key, callbacks in self._before_resolving_callbacks.items():
            if key == abstract or (inspect.isclass(abstract) and inspect.isclass(key) and issubclass(abstract, key)):
                for callback in callbacks:
                    callback(abstract, parameters, self)

    def _fire_resolving_callbacks(self, abstract: Abstract, obj: Any) -> None:
        self._fire_callback_list(obj, self._global_resolving_callbacks)
        self._fire_callback_list(obj, self._callbacks_for_type(abstract, obj, self._resolving_callbacks))

        self._fire_callback_list(obj, self._global_after_resolving_callbacks)
        self._fire_callback_list(obj, self._callbacks_for_type(abstract, obj, self._after_resolving_callbacks))

    def _callbacks_for_type(
        self,
        abstract: Abstract,
        obj: Any,
        callbacks_per_type: Dict[Any, List[ResolvingCallback]],
    ) -> List[ResolvingCallback]:
        results: List[ResolvingCallback] = []

        for key, callbacks in callbacks_per_type.items():
            if key == abstract or (inspect.isclass(key) and isinstance(obj, key)):
                results.extend(callbacks)

        return results

    def _fire_callback_list(self, obj: Any, callbacks: List[ResolvingCallback]) -> None:
        for callback in callbacks:
            callback(obj, self)
