"""The injector: recursive object graph construction over a chain of scopes."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from arborinjectum.bindings import Binding, BindingKind
from arborinjectum.exceptions import (
    CyclicDependencyError,
    FactoryNotFunctionError,
    IncorrectProviderError,
    InjectorAlreadyExistsError,
    NotInjectableError,
    ProviderNotExistsError,
)
from arborinjectum.metadata import MetadataRegistry, default_metadata
from arborinjectum.scope import Scope
from arborinjectum.tokens import InjectKey, key_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LOOKUP = object()


def _trace_name(key: Any) -> str:
    # string tokens are traced bare: Car <-- COLOR
    return key if isinstance(key, str) else key_name(key)


class _GlobalRoot:
    def __repr__(self) -> str:
        return "<global root>"


GLOBAL_ROOT = _GlobalRoot()
"""Root object used when an injector is created without one."""


@dataclass(frozen=True)
class InjectorOptions:
    """Injector configuration.

    Attributes:
        strict_providers: When True, a type dependency without any binding
            is an error. When False, the type is constructed directly.
        debug: When True, every construction is traced at DEBUG level as
            ``"<parent> <-- <constructed>"``.

    Examples:
        >>> InjectorOptions()
        InjectorOptions(strict_providers=True, debug=False)
    """

    strict_providers: bool = True
    debug: bool = False


def _coerce_options(options: "Union[InjectorOptions, Mapping[str, Any], None]") -> InjectorOptions:
    if options is None:
        return InjectorOptions()
    if isinstance(options, InjectorOptions):
        return options
    return InjectorOptions(**options)


_VALUE_ROOTS = (str, bytes, int, float, complex, tuple, frozenset)


def _root_key(root: Any) -> Tuple[str, Any]:
    if isinstance(root, _VALUE_ROOTS):
        try:
            hash(root)
        except TypeError:
            # a tuple holding unhashable members
            return ("id", id(root))
        return ("value", root)
    return ("id", id(root))


class InjectorRegistry:
    """Maps root objects to their injector, at most one per root.

    Strings, numbers, bytes and hashable tuples are roots by value. Any
    other object is tracked by identity, so unhashable objects can be roots
    too. The registry is guarded by a lock; building object graphs is not.

    Examples:
        >>> registry = InjectorRegistry()
        >>> host = object()
        >>> injector = Injector.create(host, registry=registry)
        >>> registry.get(host) is injector
        True
        >>> registry.remove(host) is injector
        True
        >>> registry.get(host) is None
        True
    """

    def __init__(self) -> None:
        self._injectors: Dict[Any, "Injector"] = {}
        self._lock = threading.Lock()

    def add(self, injector: "Injector") -> None:
        """Register *injector* under its root object.

        Raises:
            InjectorAlreadyExistsError: If the root already has an injector.
        """
        with self._lock:
            key = _root_key(injector.root)
            if key in self._injectors:
                raise InjectorAlreadyExistsError(injector.root)
            self._injectors[key] = injector

    def get(self, root: Any) -> "Optional[Injector]":
        with self._lock:
            return self._injectors.get(_root_key(root))

    def remove(self, root: Any) -> "Optional[Injector]":
        """Unregister the injector of *root* and return it, if any."""
        with self._lock:
            return self._injectors.pop(_root_key(root), None)

    def clear(self) -> None:
        """Forget every injector. Intended for tests."""
        with self._lock:
            self._injectors.clear()

    def __contains__(self, root: Any) -> bool:
        return self.get(root) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._injectors)


default_registry = InjectorRegistry()


class Injector:
    """Builds object graphs from injectable types and scoped bindings.

    Every type constructed by :meth:`instantiate` gets its own scope,
    seeded with the bindings the type declares for its subtree. Instances
    are cached at the highest scope where their configuration is still
    the same, so they are shared wherever that holds and rebuilt below
    any scope that rebinds the type or one of its injection keys.

    Use :meth:`create` to register the injector for a root object; one
    root object can own at most one injector.

    Args:
        root: The host object. Passed to every factory as its last argument.
        bindings: Bindings of the root scope. Bare classes are accepted as
            self bindings.
        options: An :class:`InjectorOptions` or a mapping of its fields.
        metadata: Where type metadata is read from. Defaults to
            ``default_metadata``.

    Examples:
        >>> from arborinjectum import MetadataRegistry, injectable
        >>> registry = MetadataRegistry()
        >>> @injectable(metadata=registry)
        ... class Wheel:
        ...     def code(self) -> str:
        ...         return "123"
        >>> @injectable(metadata=registry)
        ... class Car:
        ...     def __init__(self, wheel: Wheel):
        ...         self.wheel = wheel
        >>> injector = Injector(object(), [Car, Wheel], metadata=registry)
        >>> injector.instantiate(Car).wheel.code()
        '123'
        >>> injector.get(Wheel) is injector.instantiate(Car).wheel
        True
    """

    def __init__(
        self,
        root: Any = GLOBAL_ROOT,
        bindings: Optional[Iterable[Any]] = None,
        options: "Union[InjectorOptions, Mapping[str, Any], None]" = None,
        metadata: Optional[MetadataRegistry] = None,
    ) -> None:
        self._root = root
        self._scope = Scope(None, bindings)
        self._options = _coerce_options(options)
        self._metadata = metadata if metadata is not None else default_metadata
        self._resolving: List[type] = []
        self._created: List[Tuple[Scope, type]] = []

    @classmethod
    def create(
        cls,
        root: Any = GLOBAL_ROOT,
        bindings: Optional[Iterable[Any]] = None,
        options: "Union[InjectorOptions, Mapping[str, Any], None]" = None,
        *,
        metadata: Optional[MetadataRegistry] = None,
        registry: Optional[InjectorRegistry] = None,
    ) -> "Injector":
        """Create and register the injector for *root*.

        Args:
            root: The host object. Defaults to a process-wide global key.
            bindings: Bindings of the root scope.
            options: Injector configuration.
            metadata: Where type metadata is read from.
            registry: The registry to add to. Defaults to ``default_registry``.

        Returns:
            The new injector.

        Raises:
            InjectorAlreadyExistsError: If *root* already has an injector.
            IncorrectProviderError: If a binding is neither a ``Binding``
                nor a class.
        """
        registry = registry if registry is not None else default_registry
        injector = cls(root, bindings, options, metadata)
        registry.add(injector)
        logger.debug("Created injector for %r", root)
        return injector

    @classmethod
    def get_injector(cls, root: Any = GLOBAL_ROOT, *, registry: Optional[InjectorRegistry] = None) -> "Optional[Injector]":
        """Return the injector registered for *root*, or ``None``."""
        registry = registry if registry is not None else default_registry
        return registry.get(root)

    @classmethod
    def dispose(cls, root: Any = GLOBAL_ROOT, *, registry: Optional[InjectorRegistry] = None) -> "Optional[Injector]":
        """Unregister the injector for *root* so a new one can be created.

        Returns:
            The removed injector, or ``None`` if *root* had none.
        """
        registry = registry if registry is not None else default_registry
        injector = registry.remove(root)
        if injector is not None:
            logger.debug("Disposed injector for %r", root)
        return injector

    @classmethod
    def reset(cls) -> None:
        """Forget every injector in the default registry.

        Intended for use in tests to ensure a clean state between test cases.
        """
        default_registry.clear()

    @property
    def root(self) -> Any:
        return self._root

    @property
    def scope(self) -> Scope:
        """The root scope."""
        return self._scope

    @property
    def options(self) -> InjectorOptions:
        return self._options

    def get(self, cls: "type[T]") -> "Optional[T]":
        """Return the instance of *cls* cached in the root scope, if any.

        Never constructs anything.
        """
        return self._scope.get_instance(cls)

    def instantiate(self, cls: "type[T]", parent_scope: Optional[Scope] = None) -> T:
        """Build an instance of *cls* and, recursively, its dependencies.

        If construction fails, every instance cached during this call is
        removed again and the error propagates unchanged.

        Args:
            cls: The type to build.
            parent_scope: The scope to build under. Defaults to the root scope.

        Returns:
            The new or cached instance.

        Raises:
            NotInjectableError: If a constructor target is not injectable.
            ProviderNotExistsError: In strict mode, if a type dependency has
                no binding.
            FactoryNotFunctionError: If a factory binding is not callable.
            IncorrectProviderError: If a binding has an unknown kind.
            CyclicDependencyError: If a type depends on itself.
        """
        if parent_scope is None:
            parent_scope = self._scope

        outermost = not self._resolving
        mark = len(self._created)
        try:
            return self._instantiate(cls, parent_scope, None)
        except Exception:
            for owner, created in reversed(self._created[mark:]):
                owner.discard_instance(created)
            del self._created[mark:]
            raise
        finally:
            if outermost:
                self._created.clear()

    def _instantiate(
        self,
        cls: type,
        parent_scope: Scope,
        parent_type: Any,
        binding: Any = _LOOKUP,
        requested: Any = None,
    ) -> Any:
        if requested is None:
            requested = cls
        if binding is _LOOKUP:
            binding = parent_scope.get_provider(cls)
        if binding is not None and binding.kind is BindingKind.CLASS:
            cls = binding.target

        options = self._metadata.is_injectable(cls)
        if options is None:
            raise NotInjectableError(cls, chain=self._chain(cls))

        scope = Scope(parent_scope, options.providers)
        overrides = self._metadata.get_param_overrides(cls)

        found, instance = scope.find_cached_instance(cls, overrides, requested)
        if found:
            return instance

        if any(pending is cls for pending in self._resolving):
            raise CyclicDependencyError(cls, chain=self._chain(cls))

        self._resolving.append(cls)
        try:
            param_types = self._metadata.get_constructor_param_types(cls)
            args = [
                self._resolve_param(index, param_type, overrides, scope, cls)
                for index, param_type in enumerate(param_types)
            ]
            instance = self._make_instance(cls, binding, args, parent_type)
        finally:
            self._resolving.pop()

        owner = scope.resolve_owning_scope(cls, overrides, args, requested)
        owner.add_instance(cls, instance)
        self._created.append((owner, cls))
        return instance

    def _resolve_param(
        self,
        index: int,
        param_type: Optional[type],
        overrides: Mapping[int, InjectKey],
        scope: Scope,
        owner_type: type,
    ) -> Any:
        if index in overrides:
            return self._resolve_token(overrides[index], scope, owner_type)
        if param_type is None:
            return None
        return self._instantiate(param_type, scope, owner_type)

    def _resolve_token(self, key: InjectKey, scope: Scope, owner_type: type) -> Any:
        """Resolve a parameter pinned to *key*.

        A missing binding leaves the parameter empty, whatever the strict
        setting. Class bindings take part in graph construction like any
        other type.
        """
        binding = scope.get_provider(key)
        if binding is None:
            return None
        if binding.kind in (BindingKind.CLASS, BindingKind.SELF):
            return self._instantiate(binding.target, scope, owner_type, binding, requested=key)
        return self._make_instance(key, binding, [], owner_type)

    def _make_instance(self, cls: Any, binding: Optional[Binding], args: List[Any], parent_type: Any) -> Any:
        if binding is None or (binding.kind is BindingKind.SELF and binding.matches(cls)):
            if binding is None and self._options.strict_providers:
                raise ProviderNotExistsError(cls, chain=self._chain())
            self._trace(parent_type, cls)
            return cls(*args)

        if binding.kind is BindingKind.VALUE:
            return binding.target

        if binding.kind is BindingKind.CLASS:
            self._trace(parent_type, binding.target)
            return binding.target(*args)

        if binding.kind is BindingKind.FACTORY:
            if not callable(binding.target):
                raise FactoryNotFunctionError(binding.provide, chain=self._chain())
            self._trace(parent_type, binding.provide)
            return binding.target(*args, self._root)

        raise IncorrectProviderError(binding)

    def _chain(self, extra: Any = None) -> List[str]:
        chain = [key_name(pending) for pending in self._resolving]
        if extra is not None:
            chain.append(key_name(extra))
        return chain

    def _trace(self, parent_type: Any, constructed: Any) -> None:
        if self._options.debug:
            parent = _trace_name(parent_type) if parent_type is not None else "root"
            logger.debug("%s <-- %s", parent, _trace_name(constructed))
