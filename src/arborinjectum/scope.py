"""Binding environments and caching boundaries."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from arborinjectum.bindings import Binding, as_bindings

_MISSING = object()


class Scope:
    """A node in the binding hierarchy.

    A scope holds the bindings declared at its level and caches the
    instances that belong to the subtree it roots. Lookups that miss
    locally continue in the parent scope.

    The injector creates one short-lived scope per constructed type. Only
    the injector's root scope lives as long as the injector.

    Args:
        parent: The enclosing scope, ``None`` for a root scope.
        providers: Bindings declared at this level. Bare classes are
            accepted as self bindings.

    Examples:
        >>> root = Scope(providers=[Binding.use_value("color", "red")])
        >>> child = Scope(root, [Binding.use_value("color", "blue")])
        >>> child.get_provider("color").target
        'blue'
        >>> Scope(child).get_provider("size") is None
        True
    """

    def __init__(self, parent: "Optional[Scope]" = None, providers: Optional[Iterable[Any]] = None) -> None:
        self._parent = parent
        self._providers: List[Binding] = as_bindings(providers)
        self._instances: Dict[type, Any] = {}

    @property
    def parent(self) -> "Optional[Scope]":
        return self._parent

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def providers(self) -> Tuple[Binding, ...]:
        return tuple(self._providers)

    def add_providers(self, providers: Iterable[Any]) -> None:
        """Append bindings to this level."""
        self._providers.extend(as_bindings(providers))

    def add_instance(self, cls: type, instance: Any) -> None:
        self._instances[cls] = instance

    def discard_instance(self, cls: type) -> None:
        self._instances.pop(cls, None)

    def get_instance(self, cls: type) -> Any:
        """Return the instance cached at this level only, or ``None``."""
        return self._instances.get(cls)

    def binds_locally(self, key: Any) -> bool:
        """Return True if a binding for *key* is declared at this level."""
        return self._local_provider(key) is not None

    def get_provider(self, key: Any) -> Optional[Binding]:
        """Return the nearest binding for *key*, searching toward the root."""
        scope: Optional[Scope] = self
        while scope is not None:
            provider = scope._local_provider(key)
            if provider is not None:
                return provider
            scope = scope._parent
        return None

    def find_cached_instance(
        self,
        cls: type,
        param_overrides: Mapping[int, Any],
        requested: Any = None,
    ) -> Tuple[bool, Any]:
        """Look for a reusable instance of *cls*.

        The search walks toward the root but stops at the first scope that
        declares a binding for *cls* or for one of the keys in
        *param_overrides*: an instance cached above that point was built
        under different configuration. When a class binding redirected a
        request to *cls*, pass the original key as *requested*; bindings
        for it mark a boundary as well.

        Returns:
            A ``(found, instance)`` pair.
        """
        scope: Optional[Scope] = self
        while scope is not None:
            instance = scope._instances.get(cls, _MISSING)
            if instance is not _MISSING:
                return True, instance
            if scope._is_boundary(cls, param_overrides, requested):
                return False, None
            scope = scope._parent
        return False, None

    def resolve_owning_scope(
        self,
        cls: type,
        param_overrides: Mapping[int, Any],
        resolved_params: Sequence[Any],
        requested: Any = None,
    ) -> "Scope":
        """Find the scope at which a new instance of *cls* is cached.

        Walking toward the root, the first scope that is the root, binds
        *cls*, *requested* or one of *param_overrides*, or already caches
        one of *resolved_params* owns the instance.
        """
        scope = self
        while True:
            if scope._parent is None:
                return scope
            if scope._is_boundary(cls, param_overrides, requested):
                return scope
            if scope._caches_any(resolved_params):
                return scope
            scope = scope._parent

    def _local_provider(self, key: Any) -> Optional[Binding]:
        for provider in self._providers:
            if provider.matches(key):
                return provider
        return None

    def _is_boundary(self, cls: type, param_overrides: Mapping[int, Any], requested: Any) -> bool:
        if not self._providers:
            return False
        if self.binds_locally(cls):
            return True
        if requested is not None and requested is not cls and self.binds_locally(requested):
            return True
        return any(self.binds_locally(key) for key in param_overrides.values())

    def _caches_any(self, instances: Sequence[Any]) -> bool:
        if not self._instances:
            return False
        cached = {id(instance) for instance in self._instances.values()}
        # empty slots never anchor
        return any(instance is not None and id(instance) in cached for instance in instances)
