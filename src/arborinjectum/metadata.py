"""Per-type injection metadata.

The injector never inspects classes itself. It asks a
:class:`MetadataRegistry` three questions about a type: whether it is
injectable (and with which local bindings), which types its constructor
parameters have, and which parameters are pinned to an explicit key.
"""

import inspect
import types
import typing
from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, Iterable, List, Optional, Tuple, get_args, get_origin

from arborinjectum.bindings import Binding, as_bindings
from arborinjectum.exceptions import RegistrationError
from arborinjectum.tokens import InjectKey, key_name


class Inject:
    """Marker pinning a constructor parameter to an explicit injection key.

    Use with ``typing.Annotated``. The parameter is then resolved through
    the binding for *key* instead of through its declared type.

    Args:
        key: A string name, a :class:`~arborinjectum.tokens.Token` or a type.

    Examples:
        >>> from typing import Annotated
        >>> class Nail:
        ...     def __init__(self, color: Annotated[str, Inject("NAIL_COLOR")]):
        ...         self.color = color
        >>> Inject("NAIL_COLOR")
        Inject('NAIL_COLOR')
    """

    __slots__ = ("key",)

    def __init__(self, key: InjectKey) -> None:
        self.key = key

    def __repr__(self) -> str:
        return f"Inject({key_name(self.key)})"


@dataclass(frozen=True)
class InjectableOptions:
    """Options attached to an injectable type.

    Attributes:
        alias: A descriptive name. Not used during resolution.
        providers: Bindings that apply only inside the subtree built for
            this type.
    """

    alias: Optional[str] = None
    providers: Tuple[Binding, ...] = ()


@dataclass
class TypeMetadata:
    """Everything recorded about one injectable type."""

    options: InjectableOptions
    param_overrides: Dict[int, InjectKey] = field(default_factory=dict)
    param_types: Optional[List[Optional[type]]] = None
    introspected: bool = False


def _constructor_params(cls: type) -> List[inspect.Parameter]:
    try:
        sig = inspect.signature(cls.__init__)
    except (ValueError, TypeError):
        return []

    params = []
    for name, param in sig.parameters.items():
        if name == "self":
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            continue
        params.append(param)
    return params


def _annotations(cls: type) -> Dict[str, Any]:
    """Return the evaluated ``__init__`` annotations of *cls*.

    String annotations that cannot be evaluated yet are returned raw.
    """
    try:
        return typing.get_type_hints(cls.__init__, include_extras=True)
    except (NameError, TypeError):
        return {
            param.name: param.annotation
            for param in _constructor_params(cls)
            if param.annotation is not inspect.Parameter.empty
        }


def _split_annotation(annotation: Any) -> Tuple[Optional[type], Optional[InjectKey]]:
    """Extract the declared class and an optional override key.

    ``Annotated[T, Inject(key)]`` gives ``(T, key)``, ``Optional[T]`` is
    unwrapped to ``T`` and anything that is not a class gives ``None``.
    """
    key = None
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        annotation = args[0]
        for extra in args[1:]:
            if isinstance(extra, Inject):
                key = extra.key
                break

    if get_origin(annotation) in (typing.Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            annotation = members[0]

    if get_origin(annotation) is None and inspect.isclass(annotation):
        return annotation, key
    return None, key


class MetadataRegistry:
    """A table mapping each injectable type to its metadata.

    Types are registered up front, either explicitly with :meth:`register`
    or through the :func:`~arborinjectum.decorators.injectable` decorator.
    Constructor parameter types are read from ``__init__`` annotations on
    first use unless they were registered explicitly, so annotations may
    refer to classes defined later in the same module.

    Examples:
        >>> registry = MetadataRegistry()
        >>> class Wheel:
        ...     pass
        >>> class Car:
        ...     def __init__(self, wheel: Wheel):
        ...         self.wheel = wheel
        >>> _ = registry.register(Car, alias="Auto")
        >>> registry.is_injectable(Car).alias
        'Auto'
        >>> registry.get_constructor_param_types(Car) == [Wheel]
        True
        >>> registry.is_injectable(Wheel) is None
        True
    """

    def __init__(self) -> None:
        self._entries: Dict[type, TypeMetadata] = {}

    def register(
        self,
        cls: type,
        alias: Optional[str] = None,
        providers: Optional[Iterable[Any]] = None,
        param_types: Optional[Iterable[Optional[type]]] = None,
        param_overrides: Optional[Dict[int, InjectKey]] = None,
    ) -> TypeMetadata:
        """Mark *cls* as injectable.

        Registering the same class again replaces its previous metadata.

        Args:
            cls: The class to register.
            alias: Optional descriptive name.
            providers: Bindings local to the subtree built for *cls*. Bare
                classes are accepted as self bindings.
            param_types: Explicit constructor parameter types, in order.
                Defaults to the ``__init__`` annotations. ``Inject``
                markers in the annotations still apply.
            param_overrides: Explicit mapping from parameter position to an
                injection key. Takes precedence over ``Inject`` markers.

        Returns:
            The stored metadata.

        Raises:
            RegistrationError: If *cls* is not a class.
            IncorrectProviderError: If a provider is not a binding or class.
        """
        if not inspect.isclass(cls):
            raise RegistrationError(f"Only classes can be injectable, got {cls!r}")

        options = InjectableOptions(alias=alias, providers=tuple(as_bindings(providers)))
        entry = TypeMetadata(
            options=options,
            param_overrides=dict(param_overrides or {}),
            param_types=list(param_types) if param_types is not None else None,
        )
        self._entries[cls] = entry
        return entry

    def forget(self, cls: type) -> None:
        """Remove *cls* from the registry if present."""
        self._entries.pop(cls, None)

    def clear(self) -> None:
        """Remove every registration. Intended for tests."""
        self._entries.clear()

    def is_injectable(self, cls: Any) -> Optional[InjectableOptions]:
        """Return the options of *cls*, or ``None`` if it is not injectable."""
        entry = self._entries.get(cls)
        if entry is None:
            return None
        return entry.options

    def get_constructor_param_types(self, cls: type) -> List[Optional[type]]:
        """Return the declared constructor parameter types of *cls*, in order.

        An entry is ``None`` when the parameter has no class annotation.
        """
        entry = self._entries.get(cls)
        if entry is None:
            return self._introspect(cls)[0]
        self._complete(cls, entry)
        return list(entry.param_types)

    def get_param_overrides(self, cls: type) -> Dict[int, InjectKey]:
        """Return the sparse map from parameter position to injection key.

        ``Inject`` markers are read even when the parameter types were
        registered explicitly.
        """
        entry = self._entries.get(cls)
        if entry is None:
            return self._introspect(cls)[1]
        self._complete(cls, entry)
        return dict(entry.param_overrides)

    def _complete(self, cls: type, entry: TypeMetadata) -> None:
        if entry.introspected:
            return
        param_types, overrides = self._introspect(cls)
        if entry.param_types is None:
            entry.param_types = param_types
        for index, key in overrides.items():
            entry.param_overrides.setdefault(index, key)
        entry.introspected = True

    @staticmethod
    def _introspect(cls: type) -> Tuple[List[Optional[type]], Dict[int, InjectKey]]:
        hints = _annotations(cls)
        types: List[Optional[type]] = []
        overrides: Dict[int, InjectKey] = {}
        for index, param in enumerate(_constructor_params(cls)):
            annotation = hints.get(param.name, inspect.Parameter.empty)
            if annotation is inspect.Parameter.empty:
                types.append(None)
                continue
            param_type, key = _split_annotation(annotation)
            types.append(param_type)
            if key is not None:
                overrides[index] = key
        return types, overrides


default_metadata = MetadataRegistry()
