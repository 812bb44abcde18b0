"""Provider bindings: declarative rules for satisfying a dependency key."""

import inspect
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional

from arborinjectum.exceptions import IncorrectProviderError
from arborinjectum.tokens import InjectKey, key_name, same_key


class BindingKind(Enum):
    """The construction strategy a binding selects.

    Attributes:
        SELF: Construct the bound type directly.
        VALUE: Return a fixed, precomputed value.
        CLASS: Construct a substitute type in place of the requested one.
        FACTORY: Call a function with the resolved arguments and the root object.

    Examples:
        >>> BindingKind.VALUE
        <BindingKind.VALUE: 'value'>
    """

    SELF = "self"
    VALUE = "value"
    CLASS = "class"
    FACTORY = "factory"


class Binding:
    """Associates a provide key with exactly one construction strategy.

    Bindings are built with the ``for_type``/``use_*`` constructors, which
    fix the :class:`BindingKind` up front. The stored target is therefore
    never probed for truthiness: a value binding for ``0`` or ``""`` is as
    present as any other.

    Args:
        provide: The type or token this binding satisfies.
        kind: The construction strategy.
        target: The class, value or factory function, depending on *kind*.

    Examples:
        >>> Binding.use_value("NAIL_COLOR", "black")
        Binding(provide='NAIL_COLOR', kind=value, target='black')
        >>> Binding.use_value("RETRIES", 0).target
        0
    """

    __slots__ = ("provide", "kind", "target")

    def __init__(self, provide: InjectKey, kind: BindingKind, target: Any) -> None:
        self.provide = provide
        self.kind = kind
        self.target = target

    @classmethod
    def for_type(cls, target: type) -> "Binding":
        """Bind *target* to itself.

        Raises:
            IncorrectProviderError: If *target* is not a class.
        """
        if not inspect.isclass(target):
            raise IncorrectProviderError(target)
        return cls(target, BindingKind.SELF, target)

    @classmethod
    def use_value(cls, provide: InjectKey, value: Any) -> "Binding":
        """Bind *provide* to *value*, returned as-is on every resolution."""
        return cls(provide, BindingKind.VALUE, value)

    @classmethod
    def use_class(cls, provide: InjectKey, substitute: type) -> "Binding":
        """Bind *provide* to an instance of *substitute*.

        Raises:
            IncorrectProviderError: If *substitute* is not a class.
        """
        if not inspect.isclass(substitute):
            raise IncorrectProviderError(substitute)
        return cls(provide, BindingKind.CLASS, substitute)

    @classmethod
    def use_factory(cls, provide: InjectKey, factory: Callable[..., Any]) -> "Binding":
        """Bind *provide* to the result of calling *factory*.

        The factory is called with the resolved constructor arguments of the
        requested type followed by the injector's root object. Whether
        *factory* is callable is checked when the binding is used.
        """
        return cls(provide, BindingKind.FACTORY, factory)

    def matches(self, key: Any) -> bool:
        """Return True if this binding satisfies *key*."""
        return same_key(self.provide, key)

    def __repr__(self) -> str:
        if self.kind is BindingKind.VALUE:
            target = repr(self.target)
        else:
            target = getattr(self.target, "__name__", None) or repr(self.target)
        return f"Binding(provide={key_name(self.provide)}, kind={self.kind.value}, target={target})"


def as_binding(item: Any) -> Binding:
    """Normalise an entry of a binding list.

    A :class:`Binding` is returned unchanged and a bare class becomes a
    ``SELF`` binding for itself.

    Raises:
        IncorrectProviderError: For anything else.

    Examples:
        >>> class Wheel:
        ...     pass
        >>> as_binding(Wheel).kind
        <BindingKind.SELF: 'self'>
    """
    if isinstance(item, Binding):
        return item
    if inspect.isclass(item):
        return Binding.for_type(item)
    raise IncorrectProviderError(item)


def as_bindings(items: Optional[Iterable[Any]]) -> List[Binding]:
    """Normalise a whole binding list; ``None`` means no bindings."""
    if items is None:
        return []
    return [as_binding(item) for item in items]
