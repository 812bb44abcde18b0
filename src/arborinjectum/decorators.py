"""Decorator helpers for arborinjectum.

These decorators only write metadata; they never construct anything.
"""

import inspect
from typing import Any, Callable, Iterable, Optional, TypeVar, overload

from arborinjectum.exceptions import RegistrationError
from arborinjectum.metadata import MetadataRegistry, default_metadata

T = TypeVar("T", bound=type)


@overload
def injectable(target: T) -> T: ...


@overload
def injectable(
    *,
    alias: Optional[str] = ...,
    providers: Optional[Iterable[Any]] = ...,
    metadata: Optional[MetadataRegistry] = ...,
) -> Callable[[T], T]: ...


def injectable(
    target: "T | None" = None,
    *,
    alias: Optional[str] = None,
    providers: Optional[Iterable[Any]] = None,
    metadata: Optional[MetadataRegistry] = None,
) -> Any:
    """Mark a class as a constructor target for the injector.

    Can be used bare (``@injectable``) or with arguments
    (``@injectable(providers=[Binding.use_value("COLOR", "red")])``).

    Constructor parameter types come from the ``__init__`` annotations.
    Annotate a parameter with ``Annotated[T, Inject(key)]`` to resolve it
    through the binding for *key* instead of through ``T``.

    Args:
        target: The class (supplied automatically when used bare).
        alias: Optional descriptive name, not used during resolution.
        providers: Bindings that apply only inside the subtree built for
            this class.
        metadata: The registry to write to. Defaults to the process-wide
            ``default_metadata``.

    Returns:
        The class, unmodified (but now registered as injectable).

    Raises:
        RegistrationError: If applied to something that is not a class.

    Examples:
        >>> from arborinjectum.metadata import MetadataRegistry
        >>> registry = MetadataRegistry()
        >>> @injectable(alias="Spare", metadata=registry)
        ... class SpareWheel:
        ...     pass
        >>> registry.is_injectable(SpareWheel).alias
        'Spare'
    """
    def decorator(inner: Any) -> Any:
        if not inspect.isclass(inner):
            raise RegistrationError(
                f"@injectable can only decorate classes, got "
                f"'{getattr(inner, '__name__', inner)!s}'"
            )

        registry = metadata if metadata is not None else default_metadata
        registry.register(inner, alias=alias, providers=providers)
        return inner

    if target is not None:
        return decorator(target)
    return decorator
