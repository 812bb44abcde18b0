"""Custom exceptions for the arborinjectum DI framework."""

from typing import Any

from arborinjectum.tokens import key_name


class RegistrationError(Exception):
    """Raised when an injector or a binding is configured incorrectly.

    Examples:
        >>> raise RegistrationError("Cannot bind None")
        Traceback (most recent call last):
            ...
        arborinjectum.exceptions.RegistrationError: Cannot bind None
    """


class ResolutionError(Exception):
    """Raised when a dependency cannot be resolved.

    Includes the dependency chain to help diagnose where in the object
    graph the failure happened.

    Args:
        message: Description of the resolution failure.
        chain: The dependency resolution chain that led to the failure.

    Examples:
        >>> raise ResolutionError("Cannot build Car", chain=["Car", "Wheel"])
        Traceback (most recent call last):
            ...
        arborinjectum.exceptions.ResolutionError: Cannot build Car (resolution chain: Car -> Wheel)
    """

    def __init__(self, message: str, chain: "list[str] | None" = None) -> None:
        if chain:
            chain_str = " -> ".join(chain)
            message = f"{message} (resolution chain: {chain_str})"
        super().__init__(message)
        self.chain = chain or []


class InjectorAlreadyExistsError(RegistrationError):
    """Raised when a second injector is created for the same root object."""

    def __init__(self, root: Any) -> None:
        super().__init__(f"Injector already exists for root {root!r}")
        self.root = root


class IncorrectProviderError(RegistrationError):
    """Raised when a binding matches none of the known strategies."""

    def __init__(self, provider: Any) -> None:
        super().__init__(f"Incorrect provider {provider!r}")
        self.provider = provider


class NotInjectableError(ResolutionError):
    """Raised when a constructor target was never marked injectable."""

    def __init__(self, target: Any, chain: "list[str] | None" = None) -> None:
        super().__init__(f"Constructor {key_name(target)} is not marked @injectable", chain)
        self.target = target


class ProviderNotExistsError(ResolutionError):
    """Raised in strict mode when no binding satisfies a type dependency."""

    def __init__(self, target: Any, chain: "list[str] | None" = None) -> None:
        super().__init__(f"Provider {key_name(target)} does not exist", chain)
        self.target = target


class FactoryNotFunctionError(ResolutionError):
    """Raised when a factory binding holds something that is not callable."""

    def __init__(self, key: Any, chain: "list[str] | None" = None) -> None:
        super().__init__(f"Factory for {key_name(key)} is not a function", chain)
        self.key = key


class CyclicDependencyError(ResolutionError):
    """Raised when a type is requested again while it is still being built."""

    def __init__(self, target: Any, chain: "list[str] | None" = None) -> None:
        super().__init__(f"Circular dependency detected for {key_name(target)}", chain)
        self.target = target
