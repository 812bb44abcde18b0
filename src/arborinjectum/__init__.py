"""arborinjectum — Hierarchical dependency injection with scoped bindings."""

from arborinjectum.bindings import Binding, BindingKind
from arborinjectum.decorators import injectable
from arborinjectum.exceptions import (
    CyclicDependencyError,
    FactoryNotFunctionError,
    IncorrectProviderError,
    InjectorAlreadyExistsError,
    NotInjectableError,
    ProviderNotExistsError,
    RegistrationError,
    ResolutionError,
)
from arborinjectum.injector import (
    GLOBAL_ROOT,
    Injector,
    InjectorOptions,
    InjectorRegistry,
    default_registry,
)
from arborinjectum.metadata import Inject, InjectableOptions, MetadataRegistry, default_metadata
from arborinjectum.scope import Scope
from arborinjectum.tokens import Token

__all__ = [
    "Injector",
    "InjectorOptions",
    "InjectorRegistry",
    "Scope",
    "Binding",
    "BindingKind",
    "Token",
    "Inject",
    "InjectableOptions",
    "MetadataRegistry",
    "GLOBAL_ROOT",
    "default_metadata",
    "default_registry",
    "injectable",
    "RegistrationError",
    "ResolutionError",
    "InjectorAlreadyExistsError",
    "IncorrectProviderError",
    "NotInjectableError",
    "ProviderNotExistsError",
    "FactoryNotFunctionError",
    "CyclicDependencyError",
]
