from wireplan.bindings import Binding, BindingRegistry, InstanceBinding, TypeBinding
from wireplan.builder import ContainerBuilder
from wireplan.context import Context, DeferredHandle
from wireplan.descriptors import ComponentDescriptor
from wireplan.exceptions import (
    ComponentConstructionError,
    CyclicDependencyError,
    DependencyNotFoundError,
    DependencyNotRegisteredError,
    IllegalComponentError,
    WireplanError,
)
from wireplan.introspection import ComponentIntrospector, MarkerIntrospector
from wireplan.markers import Injected, Provider, inject
from wireplan.roles import Role, RoleKind
from wireplan.validators import DependencyGraphValidator

__all__ = [
    "Binding",
    "BindingRegistry",
    "ComponentConstructionError",
    "ComponentDescriptor",
    "ComponentIntrospector",
    "ContainerBuilder",
    "Context",
    "CyclicDependencyError",
    "DeferredHandle",
    "DependencyGraphValidator",
    "DependencyNotFoundError",
    "DependencyNotRegisteredError",
    "IllegalComponentError",
    "InstanceBinding",
    "Injected",
    "MarkerIntrospector",
    "Provider",
    "Role",
    "RoleKind",
    "TypeBinding",
    "WireplanError",
    "inject",
]
