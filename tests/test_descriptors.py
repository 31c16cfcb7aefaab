from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Final, Protocol, TypeVar

import pytest

from tests.stubs import StubContext
from wireplan.descriptors import ComponentDescriptor
from wireplan.exceptions import ComponentConstructionError, IllegalComponentError
from wireplan.markers import Injected, Provider, inject
from wireplan.roles import Role

if TYPE_CHECKING:
    from decimal import Decimal

T = TypeVar("T")


class Dependency:
    pass


class AnotherDependency:
    pass


class DefaultConstructor:
    pass


class InjectConstructor:
    @inject
    def __init__(self, dependency: Dependency) -> None:
        self.dependency = dependency


class ProviderConstructor:
    @inject
    def __init__(self, dependency: Provider[Dependency]) -> None:
        self.dependency = dependency


class KeywordOnlyConstructor:
    @inject
    def __init__(self, dependency: Dependency, *, another: AnotherDependency) -> None:
        self.dependency = dependency
        self.another = another


class AlternativeConstructor:
    def __init__(self, dependency: Dependency, source: str) -> None:
        self.dependency = dependency
        self.source = source

    @classmethod
    @inject
    def create(cls, dependency: Dependency) -> AlternativeConstructor:
        return cls(dependency, source="create")


class AbstractComponent(ABC):
    @abstractmethod
    def run(self) -> None:
        """Run the component."""


class ComponentProtocol(Protocol):
    def run(self) -> None: ...


class MultiInjectConstructors:
    @inject
    def __init__(self, dependency: Dependency) -> None:
        self.dependency = dependency

    @inject
    @classmethod
    def create(cls, dependency: Dependency) -> MultiInjectConstructors:
        return cls(dependency)


class NoInjectNorDefaultConstructor:
    def __init__(self, name: str) -> None:
        self.name = name


class DefaultedConstructor:
    def __init__(self, name: str = "default") -> None:
        self.name = name


class UnannotatedConstructor:
    @inject
    def __init__(self, dependency) -> None:  # type: ignore[no-untyped-def]  # noqa: ANN001
        self.dependency = dependency


class VariadicConstructor:
    @inject
    def __init__(self, *dependencies: Dependency) -> None:
        self.dependencies = dependencies


class StaticInjectionPoint:
    @staticmethod
    @inject
    def build(dependency: Dependency) -> None:
        pass


class FailingConstructor:
    def __init__(self) -> None:
        msg = "boom"
        raise RuntimeError(msg)


class TestConstructorInjection:
    def test_calls_default_constructor_if_no_inject_constructor(self) -> None:
        descriptor = ComponentDescriptor(DefaultConstructor)

        instance = descriptor.get(StubContext())

        assert type(instance) is DefaultConstructor

    def test_calls_defaulted_constructor_without_arguments(self) -> None:
        instance = ComponentDescriptor(DefaultedConstructor).get(StubContext())

        assert instance.name == "default"

    def test_injects_dependency_via_inject_constructor(self) -> None:
        dependency = Dependency()

        instance = ComponentDescriptor(InjectConstructor).get(StubContext({Dependency: dependency}))

        assert instance.dependency is dependency

    def test_includes_dependency_from_inject_constructor(self) -> None:
        descriptor = ComponentDescriptor(InjectConstructor)

        assert descriptor.get_dependencies() == (Role.direct(Dependency),)

    def test_includes_provider_role_from_inject_constructor(self) -> None:
        descriptor = ComponentDescriptor(ProviderConstructor)

        assert descriptor.dependencies == (Role.deferred(Dependency),)

    def test_injects_provider_via_inject_constructor(self) -> None:
        handle = lambda: Dependency()  # noqa: E731
        context = StubContext({Provider[Dependency]: handle})

        instance = ComponentDescriptor(ProviderConstructor).get(context)

        assert instance.dependency is handle

    def test_passes_keyword_only_parameters_by_name(self) -> None:
        dependency = Dependency()
        another = AnotherDependency()
        context = StubContext({Dependency: dependency, AnotherDependency: another})

        instance = ComponentDescriptor(KeywordOnlyConstructor).get(context)

        assert instance.dependency is dependency
        assert instance.another is another

    def test_uses_classmethod_alternative_constructor(self) -> None:
        dependency = Dependency()
        descriptor = ComponentDescriptor(AlternativeConstructor)

        instance = descriptor.get(StubContext({Dependency: dependency}))

        assert descriptor.constructor.name == "create"
        assert descriptor.constructor.is_alternative
        assert instance.dependency is dependency
        assert instance.source == "create"

    def test_fails_loudly_if_required_role_resolves_to_nothing(self) -> None:
        descriptor = ComponentDescriptor(InjectConstructor)

        with pytest.raises(ComponentConstructionError, match="resolved to nothing") as exc_info:
            descriptor.get(StubContext())

        assert exc_info.value.component is InjectConstructor

    def test_wraps_exceptions_raised_by_constructor(self) -> None:
        descriptor = ComponentDescriptor(FailingConstructor)

        with pytest.raises(ComponentConstructionError, match="RuntimeError: boom") as exc_info:
            descriptor.get(StubContext())

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestIllegalConstructors:
    def test_rejects_non_class_component(self) -> None:
        with pytest.raises(IllegalComponentError, match="must be a class"):
            ComponentDescriptor(Dependency())  # type: ignore[arg-type]

    def test_rejects_abstract_component(self) -> None:
        with pytest.raises(IllegalComponentError, match="abstract") as exc_info:
            ComponentDescriptor(AbstractComponent)

        assert exc_info.value.component is AbstractComponent

    def test_rejects_protocol_component(self) -> None:
        with pytest.raises(IllegalComponentError, match="protocols"):
            ComponentDescriptor(ComponentProtocol)

    def test_rejects_multiple_inject_constructors(self) -> None:
        with pytest.raises(IllegalComponentError, match="more than one @inject constructor"):
            ComponentDescriptor(MultiInjectConstructors)

    def test_rejects_no_inject_nor_default_constructor(self) -> None:
        with pytest.raises(IllegalComponentError, match="no-argument __init__"):
            ComponentDescriptor(NoInjectNorDefaultConstructor)

    def test_rejects_unannotated_parameter(self) -> None:
        with pytest.raises(IllegalComponentError, match="'dependency'.*no type annotation"):
            ComponentDescriptor(UnannotatedConstructor)

    def test_rejects_variadic_parameter(self) -> None:
        with pytest.raises(IllegalComponentError, match="variadic parameter 'dependencies'"):
            ComponentDescriptor(VariadicConstructor)

    def test_rejects_static_injection_point(self) -> None:
        with pytest.raises(IllegalComponentError, match="static method 'build'"):
            ComponentDescriptor(StaticInjectionPoint)


class FieldInjection:
    dependency: Injected[Dependency]
    plain: int = 0


class SubclassWithFieldInjection(FieldInjection):
    pass


class ProviderField:
    dependency: Injected[Provider[Dependency]]


class FinalInjectField:
    dependency: Final[Injected[Dependency]]


class OrderedFields:
    another: Injected[AnotherDependency]


class SubclassWithOwnField(OrderedFields):
    dependency: Injected[Dependency]


class SubclassHidingField(FieldInjection):
    dependency: Dependency


class SubclassRedeclaringField(FieldInjection):
    dependency: Injected[Dependency]


class TypeCheckingOnlyAttribute:
    total: Decimal | None = None
    dependency: Injected[Dependency]


class UnresolvableInjectField:
    total: Injected[Decimal]


class TestFieldInjection:
    def test_injects_dependency_via_field(self) -> None:
        dependency = Dependency()

        instance = ComponentDescriptor(FieldInjection).get(StubContext({Dependency: dependency}))

        assert instance.dependency is dependency
        assert instance.plain == 0

    def test_injects_dependency_via_superclass_inject_field(self) -> None:
        dependency = Dependency()
        descriptor = ComponentDescriptor(SubclassWithFieldInjection)

        instance = descriptor.get(StubContext({Dependency: dependency}))

        assert instance.dependency is dependency

    def test_includes_dependency_from_field(self) -> None:
        assert ComponentDescriptor(FieldInjection).dependencies == (Role.direct(Dependency),)

    def test_includes_provider_role_from_field(self) -> None:
        assert ComponentDescriptor(ProviderField).dependencies == (Role.deferred(Dependency),)

    def test_injects_provider_via_field(self) -> None:
        handle = lambda: Dependency()  # noqa: E731

        instance = ComponentDescriptor(ProviderField).get(StubContext({Provider[Dependency]: handle}))

        assert instance.dependency is handle

    def test_orders_superclass_fields_first(self) -> None:
        descriptor = ComponentDescriptor(SubclassWithOwnField)

        assert [field.name for field in descriptor.fields] == ["another", "dependency"]
        assert [field.owner for field in descriptor.fields] == [OrderedFields, SubclassWithOwnField]

    def test_redeclared_field_is_injected_once(self) -> None:
        descriptor = ComponentDescriptor(SubclassRedeclaringField)

        assert [field.owner for field in descriptor.fields] == [SubclassRedeclaringField]

    def test_redeclared_field_without_marker_is_not_injected(self) -> None:
        descriptor = ComponentDescriptor(SubclassHidingField)

        assert descriptor.fields == ()
        assert descriptor.dependencies == ()

    def test_rejects_final_inject_field(self) -> None:
        with pytest.raises(IllegalComponentError, match="is Final"):
            ComponentDescriptor(FinalInjectField)

    def test_skips_attribute_typed_with_type_checking_only_import(self) -> None:
        descriptor = ComponentDescriptor(TypeCheckingOnlyAttribute)

        assert [field.name for field in descriptor.fields] == ["dependency"]
        assert descriptor.dependencies == (Role.direct(Dependency),)

    def test_rejects_inject_field_with_unresolvable_annotation(self) -> None:
        with pytest.raises(IllegalComponentError, match="cannot be resolved") as exc_info:
            ComponentDescriptor(UnresolvableInjectField)

        assert "UnresolvableInjectField.total" in str(exc_info.value)


class NoDependencyMethod:
    def __init__(self) -> None:
        self.called = False

    @inject
    def install(self) -> None:
        self.called = True


class MethodInjection:
    @inject
    def install(self, dependency: Dependency) -> None:
        self.dependency = dependency


class SuperClassWithInjectMethod:
    def __init__(self) -> None:
        self.super_called = 0
        self.calls: list[str] = []

    @inject
    def install(self) -> None:
        self.super_called += 1
        self.calls.append("super")


class SubclassWithInjectMethod(SuperClassWithInjectMethod):
    def __init__(self) -> None:
        super().__init__()
        self.sub_called = 0

    @inject
    def install_another(self) -> None:
        self.sub_called = self.super_called + 1
        self.calls.append("sub")


class SubclassOverrideSuperClassWithInject(SuperClassWithInjectMethod):
    @inject
    def install(self) -> None:
        super().install()


class SubclassOverrideSuperClassWithNoInject(SuperClassWithInjectMethod):
    def install(self) -> None:
        super().install()


class ProviderMethod:
    @inject
    def install(self, dependency: Provider[Dependency]) -> None:
        self.dependency = dependency


class GenericMethod:
    @inject
    def install(self, value: T) -> None:
        self.value = value


class FailingMethod:
    @inject
    def install(self, dependency: Dependency) -> None:
        msg = "install failed"
        raise ValueError(msg)


class TestMethodInjection:
    def test_calls_inject_method_even_if_no_dependency_declared(self) -> None:
        instance = ComponentDescriptor(NoDependencyMethod).get(StubContext())

        assert instance.called

    def test_injects_dependency_via_inject_method(self) -> None:
        dependency = Dependency()

        instance = ComponentDescriptor(MethodInjection).get(StubContext({Dependency: dependency}))

        assert instance.dependency is dependency

    def test_injects_dependencies_via_inject_method_from_superclass_first(self) -> None:
        instance = ComponentDescriptor(SubclassWithInjectMethod).get(StubContext())

        assert instance.super_called == 1
        assert instance.sub_called == 2
        assert instance.calls == ["super", "sub"]

    def test_calls_once_if_subclass_overrides_inject_method_with_inject(self) -> None:
        instance = ComponentDescriptor(SubclassOverrideSuperClassWithInject).get(StubContext())

        assert instance.super_called == 1

    def test_does_not_call_inject_method_if_overridden_with_no_inject(self) -> None:
        descriptor = ComponentDescriptor(SubclassOverrideSuperClassWithNoInject)

        instance = descriptor.get(StubContext())

        assert instance.super_called == 0
        assert descriptor.methods == ()

    def test_includes_dependencies_from_inject_method(self) -> None:
        assert ComponentDescriptor(MethodInjection).dependencies == (Role.direct(Dependency),)

    def test_includes_provider_role_from_inject_method(self) -> None:
        assert ComponentDescriptor(ProviderMethod).dependencies == (Role.deferred(Dependency),)

    def test_injects_provider_via_inject_method(self) -> None:
        handle = lambda: Dependency()  # noqa: E731

        instance = ComponentDescriptor(ProviderMethod).get(StubContext({Provider[Dependency]: handle}))

        assert instance.dependency is handle

    def test_rejects_inject_method_with_type_parameter(self) -> None:
        with pytest.raises(IllegalComponentError, match="declares type parameters"):
            ComponentDescriptor(GenericMethod)

    def test_wraps_exceptions_raised_by_inject_method(self) -> None:
        descriptor = ComponentDescriptor(FailingMethod)

        with pytest.raises(ComponentConstructionError, match="'install' raised ValueError"):
            descriptor.get(StubContext({Dependency: Dependency()}))


class Everything:
    field: Injected[AnotherDependency]

    @inject
    def __init__(self, dependency: Dependency) -> None:
        self.order = ["constructor"]
        self.dependency = dependency

    @inject
    def install(self, handle: Provider[Dependency]) -> None:
        self.order.append("method")
        self.seen_field = self.field


class TestDependencyOrder:
    def test_lists_constructor_then_field_then_method_roles(self) -> None:
        descriptor = ComponentDescriptor(Everything)

        assert descriptor.dependencies == (
            Role.direct(Dependency),
            Role.direct(AnotherDependency),
            Role.deferred(Dependency),
        )

    def test_assigns_fields_before_invoking_methods(self) -> None:
        another = AnotherDependency()
        context = StubContext(
            {
                Dependency: Dependency(),
                AnotherDependency: another,
                Provider[Dependency]: Dependency,
            },
        )

        instance = ComponentDescriptor(Everything).get(context)

        assert instance.order == ["constructor", "method"]
        assert instance.seen_field is another
        assert context.requested == [
            Role.direct(Dependency),
            Role.direct(AnotherDependency),
            Role.deferred(Dependency),
        ]
