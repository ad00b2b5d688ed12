"""
Unit tests for DependencyContainer.
"""

import pytest

from tempshare.application.dependency_container import (
    DependencyContainer,
    DependencyNotFoundError,
)


class Service:
    pass


class OtherService:
    pass


class TestDependencyContainer:

    def test_singleton_returns_same_instance(self):
        container = DependencyContainer()
        instance = Service()
        container.register_singleton(Service, instance)

        assert container.resolve(Service) is instance
        assert container.resolve(Service) is instance

    def test_factory_returns_new_instances(self):
        container = DependencyContainer()
        container.register_factory(Service, Service)

        assert container.resolve(Service) is not container.resolve(Service)

    def test_factory_may_resolve_other_services(self):
        container = DependencyContainer()
        other = OtherService()
        container.register_singleton(OtherService, other)
        container.register_factory(Service, lambda: (Service(), container.resolve(OtherService)))

        _, resolved = container.resolve(Service)

        assert resolved is other

    def test_unregistered_raises(self):
        with pytest.raises(DependencyNotFoundError, match="Service"):
            DependencyContainer().resolve(Service)

    def test_override_takes_precedence(self):
        container = DependencyContainer()
        container.register_singleton(Service, Service())
        fake = object()

        container.override(Service, fake)
        assert container.resolve(Service) is fake

        container.clear_overrides()
        assert container.resolve(Service) is not fake

    def test_is_registered(self):
        container = DependencyContainer()
        assert not container.is_registered(Service)

        container.register_factory(Service, Service)
        container.override(OtherService, OtherService())

        assert container.is_registered(Service)
        assert container.is_registered(OtherService)
