"""
Dependency Injection Container

Holds the wired service graph for the application and its background tasks.
"""

import logging
import threading
from typing import Any, Callable, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Registry of singletons and factories, keyed by type.

    Overrides take precedence over every registration so tests can swap in
    fakes after the app factory has wired the real graph. Thread-safe.
    """

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable[[], Any]] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register a single shared instance.

        Args:
            interface: The type to register under
            implementation: The concrete instance
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def register_factory(self, interface: Type[T], factory: Callable[[], T]) -> None:
        """
        Register a factory called on every resolution.

        Args:
            interface: The type to register under
            factory: Callable producing a new instance
        """
        with self._lock:
            self._factories[interface] = factory
            logger.debug(f"Registered factory: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Raises:
            DependencyNotFoundError: If the type is not registered
        """
        with self._lock:
            if interface in self._overrides:
                return self._overrides[interface]
            if interface in self._singletons:
                return self._singletons[interface]
            if interface not in self._factories:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                )
            factory = self._factories[interface]

        # Outside the lock so factories may resolve other services
        return factory()

    def override(self, interface: Type[T], implementation: T) -> None:
        """Replace a registration with a test instance."""
        with self._lock:
            self._overrides[interface] = implementation
            logger.debug(f"Overridden: {interface.__name__}")

    def clear_overrides(self) -> None:
        with self._lock:
            self._overrides.clear()

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return (
                interface in self._singletons or
                interface in self._factories or
                interface in self._overrides
            )
