"""
Dependency injection container for managing service lifecycles and dependencies.

This module provides a lightweight container mapping a capability type to a
class, factory or ready instance. Singleton registrations are created at
most once per container; transient registrations create a new object on
every resolution.
"""

import inspect
import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union, get_type_hints

logger = logging.getLogger(__name__)

T = TypeVar('T')

_UNSET = object()


class ServiceLifetime(Enum):
    """Service lifetime management options."""
    SINGLETON = auto()  # Single instance shared across application
    TRANSIENT = auto()  # New instance created each time


class ServiceRegistration:
    """Registration information for a service."""

    def __init__(self,
                 service_type: Type[Any],
                 implementation: Any,
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON,
                 instance: Any = _UNSET) -> None:
        self.service_type = service_type
        self.implementation = implementation
        self.lifetime = lifetime
        self.instance: Any = instance
        self.factory_calls = 0

        # Objects that cannot be called are instances, not factories
        if instance is _UNSET and not callable(implementation):
            self.instance = implementation
            self.lifetime = ServiceLifetime.SINGLETON

    @property
    def has_instance(self) -> bool:
        return self.instance is not _UNSET


class IContainer(ABC):
    """Interface for dependency injection containers."""

    @abstractmethod
    def register(self,
                 service_type: Type[T],
                 implementation: Union[Type[T], Callable[[], T], T],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        """
        Register a service with the container.

        Args:
            service_type: Interface or base type
            implementation: Implementation class, factory function, or instance
            lifetime: Service lifetime management
        """
        pass

    @abstractmethod
    def register_instance(self, service_type: Type[T], instance: T) -> None:
        """Register a specific instance as a singleton."""
        pass

    @abstractmethod
    def resolve(self, service_type: Type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            ServiceNotRegisteredException: If service not registered
            ServiceResolutionException: If service cannot be resolved
        """
        pass

    @abstractmethod
    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        """Resolve a service instance, returning None on failure."""
        pass

    @abstractmethod
    def is_registered(self, service_type: Type[Any]) -> bool:
        """Check if a service type is registered."""
        pass

    @abstractmethod
    def get_registrations(self) -> Dict[Type[Any], ServiceRegistration]:
        """Get all service registrations."""
        pass


class ServiceNotRegisteredException(Exception):
    """Raised when trying to resolve an unregistered service."""
    pass


class ServiceResolutionException(Exception):
    """Raised when service resolution fails."""
    pass


class CircularDependencyException(Exception):
    """Raised when circular dependencies are detected."""
    pass


class Container(IContainer):
    """
    Lightweight dependency injection container.

    Supports constructor injection by type hints, singleton and transient
    lifetimes, and circular dependency detection.
    """

    def __init__(self) -> None:
        self._services: Dict[Type[Any], ServiceRegistration] = {}
        self._resolution_stack: List[Type[Any]] = []
        # Re-entrant so constructor injection can resolve nested services
        self._lock = threading.RLock()

    def register(self,
                 service_type: Type[T],
                 implementation: Union[Type[T], Callable[[], T], T],
                 lifetime: ServiceLifetime = ServiceLifetime.SINGLETON) -> None:
        """Register a service with the container."""
        registration = ServiceRegistration(service_type, implementation, lifetime)
        with self._lock:
            self._services[service_type] = registration
        logger.debug(
            f"Registered {_type_name(service_type)} with {registration.lifetime.name} lifetime")

    def register_instance(self, service_type: Type[T], instance: T) -> None:
        """Register a specific instance as a singleton."""
        registration = ServiceRegistration(
            service_type, instance, ServiceLifetime.SINGLETON, instance=instance)
        with self._lock:
            self._services[service_type] = registration
        logger.debug(f"Registered instance of {_type_name(service_type)}")

    def resolve(self, service_type: Type[T]) -> T:
        """Resolve a service instance."""
        with self._lock:
            if service_type in self._resolution_stack:
                cycle = " -> ".join([_type_name(t) for t in self._resolution_stack] +
                                    [_type_name(service_type)])
                raise CircularDependencyException(
                    f"Circular dependency detected: {cycle}")

            registration = self._services.get(service_type)
            if registration is None:
                raise ServiceNotRegisteredException(
                    f"Service {_type_name(service_type)} is not registered")

            if registration.lifetime == ServiceLifetime.SINGLETON and registration.has_instance:
                return registration.instance  # type: ignore[no-any-return]

            self._resolution_stack.append(service_type)
            try:
                instance = self._create_instance(registration)
            except (CircularDependencyException, ServiceNotRegisteredException):
                raise
            except Exception as e:
                raise ServiceResolutionException(
                    f"Failed to resolve {_type_name(service_type)}: {e}") from e
            finally:
                self._resolution_stack.pop()

            if registration.lifetime == ServiceLifetime.SINGLETON:
                registration.instance = instance
            return instance  # type: ignore[no-any-return]

    def try_resolve(self, service_type: Type[T]) -> Optional[T]:
        """Try to resolve a service instance without raising exceptions."""
        try:
            return self.resolve(service_type)
        except (ServiceNotRegisteredException, ServiceResolutionException, CircularDependencyException):
            return None

    def is_registered(self, service_type: Type[Any]) -> bool:
        """Check if a service type is registered."""
        return service_type in self._services

    def get_registrations(self) -> Dict[Type[Any], ServiceRegistration]:
        """Get all service registrations (for diagnostics)."""
        with self._lock:
            return self._services.copy()

    def _create_instance(self, registration: ServiceRegistration) -> Any:
        """Create an instance from a service registration."""
        implementation = registration.implementation
        registration.factory_calls += 1

        if inspect.isclass(implementation):
            return implementation(**self._constructor_arguments(implementation))

        # Factory function
        return implementation()

    def _constructor_arguments(self, implementation_class: Type[Any]) -> Dict[str, Any]:
        """Resolve constructor parameters from their type hints."""
        constructor = implementation_class.__init__
        if constructor is object.__init__:
            return {}

        signature = inspect.signature(constructor)
        type_hints = get_type_hints(constructor)
        arguments: Dict[str, Any] = {}

        for param_name, param in signature.parameters.items():
            if param_name == 'self' or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            param_type = _unwrap_optional(type_hints.get(param_name))
            if param_type is not None and self.is_registered(param_type):
                arguments[param_name] = self.resolve(param_type)
            elif param.default is not inspect.Parameter.empty:
                arguments[param_name] = param.default
            else:
                raise ServiceResolutionException(
                    f"Cannot resolve parameter '{param_name}' of "
                    f"{implementation_class.__name__}")

        return arguments


def _unwrap_optional(param_type: Any) -> Any:
    """Return T for Optional[T], otherwise the type unchanged."""
    if getattr(param_type, '__origin__', None) is Union:
        args = [arg for arg in param_type.__args__ if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return param_type


def _type_name(service_type: Any) -> str:
    return getattr(service_type, '__name__', repr(service_type))
