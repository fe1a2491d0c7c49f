"""
Lifecycle interfaces for components that own external resources.

Components registered with the container implement these so that the
startup sequence can open and release their resources in order.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IStartable(ABC):
    """Interface for components that can be started."""

    @abstractmethod
    async def start(self) -> None:
        """
        Start the component.

        Raises:
            Exception: If the component fails to start.
        """
        pass


class IStoppable(ABC):
    """Interface for components that can be stopped."""

    @abstractmethod
    async def stop(self) -> None:
        """
        Stop the component and release its resources.

        Stopping a component that was never started must be a no-op.
        """
        pass


class IHealthCheckable(ABC):
    """Interface for components that can report their health status."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """
        Check the health status of the component.

        Returns:
            Dict with 'healthy' (bool), 'status' (str) and 'details' (dict).
        """
        pass


class IComponent(IStartable, IStoppable, IHealthCheckable):
    """Component with a full start/stop/health lifecycle."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the component name."""
        pass
