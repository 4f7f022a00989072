"""Abstract bases for the daemon-side inputs the poller reads.

Architectural rules:
    1. Sources only fetch; they never interpret status fields.
    2. Every read is asynchronous and must not block the event loop.
    3. Sources may raise on failure.  The poller owns the defaults.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StatusSource(ABC):
    """Provides the daemon's raw status document."""

    @abstractmethod
    async def read(self) -> str | None:
        """Return the status text, or None if the daemon has not written one."""
        ...


class ServiceRegistry(ABC):
    """Provides a snapshot of the process supervisor's service table."""

    @abstractmethod
    async def query(self, service_name: str) -> dict[str, Any]:
        """Return instance metadata keyed by service name."""
        ...


class TemperatureSensor(ABC):
    """Provides a raw fallback temperature reading in milli-degrees."""

    @abstractmethod
    async def read(self) -> str:
        """Return the reading as plain text."""
        ...


def is_service_running(snapshot: dict[str, Any] | None, service_name: str) -> bool:
    """True iff *service_name* has at least one instance in *snapshot*."""
    if not isinstance(snapshot, dict):
        return False
    service = snapshot.get(service_name)
    if not isinstance(service, dict):
        return False
    instances = service.get("instances")
    return isinstance(instances, dict) and len(instances) > 0
