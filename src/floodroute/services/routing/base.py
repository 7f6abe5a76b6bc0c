"""Contract for routing provider implementations."""

from __future__ import annotations

from typing import Protocol, Sequence

from ...models.domain import GeoPoint
from .models import Route


class RoutingProviderError(RuntimeError):
    """Raised when a provider cannot return a route for the given waypoints."""


class RoutingProvider(Protocol):
    def route(self, waypoints: Sequence[GeoPoint]) -> list[Route]:
        """Return one or more candidate routes through ``waypoints`` in order.

        The first route is the provider's preferred one. Implementations raise
        RoutingProviderError on network failures, timeouts or when no route
        exists.
        """
        ...
