from __future__ import annotations

from typing import TYPE_CHECKING, List

from hybrid.Foundation.ServiceProvider import AggregateServiceProvider

if TYPE_CHECKING:
    from hybrid.Foundation.ServiceProvider import ProviderReference


class CoreServiceProvider(AggregateServiceProvider):
    """Groups the providers every Hybrid application registers eagerly."""

    providers: List[ProviderReference] = []
