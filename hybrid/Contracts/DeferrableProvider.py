from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List


class DeferrableProvider(ABC):
    """
    Marker for service providers whose registration waits until one of
    their services is requested.

    A deferrable provider must declare every identifier it registers.
    """

    @abstractmethod
    def provides(self) -> List[Any]:
        """Get the services provided by the provider."""
        pass
