"""
Consumer-side listener interface.

The bridge tells the consumer which provider ids exist through a
:class:`TreeExplorerListener`. A real deployment implements it as an RPC
proxy; :class:`treebridge.transport.loopback.LoopbackTransport` implements it
in-process.
"""

from abc import ABC, abstractmethod


class TreeExplorerListener(ABC):
    """Receives provider lifecycle notifications from the bridge."""

    @abstractmethod
    def provider_registered(self, provider_id: str) -> None:
        """A provider with this id can now be resolved."""
        pass

    def provider_unregistered(self, provider_id: str) -> None:
        """The provider was removed. Optional; the default does nothing."""
        pass
