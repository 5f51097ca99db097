"""
Provider registry.

Holds the providers currently registered with a bridge, keyed by provider
id. Registration notifies the consumer-side listener and returns a
:class:`Disposable` whose disposal unregisters the provider and drops its
identity table.
"""

from treebridge.base.errors import DuplicateProviderError, ProviderNotFound
from treebridge.base.lifecycle import Disposable
from treebridge.providers.base import TreeNodeProvider
from treebridge.registry.identity_table import NodeIdentityTable
from treebridge.transport.base import TreeExplorerListener
from treebridge.utils.logger import get_logger

logger = get_logger("registry")


class ProviderRegistry:
    """Registered tree node providers. Duplicate ids are rejected."""

    def __init__(
        self,
        identity_table: NodeIdentityTable,
        listener: TreeExplorerListener | None = None,
    ):
        self._identity_table = identity_table
        self._listener = listener
        self._providers: dict[str, TreeNodeProvider] = {}

    def register(self, provider_id: str, provider: TreeNodeProvider) -> Disposable:
        """
        Register a provider under ``provider_id``.

        Args:
            provider_id: Unique id, also used by the consumer to address calls
            provider: Provider implementation

        Returns:
            Handle that unregisters the provider when disposed

        Raises:
            DuplicateProviderError: If the id is already registered
            Exception: Whatever the listener raises; the provider is not registered
        """
        if provider_id in self._providers:
            raise DuplicateProviderError(provider_id)

        self._providers[provider_id] = provider
        if self._listener is not None:
            try:
                self._listener.provider_registered(provider_id)
            except Exception:
                del self._providers[provider_id]
                logger.error(f"Listener rejected registration of '{provider_id}'; rolled back")
                raise
        logger.key_info(f"Registered tree node provider: {provider_id}")

        # Only removes this instance; a later registration under the same id survives
        def unregister() -> None:
            if self._providers.get(provider_id) is provider:
                self.unregister(provider_id)

        return Disposable(unregister)

    def unregister(self, provider_id: str) -> None:
        """Remove a provider and its identity table. Unknown ids are ignored."""
        if self._providers.pop(provider_id, None) is None:
            return
        self._identity_table.discard(provider_id)
        if self._listener is not None:
            self._listener.provider_unregistered(provider_id)
        logger.info(f"Unregistered tree node provider: {provider_id}")

    def lookup(self, provider_id: str) -> TreeNodeProvider | None:
        return self._providers.get(provider_id)

    def require(self, provider_id: str) -> TreeNodeProvider:
        """Like :meth:`lookup` but raises :class:`ProviderNotFound`."""
        provider = self._providers.get(provider_id)
        if provider is None:
            raise ProviderNotFound(provider_id)
        return provider

    def provider_ids(self) -> list[str]:
        return list(self._providers)

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)
