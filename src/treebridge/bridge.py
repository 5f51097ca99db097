"""
Tree explorer bridge.

Host-side entry point. Owns the provider registry, the node identity table
and the two services, and exposes the calls a transport forwards from the
consumer.

Example:
    >>> bridge = TreeExplorerBridge(listener=transport, commands=commands)
    >>> handle = bridge.register_tree_node_provider("files", FileTreeProvider())
    >>> root = await bridge.provide_root_node("files")
    >>> children = await bridge.resolve_children("files", root)
    >>> handle.dispose()
"""

from treebridge.base.lifecycle import Disposable
from treebridge.base.nodes import InternalNode, StaleNodePolicy
from treebridge.providers.base import TreeNodeProvider
from treebridge.registry.identity_table import NodeIdentityTable
from treebridge.registry.provider_registry import ProviderRegistry
from treebridge.services.commands import CommandExecutor, CommandRegistry
from treebridge.services.dispatcher import CommandDispatcher
from treebridge.services.resolution import ResolutionService
from treebridge.transport.base import TreeExplorerListener
from treebridge.utils.config import get_config_builder


class TreeExplorerBridge:
    """
    Exposes provider-owned trees to a consumer through integer node identities.

    Args:
        listener: Consumer-side sink for provider registration notifications
        commands: Command executor used for node click commands; a fresh
            :class:`CommandRegistry` when omitted
        stale_node_policy: Behavior for unknown node identities; read from
            ``bridge.stale_node_policy`` in the configuration when omitted
    """

    def __init__(
        self,
        listener: TreeExplorerListener | None = None,
        commands: CommandExecutor | None = None,
        stale_node_policy: StaleNodePolicy | str | None = None,
    ):
        if stale_node_policy is None:
            stale_node_policy = get_config_builder().get_bridge_settings().stale_node_policy
        self.stale_node_policy = StaleNodePolicy(stale_node_policy)

        self.commands = commands if commands is not None else CommandRegistry()
        self.identity_table = NodeIdentityTable()
        self.registry = ProviderRegistry(self.identity_table, listener)
        self._resolution = ResolutionService(self.registry, self.identity_table, self.stale_node_policy)
        self._dispatcher = CommandDispatcher(self.identity_table, self.commands, self.stale_node_policy)

    def register_tree_node_provider(self, provider_id: str, provider: TreeNodeProvider) -> Disposable:
        """Register a provider; dispose the returned handle to remove it."""
        return self.registry.register(provider_id, provider)

    async def provide_root_node(self, provider_id: str) -> InternalNode:
        return await self._resolution.provide_root(provider_id)

    async def resolve_children(self, provider_id: str, node: InternalNode) -> list[InternalNode]:
        return await self._resolution.resolve_children(provider_id, node)

    async def execute_command(self, provider_id: str, node: InternalNode) -> None:
        return await self._dispatcher.execute_node_command(provider_id, node)
