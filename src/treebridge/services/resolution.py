"""
Resolution service.

Runs root and children fetches against registered providers, assigns
identities through the node identity table and returns internal nodes ready
for the transport.

Provider failures never escape as-is: they are logged with their traceback
and re-raised as :class:`ProviderResolutionFailure` tagged with the provider
id and phase, with the original exception chained as ``__cause__``.
"""

from typing import Any

from treebridge.base.errors import (
    ProviderNotFound,
    ProviderResolutionFailure,
    ResolutionPhase,
    StaleNodeReference,
)
from treebridge.base.nodes import InternalNode, StaleNodePolicy
from treebridge.providers.base import TreeNodeProvider, maybe_await
from treebridge.registry.identity_table import NodeIdentityTable, NodeMap
from treebridge.registry.provider_registry import ProviderRegistry
from treebridge.utils.logger import get_logger

logger = get_logger("resolution")

_MISSING = object()


def lookup_external_node(
    identity_table: NodeIdentityTable,
    provider_id: str,
    node: InternalNode,
    policy: StaleNodePolicy,
) -> tuple[Any, NodeMap | None]:
    """Find the external node behind ``node`` in the provider's current table.

    Returns:
        The external node (``None`` for a forwarded miss) and the table
        generation it was found in

    Raises:
        StaleNodeReference: On a miss under the ``fail`` policy
    """
    node_map = identity_table.current(provider_id)
    external_node = _MISSING if node_map is None else node_map.get(node.id, _MISSING)
    if external_node is _MISSING:
        if policy is StaleNodePolicy.FAIL:
            logger.warning(f"Rejected stale node {node.id} for provider '{provider_id}'")
            raise StaleNodeReference(provider_id, node.id)
        logger.warning(f"Forwarding unknown node {node.id} to provider '{provider_id}' as None")
        external_node = None
    return external_node, node_map


class ResolutionService:
    """Root and children resolution for registered providers."""

    def __init__(
        self,
        registry: ProviderRegistry,
        identity_table: NodeIdentityTable,
        stale_node_policy: StaleNodePolicy = StaleNodePolicy.FAIL,
    ):
        self._registry = registry
        self._identity_table = identity_table
        self.stale_node_policy = StaleNodePolicy(stale_node_policy)

    def _ensure_still_registered(self, provider_id: str, provider: TreeNodeProvider) -> None:
        # The provider may have been unregistered while its call was suspended
        if self._registry.lookup(provider_id) is not provider:
            logger.warning(f"Provider '{provider_id}' was unregistered during resolution")
            raise ProviderNotFound(provider_id)

    async def provide_root(self, provider_id: str) -> InternalNode:
        """
        Fetch the provider's root node and start a new identity table for it.

        The previous table, if any, stays valid until the new root has been
        produced; a failed call leaves it untouched.

        Args:
            provider_id: Registered provider id

        Returns:
            The root InternalNode

        Raises:
            ProviderNotFound: If no provider has this id (no provider call is made),
                or it was unregistered while the call was in flight
            ProviderResolutionFailure: If the provider fails (phase ``root``)
        """
        provider = self._registry.require(provider_id)

        try:
            external_root = await maybe_await(provider.provide_root_node())
            description = provider.describe(external_root)
        except Exception as exc:
            self._ensure_still_registered(provider_id, provider)
            logger.error(f"Provider '{provider_id}' failed to provide root node: {exc}", exc_info=True)
            raise ProviderResolutionFailure(provider_id, ResolutionPhase.ROOT) from exc

        self._ensure_still_registered(provider_id, provider)

        root = self._identity_table.install_root(provider_id, external_root, description)
        logger.success(f"Published new tree for '{provider_id}' with root node {root.id}")
        return root

    async def resolve_children(self, provider_id: str, node: InternalNode) -> list[InternalNode]:
        """
        Fetch the children of a previously issued node.

        Children are registered in the table generation that held the parent
        when the call started, and returned in the provider's order.

        Args:
            provider_id: Registered provider id
            node: Node previously returned by this bridge

        Returns:
            One InternalNode per child

        Raises:
            ProviderNotFound: If no provider has this id, or it was unregistered
                while the call was in flight
            StaleNodeReference: If the node is unknown and the policy is ``fail``
            ProviderResolutionFailure: If the provider fails (phase ``children``)
        """
        provider = self._registry.require(provider_id)
        external_node, node_map = lookup_external_node(
            self._identity_table, provider_id, node, self.stale_node_policy
        )

        try:
            children = await maybe_await(provider.resolve_children(external_node))
            described = [(child, provider.describe(child)) for child in children]
        except Exception as exc:
            self._ensure_still_registered(provider_id, provider)
            logger.error(
                f"Provider '{provider_id}' failed to resolve children of node {node.id}: {exc}",
                exc_info=True,
            )
            raise ProviderResolutionFailure(provider_id, ResolutionPhase.CHILDREN) from exc

        self._ensure_still_registered(provider_id, provider)

        if node_map is None:
            # Forwarded call on a never-rooted provider: the children get ids
            # but no table is published until a root resolution succeeds
            node_map = NodeMap(provider_id)
        internal_children = self._identity_table.put_all(provider_id, described, node_map=node_map)
        logger.debug(
            f"Resolved {len(internal_children)} children of node {node.id} for '{provider_id}'"
        )
        return internal_children
