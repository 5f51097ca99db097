"""
Node identity table.

Maps bridge-issued node identities back to the provider's opaque external
nodes. The table is an arena: identities are indexes handed to the consumer,
external nodes stay here.

Each provider has at most one current table. A successful root resolution
replaces it wholesale, which invalidates every identity issued from the
previous table. Identities come from one counter shared by all providers,
so no two internal nodes ever share an id.
"""

import itertools
from collections.abc import Iterable
from typing import Any

from treebridge.base.nodes import InternalNode, NodeDescription


class NodeMap:
    """One generation of a provider's identity table."""

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        self._nodes: dict[int, Any] = {}

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: int, default: Any = None) -> Any:
        return self._nodes.get(node_id, default)

    def _store(self, node_id: int, external_node: Any) -> None:
        self._nodes[node_id] = external_node


class NodeIdentityTable:
    """Per-provider identity tables with globally unique identities.

    Example:
        >>> table = NodeIdentityTable()
        >>> root = table.install_root("files", {"label": "root"})
        >>> table.get("files", root.id)
        {'label': 'root'}
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._tables: dict[str, NodeMap] = {}

    def reset(self, provider_id: str) -> NodeMap:
        """Replace the provider's table with an empty one."""
        node_map = NodeMap(provider_id)
        self._tables[provider_id] = node_map
        return node_map

    def put(
        self,
        provider_id: str,
        external_node: Any,
        description: NodeDescription | None = None,
        *,
        node_map: NodeMap | None = None,
    ) -> InternalNode:
        """Allocate a fresh identity for ``external_node`` and store it.

        Args:
            provider_id: Owning provider
            external_node: Opaque provider node
            description: Display fields to copy onto the wrapper
            node_map: Table generation to write into; defaults to the current
                one, which is created if the provider has none yet

        Returns:
            The new InternalNode
        """
        if node_map is None:
            node_map = self._tables.get(provider_id)
            if node_map is None:
                node_map = self.reset(provider_id)
        node_id = next(self._ids)
        node_map._store(node_id, external_node)
        return InternalNode.wrap(node_id, provider_id, description or NodeDescription())

    def put_all(
        self,
        provider_id: str,
        nodes: Iterable[tuple[Any, NodeDescription]],
        *,
        node_map: NodeMap | None = None,
    ) -> list[InternalNode]:
        """Wrap several nodes in order."""
        return [
            self.put(provider_id, node, description, node_map=node_map)
            for node, description in nodes
        ]

    def install_root(
        self, provider_id: str, external_root: Any, description: NodeDescription | None = None
    ) -> InternalNode:
        """Build a new table holding only the root, then publish it.

        The new table becomes visible only once the root is in it, so no
        concurrent lookup can observe an empty freshly reset table.
        """
        node_map = NodeMap(provider_id)
        root = self.put(provider_id, external_root, description, node_map=node_map)
        self._tables[provider_id] = node_map
        return root

    def current(self, provider_id: str) -> NodeMap | None:
        """The provider's current table generation, if it was ever rooted."""
        return self._tables.get(provider_id)

    def get(self, provider_id: str, node_id: int, default: Any = None) -> Any:
        """Look up the external node for ``node_id``.

        Never-rooted providers, stale identities and unknown identities all
        return ``default``.
        """
        node_map = self._tables.get(provider_id)
        if node_map is None:
            return default
        return node_map.get(node_id, default)

    def contains(self, provider_id: str, node_id: int) -> bool:
        """Whether ``node_id`` is live in the provider's current table."""
        node_map = self._tables.get(provider_id)
        return node_map is not None and node_id in node_map

    def discard(self, provider_id: str) -> None:
        """Forget the provider's table entirely."""
        self._tables.pop(provider_id, None)
