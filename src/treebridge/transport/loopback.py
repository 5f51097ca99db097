"""
In-process consumer transport.

:class:`LoopbackTransport` plays the consumer side of the bridge inside one
process. It still encodes every call to JSON and decodes every response, so
the consumer never holds anything but serialized internal nodes, exactly as
it would across a real process boundary.
"""

import itertools
from typing import TYPE_CHECKING, Any

from treebridge.base.errors import TransportError, error_from_payload
from treebridge.base.nodes import InternalNode
from treebridge.transport.base import TreeExplorerListener
from treebridge.transport.rpc import BridgeRpcServer, RpcMethod, RpcRequest, RpcResponse
from treebridge.utils.logger import get_logger

if TYPE_CHECKING:
    from treebridge.bridge import TreeExplorerBridge

logger = get_logger("transport")


class LoopbackTransport(TreeExplorerListener):
    """Consumer-side proxy talking to a :class:`BridgeRpcServer` in the same process.

    Example:
        >>> bridge, transport = LoopbackTransport.create()
        >>> bridge.register_tree_node_provider("files", provider)
        >>> root = await transport.provide_root_node("files")
    """

    def __init__(self, server: BridgeRpcServer | None = None):
        self._server = server
        self._call_ids = itertools.count(1)
        self.provider_ids: set[str] = set()

    @classmethod
    def create(cls, **bridge_kwargs: Any) -> tuple["TreeExplorerBridge", "LoopbackTransport"]:
        """Build a bridge wired to a new loopback transport."""
        from treebridge.bridge import TreeExplorerBridge

        transport = cls()
        bridge = TreeExplorerBridge(listener=transport, **bridge_kwargs)
        transport.connect(BridgeRpcServer(bridge))
        return bridge, transport

    def connect(self, server: BridgeRpcServer) -> None:
        self._server = server

    def provider_registered(self, provider_id: str) -> None:
        self.provider_ids.add(provider_id)

    def provider_unregistered(self, provider_id: str) -> None:
        self.provider_ids.discard(provider_id)

    async def _call(self, method: RpcMethod, provider_id: str, node: InternalNode | None = None) -> Any:
        if self._server is None:
            raise TransportError("Transport is not connected.", code="NotConnected")

        call_id = next(self._call_ids)
        request = RpcRequest(call_id=call_id, method=method.value, provider_id=provider_id, node=node)
        raw_response = await self._server.dispatch(request.model_dump_json())
        response = RpcResponse.model_validate_json(raw_response)

        if response.call_id is not None and response.call_id != call_id:
            raise TransportError(
                f"Response #{response.call_id} does not match call #{call_id}.",
                code="CorrelationError",
                provider_id=provider_id,
            )
        if response.error is not None:
            logger.debug(f"Call #{call_id} {method.value} rejected: {response.error.get('code')}")
            raise error_from_payload(response.error)
        return response.result

    async def provide_root_node(self, provider_id: str) -> InternalNode:
        result = await self._call(RpcMethod.PROVIDE_ROOT_NODE, provider_id)
        return InternalNode.from_wire(result)

    async def resolve_children(self, provider_id: str, node: InternalNode) -> list[InternalNode]:
        result = await self._call(RpcMethod.RESOLVE_CHILDREN, provider_id, node)
        return [InternalNode.from_wire(child) for child in result]

    async def execute_command(self, provider_id: str, node: InternalNode) -> None:
        await self._call(RpcMethod.EXECUTE_COMMAND, provider_id, node)
