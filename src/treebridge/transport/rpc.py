"""
RPC codec and host-side dispatcher.

Calls cross the process boundary as JSON-encoded :class:`RpcRequest` /
:class:`RpcResponse` pairs correlated by ``call_id``. The host side is a
:class:`BridgeRpcServer`, which decodes a request, routes it to the bridge and
encodes either the result or a structured error. Bridge failures never
escape ``dispatch``: they become the ``error`` member of the response.
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from treebridge.base.errors import BridgeError, TransportError
from treebridge.base.nodes import InternalNode
from treebridge.utils.logger import get_logger

if TYPE_CHECKING:
    from treebridge.bridge import TreeExplorerBridge

logger = get_logger("transport")


class RpcMethod(str, Enum):
    """Methods the consumer can call on the bridge."""

    PROVIDE_ROOT_NODE = "provideRootNode"
    RESOLVE_CHILDREN = "resolveChildren"
    EXECUTE_COMMAND = "executeCommand"


class RpcRequest(BaseModel):
    """One consumer call."""

    call_id: int
    method: str
    provider_id: str
    node: InternalNode | None = None


class RpcResponse(BaseModel):
    """Outcome of one call: ``error`` is set for rejected calls."""

    call_id: int | None = None
    result: Any = None
    error: dict[str, Any] | None = None


def _reject(call_id: int | None, error: BridgeError) -> str:
    return RpcResponse(call_id=call_id, error=error.to_payload()).model_dump_json()


class BridgeRpcServer:
    """Decodes consumer requests and routes them to a bridge."""

    def __init__(self, bridge: "TreeExplorerBridge"):
        self.bridge = bridge
        self._handlers: dict[str, Callable[[RpcRequest], Awaitable[Any]]] = {
            RpcMethod.PROVIDE_ROOT_NODE.value: self._provide_root_node,
            RpcMethod.RESOLVE_CHILDREN.value: self._resolve_children,
            RpcMethod.EXECUTE_COMMAND.value: self._execute_command,
        }

    async def dispatch(self, raw_request: str | bytes) -> str:
        """
        Handle one encoded request.

        Args:
            raw_request: JSON-encoded RpcRequest

        Returns:
            JSON-encoded RpcResponse
        """
        try:
            request = RpcRequest.model_validate_json(raw_request)
        except ValidationError as e:
            logger.warning(f"Rejected malformed request: {e.error_count()} validation error(s)")
            return _reject(None, TransportError("Malformed request.", code="InvalidRequest"))

        handler = self._handlers.get(request.method)
        if handler is None:
            logger.warning(f"Rejected unknown method '{request.method}'")
            return _reject(
                request.call_id,
                TransportError(
                    f"Unknown method '{request.method}'.",
                    code="MethodNotFound",
                    provider_id=request.provider_id,
                ),
            )

        try:
            result = await handler(request)
        except BridgeError as e:
            return _reject(request.call_id, e)
        except Exception:
            logger.exception(f"Unexpected failure handling '{request.method}' #{request.call_id}")
            return _reject(
                request.call_id,
                TransportError(
                    "Internal bridge error.", code="InternalError", provider_id=request.provider_id
                ),
            )

        return RpcResponse(call_id=request.call_id, result=result).model_dump_json()

    @staticmethod
    def _require_node(request: RpcRequest) -> InternalNode:
        if request.node is None:
            raise TransportError(
                f"Method '{request.method}' requires a node.",
                code="InvalidRequest",
                provider_id=request.provider_id,
            )
        return request.node

    async def _provide_root_node(self, request: RpcRequest) -> dict[str, Any]:
        root = await self.bridge.provide_root_node(request.provider_id)
        return root.to_wire()

    async def _resolve_children(self, request: RpcRequest) -> list[dict[str, Any]]:
        children = await self.bridge.resolve_children(request.provider_id, self._require_node(request))
        return [child.to_wire() for child in children]

    async def _execute_command(self, request: RpcRequest) -> None:
        await self.bridge.execute_command(request.provider_id, self._require_node(request))
        return None
