"""Error Taxonomy - Structured Failures for Cross-Process Tree Calls

This module defines the exception hierarchy used throughout treebridge. Every
failure that can reach a consumer derives from :class:`BridgeError` and carries
a stable ``code`` plus the structured fields needed to describe the failure
without leaking provider internals across the process boundary.

Error Categories:
    - **ProviderNotFound**: No provider registered under the requested id
    - **ProviderResolutionFailure**: The provider's root or children operation failed
    - **CommandExecutionFailure**: The command bound to a node failed when dispatched
    - **StaleNodeReference**: A node identity is not present in the current table

Registry-level problems (duplicate registration, unknown commands) derive from
:class:`RegistryError` and are raised to the registering code, not to consumers.

Errors are serialized with :meth:`BridgeError.to_payload` when crossing the
transport and rebuilt on the consumer side with :func:`error_from_payload`.
The original provider exception is kept only as ``__cause__`` on the host
side; it is never part of the payload.

.. seealso::
   :mod:`treebridge.transport.rpc` : Payload encoding on the wire
   :class:`ResolutionPhase` : Phase tags for resolution failures
"""

from enum import Enum
from typing import Any


class ResolutionPhase(str, Enum):
    """Phase of a provider call that failed."""

    ROOT = "root"
    CHILDREN = "children"


class FrameworkError(Exception):
    """Base exception for all treebridge errors."""

    pass


class RegistryError(FrameworkError):
    """Exception for registry-related errors.

    Raised when providers or commands are registered twice, or when a command
    lookup fails inside the command registry.
    """

    pass


class DuplicateProviderError(RegistryError):
    """A provider id is already registered."""

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        super().__init__(f"A TreeNodeProvider with id '{provider_id}' is already registered.")


class CommandNotFoundError(RegistryError):
    """No command registered under the given name."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Command '{command}' not found.")


class ConfigurationError(FrameworkError):
    """Exception for invalid configuration values."""

    pass


class BridgeError(FrameworkError):
    """Base class for failures returned to a consumer as a rejected call.

    :param message: Human-readable, provider-neutral description
    :type message: str
    :param provider_id: Provider the call was addressed to
    :type provider_id: Optional[str]

    Subclasses set ``code`` to a stable identifier that survives serialization.
    """

    code: str = "BridgeError"

    def __init__(self, message: str, provider_id: str | None = None, **fields: Any):
        super().__init__(message)
        self.message = message
        self.provider_id = provider_id
        self.fields = fields

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict for the transport."""
        payload = {"code": self.code, "message": self.message, "provider_id": self.provider_id}
        payload.update(self.fields)
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ProviderNotFound(BridgeError):
    """No provider is registered under the requested id.

    Surfaced immediately; no provider operation is invoked.
    """

    code = "ProviderNotFound"

    def __init__(self, provider_id: str):
        super().__init__(
            f"No TreeNodeProvider with id '{provider_id}' registered.", provider_id=provider_id
        )

    @classmethod
    def _from_fields(cls, payload: dict[str, Any]) -> "ProviderNotFound":
        return cls(payload["provider_id"])


class ProviderResolutionFailure(BridgeError):
    """The provider's root or children operation raised or rejected.

    Only the provider id and the phase are exposed. The provider's own error
    is available host-side as ``__cause__``.
    """

    code = "ProviderResolutionFailure"

    _MESSAGES = {
        ResolutionPhase.ROOT: "TreeNodeProvider '{provider_id}' failed to provide root node.",
        ResolutionPhase.CHILDREN: "TreeNodeProvider '{provider_id}' failed to resolve children.",
    }

    def __init__(self, provider_id: str, phase: ResolutionPhase | str):
        phase = ResolutionPhase(phase)
        super().__init__(
            self._MESSAGES[phase].format(provider_id=provider_id),
            provider_id=provider_id,
            phase=phase.value,
        )
        self.phase = phase

    @classmethod
    def _from_fields(cls, payload: dict[str, Any]) -> "ProviderResolutionFailure":
        return cls(payload["provider_id"], payload["phase"])


class CommandExecutionFailure(BridgeError):
    """The click command bound to a node failed when dispatched."""

    code = "CommandExecutionFailure"

    def __init__(self, command: str, provider_id: str):
        super().__init__(
            f"Failed to execute command '{command}' provided by TreeNodeProvider '{provider_id}'.",
            provider_id=provider_id,
            command=command,
        )
        self.command = command

    @classmethod
    def _from_fields(cls, payload: dict[str, Any]) -> "CommandExecutionFailure":
        return cls(payload["command"], payload["provider_id"])


class StaleNodeReference(BridgeError):
    """A node identity is unknown to the provider's current identity table.

    Raised for identities from a replaced table, identities that were never
    issued, and providers that were never rooted.
    """

    code = "StaleNodeReference"

    def __init__(self, provider_id: str, node_id: int):
        super().__init__(
            f"Node {node_id} is not known to TreeNodeProvider '{provider_id}'; "
            f"the tree may have been refreshed.",
            provider_id=provider_id,
            node_id=node_id,
        )
        self.node_id = node_id

    @classmethod
    def _from_fields(cls, payload: dict[str, Any]) -> "StaleNodeReference":
        return cls(payload["provider_id"], payload["node_id"])


class TransportError(BridgeError):
    """Transport-level failure: malformed request, unknown method or internal error."""

    code = "TransportError"

    def __init__(self, message: str, code: str | None = None, provider_id: str | None = None):
        super().__init__(message, provider_id=provider_id)
        if code:
            self.code = code

    @classmethod
    def _from_fields(cls, payload: dict[str, Any]) -> "TransportError":
        return cls(payload["message"], code=payload["code"], provider_id=payload.get("provider_id"))


_ERROR_TYPES: dict[str, type[BridgeError]] = {
    cls.code: cls
    for cls in (ProviderNotFound, ProviderResolutionFailure, CommandExecutionFailure, StaleNodeReference)
}


def error_from_payload(payload: dict[str, Any]) -> BridgeError:
    """Rebuild a typed error from its transport payload.

    Unknown codes become a :class:`TransportError` that keeps the code and message.
    """
    error_class = _ERROR_TYPES.get(payload.get("code", ""))
    try:
        if error_class is not None:
            return error_class._from_fields(payload)
    except (KeyError, ValueError):
        pass  # Incomplete payload, fall through to the generic error
    return TransportError(
        payload.get("message", "Unknown bridge error"),
        code=payload.get("code"),
        provider_id=payload.get("provider_id"),
    )
