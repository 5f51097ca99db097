"""Node types shared by both sides of the bridge.

External nodes are opaque provider values and have no type here. The bridge
hands consumers :class:`InternalNode` wrappers instead: small pydantic models
that carry an integer identity, the owning provider id and the few display
fields the consumer needs. They serialize to plain JSON-compatible dicts so
they can cross any transport.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StaleNodePolicy(str, Enum):
    """What to do when a node identity is not in the provider's current table."""

    FAIL = "fail"  # raise StaleNodeReference
    FORWARD = "forward"  # pass None to the provider or command


class ClickCommand(BaseModel):
    """Command reference bound to a node, run when the node is activated."""

    model_config = ConfigDict(frozen=True)

    command: str = Field(..., min_length=1, description="Registered command name")
    arguments: tuple[Any, ...] = Field((), description="Positional arguments passed first")

    @classmethod
    def coerce(cls, value: Any) -> "ClickCommand | None":
        """Normalize the shapes providers use for click commands.

        Accepts ``None``, a command name, a mapping with ``command`` and
        optional ``arguments``, a ``(name, *arguments)`` sequence, or a
        ClickCommand.

        Raises:
            TypeError: If the value has none of these shapes
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(command=value)
        if isinstance(value, Mapping):
            return cls(command=value["command"], arguments=tuple(value.get("arguments") or ()))
        if isinstance(value, Sequence) and value and isinstance(value[0], str):
            return cls(command=value[0], arguments=tuple(value[1:]))
        raise TypeError(f"Unsupported click command value: {value!r}")


@dataclass(frozen=True)
class NodeDescription:
    """What a provider says about one of its nodes, gathered before wrapping."""

    label: str | None = None
    has_children: bool = True
    click_command: ClickCommand | None = None


class InternalNode(BaseModel):
    """Bridge-issued wrapper for an external node.

    ``id`` is unique across all providers served by one bridge and is never
    reused. ``provider_id`` is a lookup key only, never a live reference.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    provider_id: str
    label: str | None = None
    has_children: bool = True
    click_command: ClickCommand | None = None

    @classmethod
    def wrap(cls, node_id: int, provider_id: str, description: NodeDescription) -> "InternalNode":
        return cls(
            id=node_id,
            provider_id=provider_id,
            label=description.label,
            has_children=description.has_children,
            click_command=description.click_command,
        )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict for the transport."""
        return self.model_dump(mode="json")

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "InternalNode":
        return cls.model_validate(data)
