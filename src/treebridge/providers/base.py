"""
Abstract base class for tree node providers.

A provider owns tree-shaped data and hands the bridge opaque external nodes.
The bridge never inspects those nodes beyond the optional description hooks
below, whose defaults read a few well-known fields.

Both required operations may be written as plain methods or coroutines; the
bridge awaits whichever it gets.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from treebridge.base.nodes import ClickCommand, NodeDescription

T = TypeVar("T")

_MISSING = object()


def _read_field(node: Any, *names: str) -> Any:
    """Return the first present field among ``names`` from a mapping or object."""
    for name in names:
        if isinstance(node, Mapping):
            if name in node:
                return node[name]
        else:
            value = getattr(node, name, _MISSING)
            if value is not _MISSING:
                return value
    return None


async def maybe_await(value: T) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


class TreeNodeProvider(ABC):
    """
    Source of tree nodes for one tree explorer.

    Example:
        >>> class FileTreeProvider(TreeNodeProvider):
        ...     async def provide_root_node(self):
        ...         return {"label": "/", "path": "/"}
        ...
        ...     async def resolve_children(self, node):
        ...         return [{"label": p.name, "path": p} for p in Path(node["path"]).iterdir()]
    """

    @abstractmethod
    def provide_root_node(self) -> Any:
        """
        Produce the root external node.

        Returns:
            The root node, or an awaitable resolving to it
        """
        pass

    @abstractmethod
    def resolve_children(self, node: Any) -> Iterable[Any] | Any:
        """
        Produce the children of an external node.

        Args:
            node: A node previously produced by this provider

        Returns:
            An iterable of child nodes, or an awaitable resolving to one
        """
        pass

    def get_label(self, node: Any) -> str | None:
        label = _read_field(node, "label")
        return None if label is None else str(label)

    def get_has_children(self, node: Any) -> bool:
        has_children = _read_field(node, "has_children", "hasChildren")
        return True if has_children is None else bool(has_children)

    def get_click_command(self, node: Any) -> ClickCommand | str | None:
        return _read_field(node, "click_command", "clickCommand")

    def describe(self, node: Any) -> NodeDescription:
        """Collect the display fields of ``node`` through the hooks above.

        Raises:
            TypeError: If the click command has an unsupported shape
        """
        return NodeDescription(
            label=self.get_label(node),
            has_children=self.get_has_children(node),
            click_command=ClickCommand.coerce(self.get_click_command(node)),
        )
