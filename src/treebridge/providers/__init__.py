"""
Tree node providers.

Providers implement :class:`TreeNodeProvider` and are registered with the
bridge under a provider id.
"""

from treebridge.providers.base import TreeNodeProvider
from treebridge.providers.static_provider import StaticTreeProvider

__all__ = ["StaticTreeProvider", "TreeNodeProvider"]
