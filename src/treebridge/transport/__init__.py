"""
Transport layer between the bridge and its consumer.

Only the listener interface is imported eagerly; import the RPC codec and
the loopback transport from their modules.
"""

from treebridge.transport.base import TreeExplorerListener

__all__ = ["TreeExplorerListener"]
