"""treebridge - tree explorer bridge.

Exposes tree-shaped data owned by isolated providers to a consumer in another
process. The consumer only ever sees integer node identities; the provider's
own node values never leave the host side.

This package contains:
- Base types (errors, internal nodes, disposal handles)
- Provider interface and a static tree provider
- Provider registry and node identity table
- Resolution and command dispatch services
- An RPC codec with an in-process loopback transport
- Configuration, logging and the CLI
"""

# Version information
__version__ = "0.3.0"

__all__ = ["__version__"]

# Designed for on-demand imports, e.g. from treebridge.bridge import TreeExplorerBridge
