"""Provider registry and node identity table."""

from .identity_table import NodeIdentityTable, NodeMap
from .provider_registry import ProviderRegistry

__all__ = ["NodeIdentityTable", "NodeMap", "ProviderRegistry"]
