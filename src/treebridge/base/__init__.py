"""Base types: errors, node wrappers and disposal handles."""

from .errors import (
    BridgeError,
    CommandExecutionFailure,
    CommandNotFoundError,
    ConfigurationError,
    DuplicateProviderError,
    FrameworkError,
    ProviderNotFound,
    ProviderResolutionFailure,
    RegistryError,
    ResolutionPhase,
    StaleNodeReference,
    TransportError,
    error_from_payload,
)
from .lifecycle import Disposable
from .nodes import ClickCommand, InternalNode, NodeDescription, StaleNodePolicy

__all__ = [
    "BridgeError",
    "ClickCommand",
    "CommandExecutionFailure",
    "CommandNotFoundError",
    "ConfigurationError",
    "Disposable",
    "DuplicateProviderError",
    "FrameworkError",
    "InternalNode",
    "NodeDescription",
    "ProviderNotFound",
    "ProviderResolutionFailure",
    "RegistryError",
    "ResolutionPhase",
    "StaleNodePolicy",
    "StaleNodeReference",
    "TransportError",
    "error_from_payload",
]
