"""Bridge services: resolution, command dispatch and the command registry."""

from .commands import CommandExecutor, CommandRegistry
from .dispatcher import CommandDispatcher
from .resolution import ResolutionService

__all__ = ["CommandDispatcher", "CommandExecutor", "CommandRegistry", "ResolutionService"]
