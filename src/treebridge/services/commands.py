"""
Command registry.

An in-process registry of named command handlers. The bridge only needs an
object with ``execute_command(name, *args)``; this registry is the default
one and the one the CLI uses.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from treebridge.base.errors import CommandNotFoundError, RegistryError
from treebridge.base.lifecycle import Disposable
from treebridge.providers.base import maybe_await
from treebridge.utils.logger import get_logger

logger = get_logger("commands")


class CommandExecutor(ABC):
    """Anything that can run a named command with arguments."""

    @abstractmethod
    async def execute_command(self, command: str, *args: Any) -> Any:
        """
        Run ``command`` with ``args``.

        Raises:
            Exception: Whatever the command raises
        """
        pass


class CommandRegistry(CommandExecutor):
    """Named command handlers; handlers may be plain functions or coroutines.

    Example:
        >>> commands = CommandRegistry()
        >>> handle = commands.register_command("open", lambda node: print(node["label"]))
        >>> await commands.execute_command("open", {"label": "README.md"})
    """

    def __init__(self):
        self._commands: dict[str, Callable[..., Any]] = {}

    def register_command(self, command: str, handler: Callable[..., Any]) -> Disposable:
        """
        Register ``handler`` under ``command``.

        Returns:
            Handle that removes the command when disposed

        Raises:
            RegistryError: If the command name is already taken
        """
        if command in self._commands:
            raise RegistryError(f"Command '{command}' already exists.")
        self._commands[command] = handler
        logger.debug(f"Registered command: {command}")

        def unregister() -> None:
            if self._commands.get(command) is handler:
                del self._commands[command]

        return Disposable(unregister)

    def get_commands(self) -> list[str]:
        return sorted(self._commands)

    async def execute_command(self, command: str, *args: Any) -> Any:
        """
        Run a registered command.

        Raises:
            CommandNotFoundError: If no handler is registered under ``command``
        """
        handler = self._commands.get(command)
        if handler is None:
            raise CommandNotFoundError(command)
        return await maybe_await(handler(*args))
