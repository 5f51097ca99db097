"""
Command dispatcher.

Runs the click command bound to an internal node, passing the node's
external counterpart as the last argument.
"""

from treebridge.base.errors import CommandExecutionFailure
from treebridge.base.nodes import InternalNode, StaleNodePolicy
from treebridge.providers.base import maybe_await
from treebridge.registry.identity_table import NodeIdentityTable
from treebridge.services.commands import CommandExecutor
from treebridge.services.resolution import lookup_external_node
from treebridge.utils.logger import get_logger

logger = get_logger("dispatcher")


class CommandDispatcher:
    """Executes node click commands through a command executor."""

    def __init__(
        self,
        identity_table: NodeIdentityTable,
        commands: CommandExecutor,
        stale_node_policy: StaleNodePolicy = StaleNodePolicy.FAIL,
    ):
        self._identity_table = identity_table
        self._commands = commands
        self.stale_node_policy = StaleNodePolicy(stale_node_policy)

    async def execute_node_command(self, provider_id: str, node: InternalNode) -> None:
        """
        Run the node's click command, if it has one.

        The command receives its own arguments followed by the external node.
        Nodes without a click command resolve immediately with no side effect.
        The provider id is only checked through the identity table lookup.

        Raises:
            StaleNodeReference: If the node is unknown and the policy is ``fail``
            CommandExecutionFailure: If the command fails
        """
        click_command = node.click_command
        if click_command is None:
            return None

        external_node, _ = lookup_external_node(
            self._identity_table, provider_id, node, self.stale_node_policy
        )

        try:
            await maybe_await(
                self._commands.execute_command(
                    click_command.command, *click_command.arguments, external_node
                )
            )
        except Exception as exc:
            logger.error(
                f"Command '{click_command.command}' for node {node.id} of "
                f"'{provider_id}' failed: {exc}",
                exc_info=True,
            )
            raise CommandExecutionFailure(click_command.command, provider_id) from exc

        logger.debug(f"Executed '{click_command.command}' for node {node.id} of '{provider_id}'")
        return None
