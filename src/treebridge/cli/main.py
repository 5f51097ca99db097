"""Main CLI entry point for treebridge.

Loads a tree file into a :class:`StaticTreeProvider`, registers it with a
bridge and then acts as the consumer: every node shown or activated is
fetched through the loopback transport, one JSON call at a time.

Examples:

\b
    treebridge show workspace.yml
    treebridge show workspace.yml --depth 1
    treebridge activate workspace.yml docs/README.md
"""

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from treebridge import __version__
from treebridge.base.errors import BridgeError, ConfigurationError
from treebridge.base.nodes import InternalNode
from treebridge.providers.static_provider import StaticTreeProvider
from treebridge.services.commands import CommandRegistry
from treebridge.transport.loopback import LoopbackTransport
from treebridge.utils.config import get_config_builder

console = Console()

ECHO_COMMAND = "treebridge.echo"

tree_file_argument = click.argument(
    "tree_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
provider_id_option = click.option(
    "--provider-id", default="static", show_default=True, help="Id to register the tree under"
)
config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (defaults to CONFIG_FILE or ./config.yml)",
)


def _echo(*args: Any) -> None:
    """Built-in command: print the command arguments and the activated node's label."""
    *arguments, node = args
    label = node.get("label") if isinstance(node, Mapping) else node
    line = Text("echo ", style="bold green")
    line.append(" ".join(str(argument) for argument in arguments))
    line.append(f"  ({label})", style="dim")
    console.print(line)


def _node_text(node: InternalNode) -> Text:
    text = Text(node.label if node.label is not None else f"<node {node.id}>")
    if node.click_command is not None:
        text.append(f"  ▶ {node.click_command.command}", style="dim cyan")
    return text


async def _expand(
    transport: LoopbackTransport,
    provider_id: str,
    node: InternalNode,
    branch: Tree,
    depth: int,
    max_depth: int | None,
) -> None:
    if not node.has_children or (max_depth is not None and depth > max_depth):
        return
    for child in await transport.resolve_children(provider_id, node):
        await _expand(transport, provider_id, child, branch.add(_node_text(child)), depth + 1, max_depth)


async def _build_tree(transport: LoopbackTransport, provider_id: str, max_depth: int | None) -> Tree:
    root = await transport.provide_root_node(provider_id)
    tree = Tree(_node_text(root), guide_style="dim")
    await _expand(transport, provider_id, root, tree, 1, max_depth)
    return tree


async def _find_node(transport: LoopbackTransport, provider_id: str, path: str) -> InternalNode:
    node = await transport.provide_root_node(provider_id)
    for segment in [part for part in path.split("/") if part]:
        children = await transport.resolve_children(provider_id, node)
        matches = [child for child in children if child.label == segment]
        if not matches:
            raise click.ClickException(f"No node '{segment}' under '{node.label}'")
        node = matches[0]
    return node


def _open_bridge(tree_file: Path, provider_id: str, config_path: str | None, commands=None):
    if config_path:
        get_config_builder(config_path)
    try:
        provider = StaticTreeProvider.from_file(tree_file)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    bridge, transport = LoopbackTransport.create(commands=commands)
    bridge.register_tree_node_provider(provider_id, provider)
    return bridge, transport


@click.group()
@click.version_option(version=__version__, prog_name="treebridge")
def cli():
    """treebridge - browse provider trees through the bridge protocol.

    Use 'treebridge COMMAND --help' for more information on a specific command.
    """
    pass


@cli.command()
@tree_file_argument
@provider_id_option
@click.option("--depth", type=click.IntRange(min=0), default=None, help="Maximum depth to expand")
@config_option
def show(tree_file: Path, provider_id: str, depth: int | None, config_path: str | None):
    """Render TREE_FILE by resolving it node by node through the bridge."""
    _, transport = _open_bridge(tree_file, provider_id, config_path)
    try:
        tree = asyncio.run(_build_tree(transport, provider_id, depth))
    except BridgeError as e:
        raise click.ClickException(e.message) from e
    console.print(tree)


@cli.command()
@tree_file_argument
@click.argument("node_path", default="")
@provider_id_option
@config_option
def activate(tree_file: Path, node_path: str, provider_id: str, config_path: str | None):
    """Run the click command of the node at NODE_PATH (labels separated by '/')."""
    commands = CommandRegistry()
    commands.register_command(ECHO_COMMAND, _echo)
    _, transport = _open_bridge(tree_file, provider_id, config_path, commands=commands)

    async def run() -> InternalNode:
        node = await _find_node(transport, provider_id, node_path)
        await transport.execute_command(provider_id, node)
        return node

    try:
        node = asyncio.run(run())
    except BridgeError as e:
        raise click.ClickException(e.message) from e

    if node.click_command is None:
        console.print(Text(f"Node '{node.label}' has no click command", style="yellow"))


def main():
    """Entry point for the treebridge CLI."""
    cli()


if __name__ == "__main__":
    main()
