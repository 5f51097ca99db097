"""
Provider serving a fixed tree described as nested mappings.

Each node is a mapping with an optional ``label``, ``click_command`` and
``children`` list::

    label: workspace
    children:
      - label: README.md
        click_command: {command: treebridge.echo, arguments: [README.md]}
      - label: src
        children: []

Useful for demos, the CLI and tests.
"""

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from treebridge.base.errors import ConfigurationError
from treebridge.providers.base import TreeNodeProvider


class StaticTreeProvider(TreeNodeProvider):
    """Serves a nested-mapping tree, optionally with a simulated delay."""

    def __init__(self, tree: Mapping[str, Any], response_delay_ms: int = 0):
        if not isinstance(tree, Mapping):
            raise ConfigurationError("Tree root must be a mapping")
        self._tree = tree
        self._delay = response_delay_ms / 1000.0

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "StaticTreeProvider":
        """Load the tree from a YAML (or JSON) file.

        Raises:
            ConfigurationError: If the file does not hold a mapping
        """
        with open(path) as f:
            try:
                tree = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Error parsing tree file {path}: {e}") from e
        if not isinstance(tree, Mapping):
            raise ConfigurationError(f"Tree file must contain a mapping: {path}")
        return cls(tree, **kwargs)

    async def _simulate_delay(self) -> None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

    async def provide_root_node(self) -> Mapping[str, Any]:
        await self._simulate_delay()
        return self._tree

    async def resolve_children(self, node: Mapping[str, Any]) -> list[Mapping[str, Any]]:
        await self._simulate_delay()
        return list(node.get("children") or [])

    def get_has_children(self, node: Mapping[str, Any]) -> bool:
        return bool(node.get("children"))
