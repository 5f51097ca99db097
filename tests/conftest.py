"""
Pytest configuration and shared test utilities.

This module provides shared fixtures and fake providers for all treebridge tests.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from treebridge.bridge import TreeExplorerBridge
from treebridge.providers.base import TreeNodeProvider
from treebridge.services.commands import CommandRegistry
from treebridge.transport.base import TreeExplorerListener
from treebridge.utils.config import reset_config

# ===================================================================
# Fake Providers
# ===================================================================


class FakeTreeProvider(TreeNodeProvider):
    """Provider over an explicit ``label -> children`` mapping.

    Records every call so tests can assert which provider operations ran.

    Args:
        root: Root node returned by provide_root_node
        children: Maps a node label to the list of its child nodes
    """

    def __init__(self, root, children=None):
        self.root = root
        self.children = children or {}
        self.root_calls = 0
        self.children_calls = []
        self.root_error: Exception | None = None
        self.children_error: Exception | None = None

    async def provide_root_node(self):
        self.root_calls += 1
        if self.root_error is not None:
            raise self.root_error
        return self.root

    async def resolve_children(self, node):
        self.children_calls.append(node)
        if self.children_error is not None:
            raise self.children_error
        label = node["label"] if node is not None else None
        return self.children.get(label, [])


class GatedTreeProvider(FakeTreeProvider):
    """FakeTreeProvider whose calls suspend until ``release()`` is called."""

    def __init__(self, root, children=None):
        super().__init__(root, children)
        self.gate = asyncio.Event()

    def release(self):
        self.gate.set()

    async def provide_root_node(self):
        await self.gate.wait()
        return await super().provide_root_node()

    async def resolve_children(self, node):
        await self.gate.wait()
        return await super().resolve_children(node)


def make_files_provider() -> FakeTreeProvider:
    """The ``files`` tree: root with children ``a`` and ``b``."""
    return FakeTreeProvider(
        {"label": "root"},
        {"root": [{"label": "a"}, {"label": "b"}]},
    )


# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test in an empty directory with no cached configuration."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def files_provider():
    return make_files_provider()


@pytest.fixture
def listener():
    return MagicMock(spec=TreeExplorerListener)


@pytest.fixture
def commands():
    return CommandRegistry()


@pytest.fixture
def bridge(listener, commands):
    return TreeExplorerBridge(listener=listener, commands=commands, stale_node_policy="fail")
