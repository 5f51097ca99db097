"""Tests for the in-process consumer transport.

These exercise the bridge end to end: every call is encoded, dispatched and
decoded, so the consumer side only ever sees serialized internal nodes.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.conftest import FakeTreeProvider, make_files_provider
from treebridge.base.errors import (
    CommandExecutionFailure,
    ProviderNotFound,
    ProviderResolutionFailure,
    ResolutionPhase,
    StaleNodeReference,
    TransportError,
)
from treebridge.base.nodes import InternalNode
from treebridge.services.commands import CommandRegistry
from treebridge.transport.loopback import LoopbackTransport


@pytest.fixture
def loopback():
    return LoopbackTransport.create(stale_node_policy="fail")


class TestLoopbackTransport:
    """Test consumer-side calls through the loopback transport."""

    def test_registration_is_announced(self, loopback):
        bridge, transport = loopback
        handle = bridge.register_tree_node_provider("files", make_files_provider())
        assert transport.provider_ids == {"files"}

        handle.dispose()
        assert transport.provider_ids == set()

    @pytest.mark.asyncio
    async def test_files_scenario(self, loopback):
        bridge, transport = loopback
        bridge.register_tree_node_provider("files", make_files_provider())

        root = await transport.provide_root_node("files")
        children = await transport.resolve_children("files", root)

        assert isinstance(root, InternalNode)
        assert root.id == 1
        assert [(child.id, child.label) for child in children] == [(2, "a"), (3, "b")]

    @pytest.mark.asyncio
    async def test_consumer_never_receives_external_nodes(self, loopback):
        bridge, transport = loopback

        class Secret:
            label = "secret"

        bridge.register_tree_node_provider("vault", FakeTreeProvider(Secret()))
        root = await transport.provide_root_node("vault")

        assert root.label == "secret"
        assert json.loads(root.model_dump_json()) == root.to_wire()

    @pytest.mark.asyncio
    async def test_typed_errors_reach_consumer(self, loopback):
        bridge, transport = loopback
        provider = make_files_provider()
        bridge.register_tree_node_provider("files", provider)

        with pytest.raises(ProviderNotFound):
            await transport.provide_root_node("ghost")

        provider.root_error = RuntimeError("nope")
        with pytest.raises(ProviderResolutionFailure) as exc_info:
            await transport.provide_root_node("files")
        assert exc_info.value.phase is ResolutionPhase.ROOT
        assert exc_info.value.__cause__ is None

    @pytest.mark.asyncio
    async def test_stale_reference_after_reroot(self, loopback):
        bridge, transport = loopback
        bridge.register_tree_node_provider("files", make_files_provider())
        old_root = await transport.provide_root_node("files")
        await transport.provide_root_node("files")

        with pytest.raises(StaleNodeReference):
            await transport.resolve_children("files", old_root)

    @pytest.mark.asyncio
    async def test_click_command_round_trip(self):
        commands = CommandRegistry()
        handler = MagicMock(side_effect=RuntimeError("editor crashed"))
        commands.register_command("files.open", handler)
        bridge, transport = LoopbackTransport.create(commands=commands, stale_node_policy="fail")
        bridge.register_tree_node_provider(
            "files",
            FakeTreeProvider({"label": "root", "click_command": ["files.open", "ro"]}),
        )

        root = await transport.provide_root_node("files")
        with pytest.raises(CommandExecutionFailure) as exc_info:
            await transport.execute_command("files", root)

        assert exc_info.value.command == "files.open"
        handler.assert_called_once_with("ro", {"label": "root", "click_command": ["files.open", "ro"]})

    @pytest.mark.asyncio
    async def test_concurrent_calls_stay_correlated(self, loopback):
        bridge, transport = loopback
        bridge.register_tree_node_provider("files", make_files_provider())
        bridge.register_tree_node_provider(
            "git", FakeTreeProvider({"label": "repo"}, {"repo": [{"label": "main"}, {"label": "dev"}]})
        )

        files_root, git_root = await asyncio.gather(
            transport.provide_root_node("files"), transport.provide_root_node("git")
        )
        results = await asyncio.gather(
            transport.resolve_children("git", git_root),
            transport.resolve_children("files", files_root),
            transport.provide_root_node("ghost"),
            return_exceptions=True,
        )

        assert [child.label for child in results[0]] == ["main", "dev"]
        assert [child.label for child in results[1]] == ["a", "b"]
        assert isinstance(results[2], ProviderNotFound)

    @pytest.mark.asyncio
    async def test_not_connected(self):
        transport = LoopbackTransport()
        with pytest.raises(TransportError) as exc_info:
            await transport.provide_root_node("files")
        assert exc_info.value.code == "NotConnected"

    @pytest.mark.asyncio
    async def test_mismatched_response_rejected(self):
        server = MagicMock()
        server.dispatch = AsyncMock(return_value='{"call_id": 99, "result": null, "error": null}')
        transport = LoopbackTransport(server)

        with pytest.raises(TransportError) as exc_info:
            await transport.provide_root_node("files")
        assert exc_info.value.code == "CorrelationError"
