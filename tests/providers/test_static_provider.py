"""Tests for the provider base hooks and the static tree provider."""

from types import SimpleNamespace

import pytest

from tests.conftest import FakeTreeProvider
from treebridge.base.errors import ConfigurationError
from treebridge.base.nodes import ClickCommand
from treebridge.providers.static_provider import StaticTreeProvider

TREE_YAML = """
label: workspace
children:
  - label: README.md
    click_command:
      command: treebridge.echo
      arguments: [readme]
  - label: src
    children:
      - label: main.py
"""


class TestDescribeHooks:
    """Test the default description hooks on TreeNodeProvider."""

    def test_reads_mapping_fields(self):
        provider = StaticTreeProvider({"label": "root"})
        description = provider.describe({"label": "a", "click_command": "files.open", "children": [1]})
        assert description.label == "a"
        assert description.has_children is True
        assert description.click_command == ClickCommand(command="files.open")

    def test_reads_object_attributes_and_camel_case(self):
        provider = FakeTreeProvider(None)
        node = SimpleNamespace(label=7, clickCommand={"command": "files.open"}, hasChildren=0)
        description = provider.describe(node)
        assert description.label == "7"
        assert description.has_children is False
        assert description.click_command.command == "files.open"

    def test_object_without_fields(self):
        description = FakeTreeProvider(None).describe(SimpleNamespace())
        assert description.label is None
        assert description.has_children is True
        assert description.click_command is None


class TestStaticTreeProvider:
    """Test StaticTreeProvider functionality."""

    @pytest.mark.asyncio
    async def test_serves_nested_tree(self, tmp_path):
        tree_file = tmp_path / "tree.yml"
        tree_file.write_text(TREE_YAML)
        provider = StaticTreeProvider.from_file(tree_file)

        root = await provider.provide_root_node()
        children = await provider.resolve_children(root)

        assert root["label"] == "workspace"
        assert [child["label"] for child in children] == ["README.md", "src"]
        assert provider.get_has_children(children[0]) is False
        assert provider.get_has_children(children[1]) is True

    @pytest.mark.asyncio
    async def test_response_delay(self):
        provider = StaticTreeProvider({"label": "root"}, response_delay_ms=1)
        assert await provider.resolve_children(await provider.provide_root_node()) == []

    def test_non_mapping_file_rejected(self, tmp_path):
        tree_file = tmp_path / "tree.yml"
        tree_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            StaticTreeProvider.from_file(tree_file)

    def test_invalid_yaml_rejected(self, tmp_path):
        tree_file = tmp_path / "tree.yml"
        tree_file.write_text("label: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Error parsing tree file"):
            StaticTreeProvider.from_file(tree_file)

    def test_non_mapping_tree_rejected(self):
        with pytest.raises(ConfigurationError):
            StaticTreeProvider(["not", "a", "mapping"])
