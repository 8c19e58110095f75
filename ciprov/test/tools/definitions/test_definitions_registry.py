"""Tests for the tool registry."""

from ciprov.tools.definitions import ALL_TOOLS, TOOL_IDS, CargoMakeTool, SccacheTool, VitaSdkTool


class TestRegistry:
    def test_order(self) -> None:
        assert TOOL_IDS == ("sccache", "cargo-make", "vitasdk")

    def test_unique_ids(self) -> None:
        assert len(set(TOOL_IDS)) == len(ALL_TOOLS)

    def test_types(self) -> None:
        assert [type(t) for t in ALL_TOOLS] == [SccacheTool, CargoMakeTool, VitaSdkTool]
