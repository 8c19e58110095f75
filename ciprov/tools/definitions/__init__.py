"""Tool definitions.

Provisioning order matters: sccache first (later builds may use it), then
cargo-make, then the SDK.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ciprov.tools.definitions.cargo_make import CargoMakeTool
from ciprov.tools.definitions.sccache import SccacheTool
from ciprov.tools.definitions.vitasdk import VitaSdkTool

if TYPE_CHECKING:
    from ciprov.tools.base import Tool

__all__ = [
    "CargoMakeTool",
    "SccacheTool",
    "VitaSdkTool",
    "ALL_TOOLS",
    "TOOL_IDS",
]


ALL_TOOLS: tuple[Tool, ...] = (
    SccacheTool(),
    CargoMakeTool(),
    VitaSdkTool(),
)

TOOL_IDS: tuple[str, ...] = tuple(tool.spec.id for tool in ALL_TOOLS)
