"""Installed-version records for tools that cannot report their own version.

The SDK has no ``--version`` command, so after installing it the release tag
is written to ``.ciprov-state.json`` inside the install directory. Removing
the directory removes the record with it.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from ciprov.platform.files import atomic_write_text

__all__ = [
    "STATE_FILE_NAME",
    "ToolState",
    "load_state",
    "save_state",
    "get_installed_version",
    "set_installed_version",
]

STATE_FILE_NAME = ".ciprov-state.json"


@dataclass(frozen=True, slots=True)
class ToolState:
    """State of an installed tool.

    Attributes:
        version: Installed version string
        installed_at: ISO timestamp of installation (UTC)
    """

    version: str
    installed_at: str

    @classmethod
    def now(cls, version: str) -> ToolState:
        return cls(version=version, installed_at=datetime.now(UTC).isoformat())


def _state_file(install_dir: Path) -> Path:
    return install_dir / STATE_FILE_NAME


def load_state(install_dir: Path) -> dict[str, ToolState]:
    """Load the records in ``install_dir``; missing or corrupt files read as empty."""
    state_path = _state_file(install_dir)
    if not state_path.exists():
        return {}

    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
        return {tool_id: ToolState(**state_data) for tool_id, state_data in data.items()}
    except (json.JSONDecodeError, TypeError, AttributeError, OSError):
        return {}


def save_state(install_dir: Path, state: dict[str, ToolState]) -> None:
    data = {tool_id: asdict(tool_state) for tool_id, tool_state in state.items()}
    atomic_write_text(_state_file(install_dir), json.dumps(data, indent=2, sort_keys=True))


def get_installed_version(install_dir: Path, tool_id: str) -> str | None:
    tool_state = load_state(install_dir).get(tool_id)
    return tool_state.version if tool_state else None


def set_installed_version(install_dir: Path, tool_id: str, version: str) -> None:
    state = load_state(install_dir)
    state[tool_id] = ToolState.now(version)
    save_state(install_dir, state)
