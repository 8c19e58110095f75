"""Provisioning services."""

from .provision import (
    Action,
    InstallOutcome,
    ProvisionReport,
    ProvisionService,
    ToolStatus,
    VersionedToolInstaller,
    ensure_cache_dir,
)
from .provision_errors import ProvisionError

__all__ = [
    "Action",
    "InstallOutcome",
    "ProvisionError",
    "ProvisionReport",
    "ProvisionService",
    "ToolStatus",
    "VersionedToolInstaller",
    "ensure_cache_dir",
]
