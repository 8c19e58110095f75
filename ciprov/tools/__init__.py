"""Tool provisioning building blocks.

- Tool specifications and base classes (base.py)
- Version parsing (probes.py) and remote queries (api.py)
- HTTP client (http.py), downloads (download.py), extraction (installer.py)
- Installed-version records (state.py)
- Tool definitions (definitions/)
"""

from ciprov.tools.base import CrateTool, Tool, ToolContext, ToolSpec
from ciprov.tools.download import Downloader, DownloadResult
from ciprov.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from ciprov.tools.installer import Installer, InstallError, InstallResult
from ciprov.tools.probes import NONE_VERSION, ProbeError

__all__ = [
    # Base types
    "CrateTool",
    "Tool",
    "ToolContext",
    "ToolSpec",
    # Probes
    "NONE_VERSION",
    "ProbeError",
    # HTTP
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    # Download / install
    "Downloader",
    "DownloadResult",
    "Installer",
    "InstallError",
    "InstallResult",
]
