"""Typed provisioning configuration.

Configuration is read once, up front, from the process environment and an
optional TOML file, and handed to the provisioning services as a frozen
``ProvisionConfig``. Nothing downstream reads ``os.environ``.

Environment variables:
    SCCACHE_DIR     compilation cache directory (required)
    VITASDK         SDK install directory (required)
    GH_API_USER     release API user (optional, paired with GH_API_TOKEN)
    GH_API_TOKEN    release API token
    CARGO_HOME      cargo home; binaries go to $CARGO_HOME/bin
    CIPROV_CONFIG   path to a TOML file with overrides

TOML overrides (all optional)::

    target = "x86_64-unknown-linux-musl"

    [paths]
    bin_dir = "/opt/cargo/bin"
    work_dir = "/tmp/ciprov"

    [crates]
    latest_source = "crates-io"   # or "cargo"

    [sdk]
    repo = "vitasdk/autobuilds"
    asset_pattern = "master-linux"

    [http]
    timeout = 60
"""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ciprov.platform.detection import host_target_triple

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_str, get_table

__all__ = [
    "ConfigError",
    "Credentials",
    "LatestSource",
    "ProvisionConfig",
    "SdkConfig",
    "load_config",
    "CONFIG_ENV_VAR",
    "DEFAULT_HTTP_TIMEOUT",
]

CONFIG_ENV_VAR = "CIPROV_CONFIG"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_SDK_REPO = "vitasdk/autobuilds"
DEFAULT_SDK_ASSET_PATTERN = "master-linux"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration is missing or invalid."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class LatestSource(Enum):
    """Where the latest published crate version is looked up."""

    CARGO = "cargo"
    CRATES_IO = "crates-io"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Credentials:
    """Basic-auth credentials for the release-listing API."""

    user: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(user={self.user!r}, token='***')"


@dataclass(frozen=True, slots=True)
class SdkConfig:
    """Where the cross-compilation SDK is published."""

    repo: str = DEFAULT_SDK_REPO
    asset_pattern: str = DEFAULT_SDK_ASSET_PATTERN


@dataclass(frozen=True, slots=True)
class ProvisionConfig:
    """Everything a provisioning run needs to know about its host.

    Attributes:
        cache_dir: Compilation cache directory (created if absent)
        sdk_dir: SDK install directory
        bin_dir: Directory binaries are placed into (on PATH)
        work_dir: Scratch area for downloads and extraction
        target: Rust target triple used to pick release assets
        credentials: Release API credentials, None for anonymous access
        latest_source: Crate version lookup backend
        sdk: SDK release location
        http_timeout: Per-request HTTP timeout in seconds
    """

    cache_dir: Path
    sdk_dir: Path
    bin_dir: Path
    work_dir: Path
    target: str
    credentials: Credentials | None = None
    latest_source: LatestSource = LatestSource.CARGO
    sdk: SdkConfig = field(default_factory=SdkConfig)
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def _require_dir(env: Mapping[str, str], name: str) -> Result[Path, ConfigError]:
    value = env.get(name, "").strip()
    if not value:
        return Err(ConfigError(f"{name} is not set"))
    return Ok(Path(value).expanduser())


def _credentials(env: Mapping[str, str]) -> Result[Credentials | None, ConfigError]:
    user = env.get("GH_API_USER", "").strip()
    token = env.get("GH_API_TOKEN", "").strip()
    if not user and not token:
        return Ok(None)
    if not user or not token:
        return Err(ConfigError("GH_API_USER and GH_API_TOKEN must be set together"))
    return Ok(Credentials(user=user, token=token))


def _default_bin_dir(env: Mapping[str, str]) -> Path:
    cargo_home = env.get("CARGO_HOME", "").strip()
    if cargo_home:
        return Path(cargo_home).expanduser() / "bin"
    home = env.get("HOME", "").strip()
    base = Path(home) if home else Path.home()
    return base / ".cargo" / "bin"


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError("Config file not found", path=path))
    except PermissionError:
        return Err(ConfigError("Permission denied reading config", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(
    env: Mapping[str, str],
    path: Path | None = None,
) -> Result[ProvisionConfig, ConfigError]:
    """Build the provisioning configuration.

    Args:
        env: Environment mapping (usually ``os.environ``)
        path: TOML override file; falls back to ``$CIPROV_CONFIG``

    Returns:
        Ok(ProvisionConfig) on success, Err(ConfigError) on failure
    """
    cache_dir = _require_dir(env, "SCCACHE_DIR")
    if isinstance(cache_dir, Err):
        return cache_dir
    sdk_dir = _require_dir(env, "VITASDK")
    if isinstance(sdk_dir, Err):
        return sdk_dir
    credentials = _credentials(env)
    if isinstance(credentials, Err):
        return credentials

    if path is None and env.get(CONFIG_ENV_VAR, "").strip():
        path = Path(env[CONFIG_ENV_VAR].strip()).expanduser()

    data: StrDict = {}
    if path is not None:
        parsed = _parse_toml(path)
        if isinstance(parsed, Err):
            return parsed
        data = parsed.value

    paths: StrDict = get_table(data, "paths") or {}
    crates: StrDict = get_table(data, "crates") or {}
    sdk: StrDict = get_table(data, "sdk") or {}
    http: StrDict = get_table(data, "http") or {}

    target = get_str(data, "target") or host_target_triple()
    if target is None:
        return Err(ConfigError("Unsupported host platform; set 'target' in config", path=path))

    source_name = get_str(crates, "latest_source") or str(LatestSource.CARGO)
    try:
        latest_source = LatestSource(source_name)
    except ValueError:
        choices = ", ".join(s.value for s in LatestSource)
        return Err(
            ConfigError(f"Unknown crates.latest_source {source_name!r} (expected {choices})", path)
        )

    timeout = get_float(http, "timeout")
    if timeout is not None and timeout <= 0:
        return Err(ConfigError("http.timeout must be positive", path=path))

    bin_dir = get_str(paths, "bin_dir")
    work_dir = get_str(paths, "work_dir")

    return Ok(
        ProvisionConfig(
            cache_dir=cache_dir.value,
            sdk_dir=sdk_dir.value,
            bin_dir=Path(bin_dir).expanduser() if bin_dir else _default_bin_dir(env),
            work_dir=(
                Path(work_dir).expanduser()
                if work_dir
                else Path(tempfile.gettempdir()) / "ciprov"
            ),
            target=target,
            credentials=credentials.value,
            latest_source=latest_source,
            sdk=SdkConfig(
                repo=get_str(sdk, "repo") or DEFAULT_SDK_REPO,
                asset_pattern=get_str(sdk, "asset_pattern") or DEFAULT_SDK_ASSET_PATTERN,
            ),
            http_timeout=timeout or DEFAULT_HTTP_TIMEOUT,
        )
    )
