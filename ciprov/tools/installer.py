"""Archive extraction.

This module provides an Installer that:
- Extracts .tar.gz, .tar.bz2, .tar.xz and .zip archives
- Supports strip_components (like ``tar --strip-components``)
- Refuses members that would land outside the install directory
- Recreates symlinks and hardlinks only when they stay inside it
"""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from ciprov.core.result import Err, Ok, Result

__all__ = ["Installer", "InstallResult", "InstallError"]

_TAR_MODES: tuple[tuple[tuple[str, ...], str], ...] = (
    ((".tar.gz", ".tgz"), "r:gz"),
    ((".tar.bz2", ".tbz2", ".tbz"), "r:bz2"),
    ((".tar.xz", ".txz"), "r:xz"),
)


@dataclass(frozen=True, slots=True)
class InstallError:
    """Extraction error details."""

    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Result of an extraction.

    Attributes:
        install_dir: Directory the archive was extracted into
        files_count: Number of regular files written
    """

    install_dir: Path
    files_count: int


class Installer:
    """Archive extractor.

    Usage:
        installer = Installer()
        result = installer.install(archive, sdk_dir, strip_components=1)
        if isinstance(result, Ok):
            print(f"Installed {result.value.files_count} files")
    """

    def install(
        self,
        archive: Path,
        install_dir: Path,
        *,
        strip_components: int = 0,
        clean: bool = True,
    ) -> Result[InstallResult, InstallError]:
        """Extract ``archive`` into ``install_dir``.

        Args:
            archive: Path to archive file
            install_dir: Directory to extract to (created if missing)
            strip_components: Number of leading path components to remove
            clean: Remove ``install_dir`` first so no stale files survive

        Returns:
            Ok with InstallResult, or Err with InstallError
        """
        if not archive.exists():
            return Err(InstallError(archive=archive, message="Archive not found"))

        # Path.suffixes splits every dot ("sccache-0.2.15-x86_64...") so match
        # on the full lowercase name instead.
        name = archive.name.lower()
        for suffixes, mode in _TAR_MODES:
            if name.endswith(suffixes):
                return self._extract_tar(archive, install_dir, strip_components, mode, clean)
        if name.endswith(".zip"):
            return self._extract_zip(archive, install_dir, strip_components, clean)
        return Err(InstallError(archive=archive, message="Unsupported archive format"))

    def _prepare(self, install_dir: Path, clean: bool) -> Path:
        if clean and install_dir.exists():
            shutil.rmtree(install_dir)
        install_dir.mkdir(parents=True, exist_ok=True)
        return install_dir.resolve()

    def _safe_relative_path(self, member_name: str, strip_components: int) -> Path | None:
        """Return a sanitized relative extraction path, or None if unsafe or stripped."""
        normalized = member_name.replace("\\", "/")
        if normalized.startswith("/"):
            return None

        parts = [p for p in PurePosixPath(normalized).parts if p != "."]
        if len(parts) <= strip_components:
            return None

        kept = parts[strip_components:]
        if any(part in {"", ".."} for part in kept):
            return None
        if kept[0].endswith(":"):
            return None
        return Path(*kept)

    def _is_within_root(self, root: Path, target: Path) -> bool:
        try:
            return target.resolve().is_relative_to(root)
        except OSError:
            return False

    def _extract_tar(
        self,
        archive: Path,
        install_dir: Path,
        strip_components: int,
        mode: str,
        clean: bool,
    ) -> Result[InstallResult, InstallError]:
        try:
            install_root = self._prepare(install_dir, clean)
            files_count = 0
            links: list[tuple[tarfile.TarInfo, Path]] = []

            with tarfile.open(archive, mode) as tar:  # type: ignore[call-overload]
                for member in tar:
                    rel_path = self._safe_relative_path(member.name, strip_components)
                    if rel_path is None:
                        continue
                    full_path = install_dir / rel_path
                    if not self._is_within_root(install_root, full_path.parent):
                        continue

                    if member.isdir():
                        full_path.mkdir(parents=True, exist_ok=True)
                        continue
                    if member.issym() or member.islnk():
                        # Link targets may appear later in the stream.
                        links.append((member, full_path))
                        continue
                    if not member.isreg():
                        continue

                    src = tar.extractfile(member)
                    if src is None:
                        continue
                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    full_path.unlink(missing_ok=True)
                    with src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)

                    perms = member.mode & 0o777
                    if perms:
                        with contextlib.suppress(OSError):
                            os.chmod(full_path, perms)
                    files_count += 1

            for member, full_path in links:
                self._make_link(member, full_path, install_dir, install_root, strip_components)

            return Ok(InstallResult(install_dir=install_dir, files_count=files_count))

        except tarfile.TarError as e:
            return Err(InstallError(archive=archive, message=f"Tar extraction failed: {e}"))
        except EOFError as e:
            return Err(InstallError(archive=archive, message=f"Truncated archive: {e}"))
        except OSError as e:
            return Err(InstallError(archive=archive, message=f"IO error: {e}"))

    def _make_link(
        self,
        member: tarfile.TarInfo,
        full_path: Path,
        install_dir: Path,
        install_root: Path,
        strip_components: int,
    ) -> None:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        if member.issym():
            target = full_path.parent / member.linkname
            if os.path.isabs(member.linkname) or not self._is_within_root(install_root, target):
                return
            if full_path.is_symlink() or full_path.exists():
                full_path.unlink()
            full_path.symlink_to(member.linkname)
            return

        # Hardlink names are archive paths, stripped like any other member.
        rel_target = self._safe_relative_path(member.linkname, strip_components)
        if rel_target is None:
            return
        source = install_dir / rel_target
        if source.is_file() and self._is_within_root(install_root, source):
            full_path.unlink(missing_ok=True)
            shutil.copy2(source, full_path)

    def _extract_zip(
        self,
        archive: Path,
        install_dir: Path,
        strip_components: int,
        clean: bool,
    ) -> Result[InstallResult, InstallError]:
        try:
            install_root = self._prepare(install_dir, clean)
            files_count = 0

            with zipfile.ZipFile(archive, "r") as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue
                    rel_path = self._safe_relative_path(info.filename, strip_components)
                    if rel_path is None:
                        continue

                    unix_attrs = info.external_attr >> 16
                    if (unix_attrs & 0o170000) == stat.S_IFLNK:
                        continue

                    full_path = install_dir / rel_path
                    if not self._is_within_root(install_root, full_path.parent):
                        continue

                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info) as src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    if unix_attrs & 0o777:
                        full_path.chmod(unix_attrs & 0o777)
                    files_count += 1

            return Ok(InstallResult(install_dir=install_dir, files_count=files_count))

        except zipfile.BadZipFile as e:
            return Err(InstallError(archive=archive, message=f"Invalid zip file: {e}"))
        except OSError as e:
            return Err(InstallError(archive=archive, message=f"IO error: {e}"))
