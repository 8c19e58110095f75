"""Tests for tools/installer.py - Archive extraction."""

from __future__ import annotations

import io
import os
import tarfile
import zipfile
from pathlib import Path

import pytest

from ciprov.core.result import Err, Ok
from ciprov.tools.installer import Installer, InstallError, InstallResult


def create_tar(
    path: Path,
    files: dict[str, bytes],
    *,
    mode: str = "w:gz",
    symlinks: dict[str, str] | None = None,
) -> None:
    """Create a tar archive.

    Args:
        path: Path to create archive at
        files: Dict of filename -> content
        mode: tarfile write mode (selects compression)
        symlinks: Dict of link name -> link target, added after the files
    """
    with tarfile.open(path, mode) as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name=name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)


def create_zip(path: Path, files: dict[str, bytes]) -> None:
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)


class TestInstallError:
    def test_str(self) -> None:
        error = InstallError(archive=Path("sdk.tar.bz2"), message="Truncated archive")
        assert str(error) == "Truncated archive: sdk.tar.bz2"


class TestFormats:
    @pytest.mark.parametrize(
        ("suffix", "mode"),
        [(".tar.gz", "w:gz"), (".tgz", "w:gz"), (".tar.bz2", "w:bz2"), (".tar.xz", "w:xz")],
    )
    def test_tar_variants(self, tmp_path: Path, suffix: str, mode: str) -> None:
        archive = tmp_path / f"pkg-1.0{suffix}"
        create_tar(archive, {"bin/tool": b"x", "README": b"r"}, mode=mode)

        result = Installer().install(archive, tmp_path / "out")

        assert result == Ok(InstallResult(install_dir=tmp_path / "out", files_count=2))
        assert (tmp_path / "out" / "bin" / "tool").read_bytes() == b"x"

    def test_zip(self, tmp_path: Path) -> None:
        archive = tmp_path / "pkg.zip"
        create_zip(archive, {"a/b.txt": b"b", "c.txt": b"c"})

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Ok)
        assert result.value.files_count == 2
        assert (tmp_path / "out" / "a" / "b.txt").read_bytes() == b"b"

    def test_dotted_name_uses_full_suffix(self, tmp_path: Path) -> None:
        archive = tmp_path / "sccache-0.2.15-x86_64-unknown-linux-musl.tar.gz"
        create_tar(archive, {"sccache-0.2.15-x86_64-unknown-linux-musl/sccache": b"bin"})

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Ok)

    def test_unsupported(self, tmp_path: Path) -> None:
        archive = tmp_path / "pkg.rar"
        archive.write_bytes(b"rar")

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Err)
        assert result.error.message == "Unsupported archive format"

    def test_missing_archive(self, tmp_path: Path) -> None:
        result = Installer().install(tmp_path / "nope.tar.gz", tmp_path / "out")

        assert isinstance(result, Err)
        assert result.error.message == "Archive not found"

    def test_corrupt_tar(self, tmp_path: Path) -> None:
        archive = tmp_path / "bad.tar.bz2"
        archive.write_bytes(b"not bzip2 at all")

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Err)

    def test_corrupt_zip(self, tmp_path: Path) -> None:
        archive = tmp_path / "bad.zip"
        archive.write_bytes(b"not a zip")

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Err)
        assert "zip" in result.error.message


class TestLayout:
    def test_strip_components(self, tmp_path: Path) -> None:
        archive = tmp_path / "vitasdk.tar.bz2"
        create_tar(
            archive,
            {"vitasdk/bin/arm-vita-eabi-gcc": b"gcc", "vitasdk/share/x": b"x"},
            mode="w:bz2",
        )

        result = Installer().install(archive, tmp_path / "sdk", strip_components=1)

        assert isinstance(result, Ok)
        assert (tmp_path / "sdk" / "bin" / "arm-vita-eabi-gcc").exists()
        assert not (tmp_path / "sdk" / "vitasdk").exists()

    def test_clean_removes_stale_files(self, tmp_path: Path) -> None:
        out = tmp_path / "sdk"
        out.mkdir()
        (out / "stale.h").write_text("old", encoding="utf-8")
        archive = tmp_path / "a.tar.gz"
        create_tar(archive, {"new.h": b"new"})

        Installer().install(archive, out)

        assert not (out / "stale.h").exists()
        assert (out / "new.h").exists()

    def test_no_clean_keeps_files(self, tmp_path: Path) -> None:
        out = tmp_path / "sdk"
        out.mkdir()
        (out / "keep.h").write_text("old", encoding="utf-8")
        archive = tmp_path / "a.tar.gz"
        create_tar(archive, {"new.h": b"new"})

        Installer().install(archive, out, clean=False)

        assert (out / "keep.h").exists()

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_preserves_mode(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.tar.gz"
        create_tar(archive, {"sccache": b"bin"})

        Installer().install(archive, tmp_path / "out")

        assert (tmp_path / "out" / "sccache").stat().st_mode & 0o111


class TestSafety:
    def test_skips_parent_traversal(self, tmp_path: Path) -> None:
        archive = tmp_path / "evil.tar.gz"
        create_tar(archive, {"../escape.txt": b"x", "ok.txt": b"y"})

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Ok)
        assert result.value.files_count == 1
        assert not (tmp_path / "escape.txt").exists()

    def test_skips_absolute_paths(self, tmp_path: Path) -> None:
        archive = tmp_path / "evil.zip"
        create_zip(archive, {"/etc/evil": b"x", "fine": b"y"})

        result = Installer().install(archive, tmp_path / "out")

        assert isinstance(result, Ok)
        assert result.value.files_count == 1

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_relative_symlink_inside_root(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.tar.gz"
        create_tar(archive, {"lib/libfoo.so.1": b"so"}, symlinks={"lib/libfoo.so": "libfoo.so.1"})

        Installer().install(archive, tmp_path / "out")

        link = tmp_path / "out" / "lib" / "libfoo.so"
        assert link.is_symlink()
        assert link.read_bytes() == b"so"

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_escaping_symlink_skipped(self, tmp_path: Path) -> None:
        archive = tmp_path / "a.tar.gz"
        create_tar(archive, {"ok": b"y"}, symlinks={"passwd": "../../etc/passwd"})

        Installer().install(archive, tmp_path / "out")

        assert not (tmp_path / "out" / "passwd").is_symlink()
