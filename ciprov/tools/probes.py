"""Version extraction from tool and registry output.

These are pure functions over captured text. Each parser documents the exact
format it expects and returns an explicit ``ProbeError`` when the text does
not match, rather than guessing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ciprov.core.result import Err, Ok, Result

__all__ = [
    "NONE_VERSION",
    "ProbeError",
    "last_token_version",
    "parse_version_output",
    "parse_registry_search",
]

NONE_VERSION = "none"
"""Installed version of a tool that is absent or could not report one."""


@dataclass(frozen=True, slots=True)
class ProbeError:
    """A probe produced output in an unexpected format.

    Attributes:
        source: What was probed (a command line or a registry name)
        message: What did not match
        output: The offending output, for diagnostics
    """

    source: str
    message: str
    output: str = ""

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


def last_token_version(output: str) -> str:
    """Return the last whitespace-separated token of ``output``.

    This is the loose convention many ``--version`` flags happen to satisfy
    (``"tool 1.2.3"`` -> ``"1.2.3"``). Empty output yields ``NONE_VERSION``.
    It cannot tell a version from trailing text, so tool definitions use
    ``parse_version_output`` instead.
    """
    tokens = output.split()
    return tokens[-1] if tokens else NONE_VERSION


def parse_version_output(output: str, program: str) -> Result[str, ProbeError]:
    """Extract the version from ``<program> <version> [anything]``.

    The first non-blank line must start with ``program``, followed by a
    version token that begins with a digit. Anything after the version token
    (build hashes, dates) is ignored. Blank output means the tool reported
    nothing and yields ``NONE_VERSION``.

    Examples:
        >>> parse_version_output("sccache 0.2.15\\n", "sccache")
        Ok('0.2.15')
        >>> parse_version_output("cargo-make 0.27.0 (abc1234)", "cargo-make")
        Ok('0.27.0')
    """
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if not lines:
        return Ok(NONE_VERSION)

    pattern = re.compile(rf"^{re.escape(program)}\s+(\d\S*)(?:\s.*)?$")
    match = pattern.match(lines[0])
    if match is None:
        return Err(
            ProbeError(
                source=program,
                message=f"expected '{program} <version>', got {lines[0]!r}",
                output=output,
            )
        )
    return Ok(match.group(1))


def parse_registry_search(text: str, name: str) -> Result[str, ProbeError]:
    """Extract the published version of ``name`` from ``cargo search`` output.

    Expected line format (one crate per line, comments after ``#``)::

        sccache = "0.2.15"    # Sccache is a ccache-like tool...

    Only lines naming exactly ``name`` count, so ``sccache-dist`` never shadows
    ``sccache``. Several exact lines agreeing on a version are fine; lines that
    disagree are reported as ambiguous instead of picking one by order.
    """
    pattern = re.compile(rf'^\s*{re.escape(name)}\s*=\s*"([^"]+)"')
    versions: list[str] = []
    for line in text.splitlines():
        match = pattern.match(line)
        if match is not None and match.group(1) not in versions:
            versions.append(match.group(1))

    if not versions:
        return Err(
            ProbeError(source=name, message="no exact match in registry search", output=text)
        )
    if len(versions) > 1:
        return Err(
            ProbeError(
                source=name,
                message=f"ambiguous registry search: {', '.join(versions)}",
                output=text,
            )
        )
    return Ok(versions[0])
