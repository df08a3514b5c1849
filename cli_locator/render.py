"""
Output rendering and formatting.

Tables are aligned by terminal display width (wcwidth), ignoring ANSI
escapes, so colored cells and wide characters line up.
"""

import os
import re
import sys
from typing import Sequence, TextIO

from wcwidth import wcswidth

from .installation import Installation
from .shells import AvailableShells
from .versions import is_prerelease


USE_COLOR = os.environ.get("CLI_LOCATOR_COLOR", "1") == "1"

# ANSI color codes
GREEN = "\033[32m"
BOLD_GREEN = "\033[1;32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RESET = "\033[0m"

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")


def colorize(text: str, color: str) -> str:
    """Apply color to text, unless colors are disabled."""
    if not USE_COLOR or not text:
        return text
    return f"{color}{text}{RESET}"


def display_width(text: str) -> int:
    """Printable width of text with ANSI escapes removed."""
    plain = ANSI_ESCAPE_RE.sub("", text)
    width = wcswidth(plain)
    # wcswidth reports -1 for non-printable characters
    return width if width >= 0 else len(plain)


def pad(text: str, width: int) -> str:
    return text + " " * max(0, width - display_width(text))


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    """Align rows into columns separated by two spaces."""
    widths = [display_width(h) for h in headers]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], display_width(cell))

    lines = ["  ".join(pad(h, widths[i]) for i, h in enumerate(headers)).rstrip()]
    for row in rows:
        lines.append("  ".join(pad(cell, widths[i]) for i, cell in enumerate(row)).rstrip())
    return lines


def format_version(version: str | None) -> str:
    if version is None:
        return colorize("unknown", BLUE)
    if is_prerelease(version):
        return colorize(f"{version} (pre-release)", YELLOW)
    return colorize(version, GREEN)


def render_installations(
    installations: Sequence[Installation],
    selected: Installation | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Print discovered installations as an aligned table.

    Args:
        installations: Installations in display order
        selected: Installation to mark as the current choice
        stream: Output stream (stdout by default)
    """
    stream = stream or sys.stdout
    rows = []
    for inst in installations:
        marker = colorize("*", BOLD_GREEN) if selected is not None and inst == selected else " "
        rows.append((
            marker,
            format_version(inst.version),
            inst.source,
            inst.kind.value,
            inst.path,
        ))

    for line in format_table(("", "version", "source", "type", "path"), rows):
        print(line, file=stream)


def render_shells(shells: AvailableShells, stream: TextIO | None = None) -> None:
    """Print detected shell environments."""
    stream = stream or sys.stdout
    print(f"native: {'yes' if shells.native else 'no'}", file=stream)

    if shells.subsystem_distributions:
        rows = [
            (
                colorize("*", BOLD_GREEN) if d.is_default else " ",
                d.name,
                str(d.version) if d.version is not None else "?",
            )
            for d in shells.subsystem_distributions
        ]
        print("wsl distributions:", file=stream)
        for line in format_table(("", "name", "version"), rows):
            print(f"  {line}", file=stream)
    else:
        print("wsl distributions: none", file=stream)

    print(f"git bash: {shells.alt_shell_path or 'not found'}", file=stream)
