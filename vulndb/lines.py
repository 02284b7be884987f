"""Reading simple line-oriented data files."""

from __future__ import annotations

import os


def read_file_lines(filename: str | os.PathLike[str]) -> list[str]:
    """Return the lines of a file with surrounding whitespace trimmed.

    Blank lines and lines beginning with '#' are skipped.
    """
    with open(filename, encoding="utf-8") as f:
        stripped = (line.strip() for line in f)
        return [line for line in stripped if line and not line.startswith("#")]