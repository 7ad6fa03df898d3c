"""Version information emitted in the document meta."""

from __future__ import annotations

import platform

import pypdf

__version__ = "1.0.0"

DATA_FORMAT_VERSION = 1
SYMBOL_DATA_FORMAT_VERSION = "data_format_version"


def data_format_version() -> int:
    return DATA_FORMAT_VERSION


def libs() -> dict[str, str]:
    """Return the versions of the libraries that produced the record."""
    return {
        "pdfrecord": __version__,
        "pypdf": pypdf.__version__,
        "python": platform.python_version(),
    }
