"""
pdfrecord - outline, link and metadata extraction for PDF documents.

Opens a PDF with pypdf and streams a single JSON record of the form
``{"meta": {...}, "pages": [...]}``. The meta block carries the document
version, page count, the resolved outline (bookmark tree), font statistics
and any warnings collected while reading; each page record carries
positioned text spans and resolved link annotations.

Quick Start:
    >>> from pdfrecord import extract
    >>> record = extract("input.pdf", page_number=0)

Main Classes:
    - PDFReader: one extraction session over a document
    - Options: read-only run configuration

Exceptions:
    - PDFRecordException: Base exception
    - OpenError: the document could not be opened
    - RangeError: requested page is outside the document

For CLI usage, use the 'pdfrecord' command after installation.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import TextIO

from pdfrecord.exceptions import OpenError, OutputError, PDFRecordException, RangeError
from pdfrecord.links import (
    ExternalFileTarget,
    LinkTargetResolver,
    PageTarget,
    UriTarget,
)
from pdfrecord.options import Options
from pdfrecord.outline import Outline, OutlineEntry, OutlineTreeBuilder
from pdfrecord.reader import PDFReader
from pdfrecord.version import __version__

__author__ = "pdfrecord contributors"
__license__ = "MIT"

__all__ = [
    "PDFReader",
    "Options",
    "Outline",
    "OutlineEntry",
    "OutlineTreeBuilder",
    "LinkTargetResolver",
    "PageTarget",
    "ExternalFileTarget",
    "UriTarget",
    "PDFRecordException",
    "OpenError",
    "RangeError",
    "OutputError",
    "extract",
    "__version__",
]


def extract(path: str | Path, stream: TextIO | None = None, **options: object) -> str | None:
    """Convenience wrapper: stream the record for ``path``.

    Returns the JSON text when no ``stream`` is given.
    """

    opts = Options(pdf_filename=path, **options)  # type: ignore[arg-type]
    target = stream if stream is not None else io.StringIO()
    with PDFReader(opts) as reader:
        reader.process(target)
    if stream is None:
        return target.getvalue()  # type: ignore[union-attr]
    return None
