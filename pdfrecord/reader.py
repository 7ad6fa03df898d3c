"""Document reader: opens a PDF and streams its ``{meta, pages}`` record."""

from __future__ import annotations

from typing import TextIO

from pypdf.errors import PdfReadError, PdfStreamError

from . import version
from .document import Document
from .errors import ErrorKind, ErrorTracker
from .exceptions import OpenError, RangeError
from .fonts import FontEngDev, FontEngine
from .links import LinkTargetResolver
from .options import Options
from .outline import Outline, OutlineTreeBuilder
from .page import LinkOutputDev, PageOutputDev
from .serializer import RecordWriter
from .utils import get_logger, time_block

__all__ = ["PDFReader"]

LOGGER = get_logger("pdfrecord.reader")
MODULE = "reader"

SYMBOL_META = "meta"
SYMBOL_PAGES = "pages"

SYMBOL_PDF_FILENAME = "filename"
SYMBOL_PDF_DOC_OK = "is_ok"
SYMBOL_PDF_MAJ_VER = "pdf_ver_major"
SYMBOL_PDF_MIN_VER = "pdf_ver_minor"
SYMBOL_PDF_NUM_PAGES = "num_pages"
SYMBOL_PDF_DOC_FONTS = "doc_fonts"
SYMBOL_PDF_DOC_FONT_SIZES = "font_size_list"
SYMBOL_PDF_OUTLINE = "outline"
SYMBOL_FONT_ENG_OK = "font_engine_ok"
SYMBOL_FONT_ENG_FONT_WARN = "found_font_warnings"
SYMBOL_FONT_IDX = "font_idx"
SYMBOL_VERSIONS = "versions"
SYMBOL_ERRORS = "errors"

# errors pypdf raises from malformed content while a page is being processed
PAGE_ERRORS = (PdfReadError, PdfStreamError, ValueError, KeyError)


class PDFReader:
    """One extraction session over a single document.

    Opening validates the document and the requested page, runs the
    optional font pre-scan and builds the outline. Nothing is written until
    :meth:`process` is called, so fatal errors never leave partial output.
    """

    def __init__(self, options: Options) -> None:
        self.options = options
        self.et = ErrorTracker()
        self.font_engine = FontEngine(self.et)
        self.outline = Outline()
        self.use_page_media_box = True

        self.document = Document(
            options.pdf_filename,
            owner_password=options.owner_password,
            user_password=options.user_password,
        )
        if not self.document.is_ok:
            raise OpenError(f"Document open error: {self.document.error_string}")

        try:
            self._prepare(options)
        except Exception:
            self.document.close()
            raise

    def _prepare(self, options: Options) -> None:
        num_pages = self.document.num_pages
        if options.page_number is not None and options.page_number >= num_pages:
            raise RangeError(options.page_number, num_pages)

        if options.use_page_crop_box:
            self.use_page_media_box = False
        self.resolver = LinkTargetResolver(self.document.catalog, self._page_height)

        if options.link_output_only:
            self.eng_odev: LinkOutputDev = LinkOutputDev(
                self.resolver, self.et, use_media_box=self.use_page_media_box
            )
        else:
            if options.force_pre_process_fonts:
                self.pre_process_fonts()
            self.eng_odev = PageOutputDev(
                self.resolver, self.et, self.font_engine, use_media_box=self.use_page_media_box
            )
            if not options.omit_outline:
                self.process_outline()

    def __enter__(self) -> "PDFReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.document.close()

    # -- session stages -------------------------------------------------------

    def _page_height(self, page_index: int) -> float | None:
        page_num = page_index + 1
        if not 1 <= page_num <= self.document.num_pages:
            return None
        try:
            if self.use_page_media_box:
                return self.document.page_media_height(page_num)
            return self.document.page_crop_height(page_num)
        except (PdfReadError, ValueError) as exc:
            # coordinates are left unflipped
            LOGGER.debug("No usable box on page %d: %s", page_num, exc)
            return None

    def _page_range(self) -> range:
        """1-based page numbers selected by the options."""
        if self.options.all_pages:
            return range(1, self.document.num_pages + 1)
        first = self.options.page_number + 1
        return range(first, first + 1)

    def pre_process_fonts(self) -> bool:
        """Run the selected pages through the font device only."""

        if not self.document.is_ok:
            return False
        fe_dev = FontEngDev(self.font_engine)
        for page_num in self._page_range():
            self.process_page(fe_dev, page_num)
        LOGGER.debug("Font pre-scan found %d fonts", len(self.font_engine.get_font_list()))
        return True

    def process_outline(self) -> bool:
        items = self.document.outline_items()
        if not items:
            return False
        builder = OutlineTreeBuilder(self.resolver, self.et, max_depth=self.options.max_outline_depth)
        self.outline = builder.build_outline(items)
        return True

    def process_page(self, dev, page_num: int) -> None:
        # only capture what this page generates
        self.et.flush_errors()
        try:
            dev.display_page(self.document, page_num)
        except PAGE_ERRORS as exc:
            self.et.log_error(ErrorKind.PAGE_PROCESSING, MODULE, f"page {page_num}: {exc}")

    # -- output ---------------------------------------------------------------

    def meta(self) -> dict[str, object]:
        """Document meta as an ordered mapping; conditional keys are omitted."""

        meta: dict[str, object] = {}
        meta[version.SYMBOL_DATA_FORMAT_VERSION] = version.data_format_version()
        meta[SYMBOL_PDF_FILENAME] = str(self.options.pdf_filename)
        meta[SYMBOL_PDF_DOC_OK] = True
        meta[SYMBOL_FONT_ENG_OK] = True
        if self.font_engine.found_font_warnings():
            meta[SYMBOL_FONT_ENG_FONT_WARN] = True

        major, minor = self.document.pdf_version
        meta[SYMBOL_PDF_MAJ_VER] = major
        meta[SYMBOL_PDF_MIN_VER] = minor
        meta[SYMBOL_PDF_NUM_PAGES] = self.document.num_pages

        meta[SYMBOL_PDF_OUTLINE] = self.outline.to_record()

        font_sizes = self.font_engine.get_font_size_list()
        if font_sizes:
            meta[SYMBOL_PDF_DOC_FONT_SIZES] = font_sizes

        if self.options.include_debug_info:
            fonts = []
            for idx, entry in enumerate(self.font_engine.get_font_list()):
                font_h = entry.to_record()
                font_h[SYMBOL_FONT_IDX] = idx
                fonts.append(font_h)
            meta[SYMBOL_PDF_DOC_FONTS] = fonts

        meta[SYMBOL_VERSIONS] = version.libs()

        if self.et.errors_reported():
            meta[SYMBOL_ERRORS] = self.et.to_record()
        return meta

    def output_meta(self, writer: RecordWriter) -> None:
        writer.write_key_value(SYMBOL_META, self.meta())

    def output_page(self, page_index: int, writer: RecordWriter) -> None:
        """Process the 0-based ``page_index`` and write its record, if any."""

        page_num = page_index + 1
        if page_num > self.document.num_pages:
            return
        self.process_page(self.eng_odev, page_num)
        page = self.eng_odev.page_data()
        if page is None:
            return
        if self.et.errors_reported():
            page.errors = self.et.to_record()
        writer.write_array_item(page.to_record())

    def process(self, stream: TextIO) -> TextIO:
        """Write ``{"meta": {...}, "pages": [...]}`` one page at a time."""

        writer = RecordWriter(stream)
        with time_block(LOGGER, f"Processing {self.options.pdf_filename}"):
            writer.begin_record()
            self.output_meta(writer)
            writer.begin_array(SYMBOL_PAGES)
            for page_num in self._page_range():
                self.output_page(page_num - 1, writer)
            writer.end_array()
            writer.end_record()
        return stream
