"""Document font statistics shared by the pre-scan and the page devices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pypdf import PageObject
from pypdf.generic import ArrayObject, DictionaryObject, IndirectObject, NameObject

from .document import Document, resolve_indirect
from .errors import ErrorKind, ErrorTracker
from .utils import get_logger, strip_name

__all__ = ["FontEngDev", "FontEngine", "FontEntry", "TextVisitor", "visit_text"]

LOGGER = get_logger("pdfrecord.fonts")
MODULE = "fonts"

STANDARD_14 = frozenset(
    {
        "Courier",
        "Courier-Bold",
        "Courier-BoldOblique",
        "Courier-Oblique",
        "Helvetica",
        "Helvetica-Bold",
        "Helvetica-BoldOblique",
        "Helvetica-Oblique",
        "Symbol",
        "Times-Roman",
        "Times-Bold",
        "Times-BoldItalic",
        "Times-Italic",
        "ZapfDingbats",
    }
)

_FONT_FILE_KEYS = ("/FontFile", "/FontFile2", "/FontFile3")

TextVisitor = Callable[[str, list, list, "DictionaryObject | None", float], None]


@dataclass(slots=True)
class FontEntry:
    name: str
    font_type: str
    embedded: bool
    subset: bool

    @property
    def family(self) -> str:
        return self.name.split(",")[0].split("-")[0]

    def to_record(self) -> dict[str, object]:
        return {
            "name": self.name,
            "family": self.family,
            "type": self.font_type,
            "embedded": self.embedded,
            "is_subset": self.subset,
        }


def _descendant_font(font: DictionaryObject) -> DictionaryObject | None:
    descendants = resolve_indirect(font.get(NameObject("/DescendantFonts")))
    if isinstance(descendants, ArrayObject) and descendants:
        first = resolve_indirect(descendants[0])
        if isinstance(first, DictionaryObject):
            return first
    return None


def _is_embedded(font: DictionaryObject) -> bool:
    if strip_name(font.get(NameObject("/Subtype"), "")) == "Type3":
        return True
    for candidate in (font, _descendant_font(font)):
        if candidate is None:
            continue
        descriptor = resolve_indirect(candidate.get(NameObject("/FontDescriptor")))
        if isinstance(descriptor, DictionaryObject) and any(
            descriptor.get(NameObject(key)) is not None for key in _FONT_FILE_KEYS
        ):
            return True
    return False


class FontEngine:
    """Collects the fonts and font sizes seen while processing pages."""

    def __init__(self, tracker: ErrorTracker) -> None:
        self.tracker = tracker
        self._fonts: dict[object, int] = {}
        self._entries: list[FontEntry] = []
        self._sizes: set[float] = set()
        self._found_font_warnings = False

    def found_font_warnings(self) -> bool:
        return self._found_font_warnings

    def get_font_list(self) -> list[FontEntry]:
        return list(self._entries)

    def get_font_size_list(self) -> list[float]:
        """Font sizes seen so far, largest first, without duplicates."""
        return sorted(self._sizes, reverse=True)

    def track(self, font: DictionaryObject | None, size: float | None) -> int | None:
        """Record a font use and return the font's index in the document list."""

        if size:
            self._sizes.add(round(abs(float(size)), 2))
        if not isinstance(font, DictionaryObject):
            return None
        key = self._font_key(font)
        index = self._fonts.get(key)
        if index is None:
            index = self._register(key, font)
        return index

    @staticmethod
    def _font_key(font: DictionaryObject) -> object:
        ref = getattr(font, "indirect_reference", None)
        if isinstance(ref, IndirectObject):
            return ref.idnum, ref.generation
        return strip_name(font.get(NameObject("/BaseFont"), "")) or id(font)

    def _register(self, key: object, font: DictionaryObject) -> int:
        font_type = strip_name(font.get(NameObject("/Subtype"), "Unknown"))
        base_font = strip_name(resolve_indirect(font.get(NameObject("/BaseFont"))) or "")
        subset = len(base_font) > 7 and base_font[6] == "+" and base_font[:6].isupper()
        name = base_font[7:] if subset else base_font
        embedded = _is_embedded(font)

        if not name and font_type != "Type3":
            self._warn(f"{font_type} font without /BaseFont")
        elif not embedded and name not in STANDARD_14:
            self._warn(f"font '{name}' is not embedded")

        entry = FontEntry(name=name or "unnamed", font_type=font_type, embedded=embedded, subset=subset)
        self._entries.append(entry)
        index = len(self._entries) - 1
        self._fonts[key] = index
        LOGGER.debug("Registered font %d: %s (%s)", index, entry.name, font_type)
        return index

    def _warn(self, message: str) -> None:
        self._found_font_warnings = True
        self.tracker.log_warn(ErrorKind.FONT_WARNING, MODULE, message)


def visit_text(page: PageObject, visitor: TextVisitor) -> None:
    """Run pypdf text extraction over ``page`` only for its visitor callbacks."""
    page.extract_text(visitor_text=visitor)


class FontEngDev:
    """Pre-scan device: feeds page fonts to the font engine, produces nothing."""

    def __init__(self, font_engine: FontEngine) -> None:
        self.font_engine = font_engine

    def display_page(self, document: Document, page_num: int) -> None:
        page = document.get_page(page_num)

        def _visitor(text, cm, tm, font_dict, font_size) -> None:
            if text and text.strip():
                self.font_engine.track(font_dict, font_size)

        visit_text(page, _visitor)
