"""Thin document engine facade around :class:`pypdf.PdfReader`.

The reader core only needs a handful of contracts from the engine: an open
status with a diagnostic string, the page count and version pair, a catalog
able to map page references and named destinations, the outline root and the
page box heights. This module exposes exactly that on top of pypdf.

Page numbers passed to :class:`Document` accessors are 1-based, matching
viewer numbering. :meth:`Catalog.find_page` and :class:`LinkDest` page
numbers are 0-based.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator

from pypdf import PasswordType, PdfReader
from pypdf.errors import DependencyError, PdfReadError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
)

from .utils import decode_pdf_string, get_logger, strip_name

__all__ = [
    "Catalog",
    "Document",
    "LinkDest",
    "OutlineItem",
    "resolve_indirect",
]

LOGGER = get_logger("pdfrecord.document")

_HEADER_VERSION = re.compile(r"%PDF-(\d+)\.(\d+)")
_MAX_NAME_TREE_DEPTH = 32


def resolve_indirect(obj: object | None) -> object | None:
    if isinstance(obj, IndirectObject):
        try:
            return obj.get_object()
        except (PdfReadError, ValueError, KeyError) as exc:
            LOGGER.debug("Unable to resolve %r: %s", obj, exc)
            return None
    return obj


def _object_ref(obj: object | None) -> tuple[int, int] | None:
    if isinstance(obj, IndirectObject):
        return obj.idnum, obj.generation
    ref = getattr(obj, "indirect_reference", None)
    if isinstance(ref, IndirectObject):
        return ref.idnum, ref.generation
    return None


def _number(value: object | None) -> float | None:
    value = resolve_indirect(value)
    if value is None or isinstance(value, NullObject):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


# -- Destinations --------------------------------------------------------------

# coordinate slots following the fit type in an explicit destination array
_DEST_LAYOUT: dict[str, tuple[str, ...]] = {
    "XYZ": ("left", "top", "zoom"),
    "Fit": (),
    "FitB": (),
    "FitH": ("top",),
    "FitBH": ("top",),
    "FitV": ("left",),
    "FitBV": ("left",),
    "FitR": ("left", "bottom", "right", "top"),
}


@dataclass(frozen=True, slots=True)
class LinkDest:
    """An explicit destination: a page plus positional and zoom hints."""

    kind: str
    page_ref: tuple[int, int] | None = None
    page_num: int | None = None
    left: float | None = None
    bottom: float | None = None
    right: float | None = None
    top: float | None = None
    zoom: float | None = None

    @property
    def is_page_ref(self) -> bool:
        return self.page_ref is not None

    @classmethod
    def from_array(cls, array: object | None) -> "LinkDest | None":
        """Parse a ``[page /Type args...]`` destination array."""

        array = resolve_indirect(array)
        if isinstance(array, DictionaryObject):
            # named destination values may be wrapped as << /D [...] >>
            return cls.from_array(array.get(NameObject("/D")))
        if not isinstance(array, ArrayObject) or not array:
            return None

        page = array[0]
        page_ref: tuple[int, int] | None = None
        page_num: int | None = None
        if isinstance(page, (IndirectObject, DictionaryObject)):
            page_ref = _object_ref(page)
        elif isinstance(page, (NumberObject, int)):
            page_num = int(page)
        if page_ref is None and page_num is None:
            return None

        kind = strip_name(array[1]) if len(array) > 1 else "XYZ"
        slots = _DEST_LAYOUT.get(kind)
        if slots is None:
            return None
        values = {name: _number(array[index + 2]) for index, name in enumerate(slots) if index + 2 < len(array)}
        return cls(kind=kind, page_ref=page_ref, page_num=page_num, **values)


# -- Catalog -------------------------------------------------------------------


class Catalog:
    """Page and named-destination lookups against the document catalog."""

    def __init__(self, reader: PdfReader) -> None:
        self._reader = reader
        self._page_index: dict[tuple[int, int], int] | None = None
        self._named: dict[str, object] | None = None

    @property
    def root(self) -> DictionaryObject:
        root = resolve_indirect(self._reader.trailer.get(NameObject("/Root")))
        if not isinstance(root, DictionaryObject):
            raise PdfReadError("Document catalog is missing")
        return root

    def find_page(self, num: int, gen: int) -> int | None:
        """Return the 0-based index of the page object ``num gen R``."""

        if self._page_index is None:
            index: dict[tuple[int, int], int] = {}
            for page_index, page in enumerate(self._reader.pages):
                ref = _object_ref(page)
                if ref is not None:
                    index.setdefault(ref, page_index)
            self._page_index = index
        return self._page_index.get((num, gen))

    def find_dest(self, name: str) -> LinkDest | None:
        named = self._named_destinations()
        value = named.get(name)
        if value is None:
            value = named.get(strip_name(name))
        if value is None:
            return None
        return LinkDest.from_array(value)

    def _named_destinations(self) -> dict[str, object]:
        if self._named is not None:
            return self._named
        named: dict[str, object] = {}
        root = self.root
        # PDF 1.2+ name tree takes precedence over the 1.1 /Dests dictionary
        dests = resolve_indirect(root.get(NameObject("/Dests")))
        if isinstance(dests, DictionaryObject):
            for key, value in dests.items():
                named[strip_name(key)] = value
        names = resolve_indirect(root.get(NameObject("/Names")))
        if isinstance(names, DictionaryObject):
            tree = resolve_indirect(names.get(NameObject("/Dests")))
            if isinstance(tree, DictionaryObject):
                self._walk_name_tree(tree, named, depth=0, seen=set())
        self._named = named
        return named

    def _walk_name_tree(
        self,
        node: DictionaryObject,
        named: dict[str, object],
        *,
        depth: int,
        seen: set[int],
    ) -> None:
        if depth > _MAX_NAME_TREE_DEPTH or id(node) in seen:
            return
        seen.add(id(node))
        pairs = resolve_indirect(node.get(NameObject("/Names")))
        if isinstance(pairs, ArrayObject):
            for index in range(0, len(pairs) - 1, 2):
                key = decode_pdf_string(resolve_indirect(pairs[index]))
                if key is not None:
                    named[key] = pairs[index + 1]
        kids = resolve_indirect(node.get(NameObject("/Kids")))
        if isinstance(kids, ArrayObject):
            for kid in kids:
                resolved = resolve_indirect(kid)
                if isinstance(resolved, DictionaryObject):
                    self._walk_name_tree(resolved, named, depth=depth + 1, seen=seen)


# -- Outline items -------------------------------------------------------------


class OutlineItem:
    """One node of the document outline.

    Children are only reachable between :meth:`open` and :meth:`close`; use
    :meth:`expanded` to get that scoping for free.
    """

    def __init__(self, node: DictionaryObject, ref: tuple[int, int] | None = None) -> None:
        self._node = node
        self.ref = ref
        self._kids: list[OutlineItem] | None = None

    @property
    def title(self) -> str:
        return decode_pdf_string(resolve_indirect(self._node.get(NameObject("/Title")))) or ""

    @property
    def action(self) -> DictionaryObject | None:
        action = resolve_indirect(self._node.get(NameObject("/A")))
        return action if isinstance(action, DictionaryObject) else None

    @property
    def dest(self) -> object | None:
        return resolve_indirect(self._node.get(NameObject("/Dest")))

    def has_kids(self) -> bool:
        return isinstance(resolve_indirect(self._node.get(NameObject("/First"))), DictionaryObject)

    def open(self) -> None:
        if self._kids is None:
            self._kids = list(iter_siblings(self._node.get(NameObject("/First"))))

    def close(self) -> None:
        self._kids = None

    @property
    def kids(self) -> list["OutlineItem"]:
        if self._kids is None:
            raise RuntimeError("Outline item must be opened before accessing its children")
        return self._kids

    @contextmanager
    def expanded(self) -> Iterator[list["OutlineItem"]]:
        self.open()
        try:
            yield self.kids
        finally:
            self.close()


def iter_siblings(first: object | None) -> Iterator[OutlineItem]:
    """Yield the ``/Next`` chain starting at ``first``.

    A repeated object is yielded once more so callers can report the
    cycle, then iteration stops.
    """

    seen: set[tuple[int, int]] = set()
    current = first
    while current is not None:
        ref = _object_ref(current)
        node = resolve_indirect(current)
        if not isinstance(node, DictionaryObject):
            return
        yield OutlineItem(node, ref)
        if ref is not None:
            if ref in seen:
                return
            seen.add(ref)
        current = node.get(NameObject("/Next"))


# -- Document ------------------------------------------------------------------


class Document:
    """An opened PDF. Check :attr:`is_ok` before using anything else."""

    def __init__(
        self,
        path: str | Path,
        *,
        owner_password: str = "",
        user_password: str = "",
    ) -> None:
        self.path = Path(path)
        self.reader: PdfReader | None = None
        self.error_string: str | None = None
        self._stream: IO[bytes] | None = None
        self._catalog: Catalog | None = None
        self._num_pages = 0
        self._open(owner_password, user_password)

    def _open(self, owner_password: str, user_password: str) -> None:
        try:
            self._stream = self.path.open("rb")
        except OSError as exc:
            self.error_string = f"Couldn't open file '{self.path}': {exc.strerror or exc}"
            return

        try:
            reader = PdfReader(self._stream)
            if reader.is_encrypted and not self._decrypt(reader, owner_password, user_password):
                self.error_string = "Incorrect password or unsupported encryption"
                return
            self._num_pages = len(reader.pages)
        except PdfReadError as exc:
            self.error_string = f"Damaged or invalid PDF file: {exc}"
            return
        except DependencyError as exc:
            self.error_string = f"Unsupported encryption: {exc}"
            return
        except (ValueError, KeyError, TypeError) as exc:
            self.error_string = f"Unexpected error reading PDF: {exc}"
            return
        finally:
            if self.error_string is not None:
                self.close()

        self.reader = reader
        self._catalog = Catalog(reader)
        LOGGER.debug("Opened %s (%d pages)", self.path, self._num_pages)

    @staticmethod
    def _decrypt(reader: PdfReader, owner_password: str, user_password: str) -> bool:
        # an empty user password is always attempted
        for password in dict.fromkeys((user_password or "", owner_password or "")):
            if reader.decrypt(password) != PasswordType.NOT_DECRYPTED:
                return True
        return False

    @property
    def is_ok(self) -> bool:
        return self.reader is not None

    @property
    def catalog(self) -> Catalog:
        if self._catalog is None:
            raise RuntimeError("Document is not open")
        return self._catalog

    @property
    def num_pages(self) -> int:
        return self._num_pages

    @property
    def pdf_version(self) -> tuple[int, int]:
        header = getattr(self.reader, "pdf_header", "") or ""
        match = _HEADER_VERSION.search(header)
        if not match:
            return 0, 0
        return int(match.group(1)), int(match.group(2))

    def outline_items(self) -> list[OutlineItem]:
        outlines = resolve_indirect(self.catalog.root.get(NameObject("/Outlines")))
        if not isinstance(outlines, DictionaryObject):
            return []
        return list(iter_siblings(outlines.get(NameObject("/First"))))

    def get_page(self, page_num: int):
        if self.reader is None or not 1 <= page_num <= self._num_pages:
            raise IndexError(f"page {page_num} is out of range")
        return self.reader.pages[page_num - 1]

    def page_media_height(self, page_num: int) -> float:
        return float(self.get_page(page_num).mediabox.height)

    def page_crop_height(self, page_num: int) -> float:
        return float(self.get_page(page_num).cropbox.height)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
