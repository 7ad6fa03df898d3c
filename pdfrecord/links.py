"""Link actions and their resolution into outline/link targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Union

from pypdf.generic import ArrayObject, DictionaryObject, NameObject

from .document import Catalog, LinkDest, resolve_indirect
from .utils import decode_pdf_string, get_logger, strip_name

__all__ = [
    "ExternalFileTarget",
    "GoToAction",
    "GoToRAction",
    "LinkAction",
    "LinkTarget",
    "LinkTargetResolver",
    "PageTarget",
    "URIAction",
    "UnhandledAction",
    "UriTarget",
    "parse_action",
]

LOGGER = get_logger("pdfrecord.links")


# -- Actions -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GoToAction:
    dest: LinkDest | None = None
    named_dest: str | None = None


@dataclass(frozen=True, slots=True)
class GoToRAction:
    file_name: str
    dest: LinkDest | None = None
    named_dest: str | None = None


@dataclass(frozen=True, slots=True)
class URIAction:
    uri: str


@dataclass(frozen=True, slots=True)
class UnhandledAction:
    kind: str


LinkAction = Union[GoToAction, GoToRAction, URIAction, UnhandledAction]


def _split_destination(raw: object | None) -> tuple[LinkDest | None, str | None]:
    raw = resolve_indirect(raw)
    if isinstance(raw, (ArrayObject, DictionaryObject)):
        return LinkDest.from_array(raw), None
    if isinstance(raw, NameObject):
        return None, str(raw)
    name = decode_pdf_string(raw)
    return None, name or None


def _file_spec_name(spec: object | None) -> str | None:
    spec = resolve_indirect(spec)
    if isinstance(spec, DictionaryObject):
        for key in ("/UF", "/F", "/Unix", "/DOS"):
            name = decode_pdf_string(resolve_indirect(spec.get(NameObject(key))))
            if name:
                return name
        return None
    return decode_pdf_string(spec)


def parse_action(action: object | None) -> LinkAction | None:
    """Build a :data:`LinkAction` from a PDF action dictionary."""

    action = resolve_indirect(action)
    if not isinstance(action, DictionaryObject):
        return None
    kind = strip_name(resolve_indirect(action.get(NameObject("/S"))) or "Unknown")
    if kind == "GoTo":
        dest, named = _split_destination(action.get(NameObject("/D")))
        return GoToAction(dest=dest, named_dest=named)
    if kind == "GoToR":
        dest, named = _split_destination(action.get(NameObject("/D")))
        file_name = _file_spec_name(action.get(NameObject("/F"))) or ""
        return GoToRAction(file_name=file_name, dest=dest, named_dest=named)
    if kind == "URI":
        uri = decode_pdf_string(resolve_indirect(action.get(NameObject("/URI"))))
        return URIAction(uri=uri or "")
    return UnhandledAction(kind=kind)


def dest_action(dest: object | None) -> GoToAction | None:
    """Wrap a bare ``/Dest`` entry as the equivalent GoTo action."""

    if dest is None:
        return None
    explicit, named = _split_destination(dest)
    if explicit is None and named is None:
        return None
    return GoToAction(dest=explicit, named_dest=named)


# -- Targets -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PageTarget:
    page_number: int
    link: Mapping[str, object] = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class ExternalFileTarget:
    filename: str
    page_number: int | None = None
    link: Mapping[str, object] = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class UriTarget:
    uri: str


LinkTarget = Union[PageTarget, ExternalFileTarget, UriTarget]


def target_record(target: LinkTarget) -> dict[str, object]:
    """Return the ``page``/``dest``/``link`` keys describing ``target``."""

    record: dict[str, object] = {}
    if isinstance(target, PageTarget):
        record["page"] = target.page_number
    elif isinstance(target, ExternalFileTarget):
        if target.page_number is not None:
            record["page"] = target.page_number
        record["dest"] = target.filename
    elif isinstance(target, UriTarget):
        record["dest"] = target.uri
    link = getattr(target, "link", None)
    if link:
        record["link"] = dict(link)
    return record


# -- Resolution ----------------------------------------------------------------


def link_meta(dest: LinkDest, page_height: float | None) -> dict[str, object]:
    """Destination hints with vertical coordinates measured from the page top."""

    meta: dict[str, object] = {"type": dest.kind.lower()}
    if dest.left is not None:
        meta["left"] = dest.left
    if dest.top is not None:
        meta["top"] = page_height - dest.top if page_height is not None else dest.top
    if dest.right is not None:
        meta["right"] = dest.right
    if dest.bottom is not None:
        meta["bottom"] = page_height - dest.bottom if page_height is not None else dest.bottom
    if dest.zoom:
        meta["zoom"] = dest.zoom
    return meta


class LinkTargetResolver:
    """Resolves link actions against a document catalog.

    ``page_height`` maps a 0-based page index to the height used to flip
    vertical coordinates (media box or crop box, chosen once per session).
    """

    def __init__(self, catalog: Catalog, page_height: Callable[[int], float | None]) -> None:
        self.catalog = catalog
        self.page_height = page_height

    def resolve(self, action: LinkAction) -> LinkTarget | None:
        if isinstance(action, GoToAction):
            return self._resolve_goto(action)
        if isinstance(action, GoToRAction):
            if not action.file_name:
                LOGGER.debug("GoToR action without a file specification")
                return None
            return self._resolve_goto_r(action)
        if isinstance(action, URIAction):
            if not action.uri:
                LOGGER.debug("URI action without a URI")
                return None
            return UriTarget(uri=action.uri)
        return None

    def find_dest(self, dest: LinkDest | None, named_dest: str | None) -> LinkDest | None:
        # an explicit destination always wins over a named one
        if dest is not None:
            return dest
        if named_dest:
            return self.catalog.find_dest(named_dest)
        return None

    def page_number(self, dest: LinkDest) -> int | None:
        if dest.is_page_ref:
            num, gen = dest.page_ref  # type: ignore[misc]
            return self.catalog.find_page(num, gen)
        return dest.page_num

    def _resolve_goto(self, action: GoToAction) -> PageTarget | None:
        dest = self.find_dest(action.dest, action.named_dest)
        if dest is None:
            LOGGER.debug("GoTo action without a usable destination (named=%r)", action.named_dest)
            return None
        page_number = self.page_number(dest)
        if page_number is None:
            LOGGER.debug("Destination page %r is not part of the document", dest.page_ref)
            return None
        return PageTarget(page_number=page_number, link=link_meta(dest, self.page_height(page_number)))

    def _resolve_goto_r(self, action: GoToRAction) -> ExternalFileTarget:
        dest = self.find_dest(action.dest, action.named_dest)
        if dest is None:
            return ExternalFileTarget(filename=action.file_name)
        # coordinates refer to the other file, whose page sizes are unknown
        return ExternalFileTarget(
            filename=action.file_name,
            page_number=self.page_number(dest),
            link=link_meta(dest, None),
        )
