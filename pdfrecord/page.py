"""Page-level extraction devices and the page record they produce."""

from __future__ import annotations

from dataclasses import dataclass, field

from pypdf import PageObject
from pypdf.generic import ArrayObject, DictionaryObject, NameObject, RectangleObject

from .document import Document, resolve_indirect
from .errors import ErrorKind, ErrorTracker
from .fonts import FontEngine, visit_text
from .links import LinkTargetResolver, UnhandledAction, dest_action, parse_action, target_record
from .utils import get_logger, strip_name

__all__ = ["LinkOutputDev", "PageOutputDev", "PdfPage", "extract_links"]

LOGGER = get_logger("pdfrecord.page")
MODULE = "page"


@dataclass(slots=True)
class PdfPage:
    """Serializable result of processing one page. ``pgnum`` is 0-based."""

    pgnum: int
    width: float
    height: float
    rotation: int = 0
    fonts: set[int] = field(default_factory=set)
    text_spans: list[dict[str, object]] = field(default_factory=list)
    links: list[dict[str, object]] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)

    def to_record(self) -> dict[str, object]:
        record: dict[str, object] = {
            "pgnum": self.pgnum,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
        }
        if self.fonts:
            record["fonts"] = sorted(self.fonts)
        if self.text_spans:
            record["text_spans"] = list(self.text_spans)
        if self.links:
            record["links"] = list(self.links)
        if self.errors:
            record["errors"] = list(self.errors)
        return record


def _page_box(page: PageObject, use_media_box: bool) -> RectangleObject:
    return page.mediabox if use_media_box else page.cropbox


def extract_links(
    page: PageObject,
    resolver: LinkTargetResolver,
    tracker: ErrorTracker,
    box: RectangleObject,
) -> list[dict[str, object]]:
    """Return the link annotations of ``page`` with their resolved targets."""

    annotations = resolve_indirect(page.get(NameObject("/Annots")))
    if not isinstance(annotations, ArrayObject):
        return []
    box_left, box_top = float(box.left), float(box.top)
    links: list[dict[str, object]] = []
    for entry in annotations:
        annot = resolve_indirect(entry)
        if not isinstance(annot, DictionaryObject):
            continue
        if strip_name(annot.get(NameObject("/Subtype"), "")) != "Link":
            continue
        rect = resolve_indirect(annot.get(NameObject("/Rect")))
        if not isinstance(rect, ArrayObject) or len(rect) < 4:
            tracker.log_warn(ErrorKind.ANNOTATION, MODULE, "link annotation without a usable /Rect")
            continue
        try:
            left, bottom, right, top = [float(resolve_indirect(rect[i])) for i in range(4)]
        except (TypeError, ValueError):
            tracker.log_warn(ErrorKind.ANNOTATION, MODULE, "link annotation with a non-numeric /Rect")
            continue

        raw_action = annot.get(NameObject("/A"))
        if raw_action is not None:
            action = parse_action(raw_action)
        else:
            action = dest_action(resolve_indirect(annot.get(NameObject("/Dest"))))
        if isinstance(action, UnhandledAction):
            tracker.log_warn(ErrorKind.UNHANDLED_LINK_ACTION, MODULE, f"link action kind: {action.kind}")
            continue
        target = resolver.resolve(action) if action is not None else None
        if target is None:
            continue

        link: dict[str, object] = {
            "rect": [
                round(min(left, right) - box_left, 2),
                round(box_top - max(bottom, top), 2),
                round(max(left, right) - box_left, 2),
                round(box_top - min(bottom, top), 2),
            ]
        }
        link.update(target_record(target))
        links.append(link)
    return links


class LinkOutputDev:
    """Device that ignores text and graphics and only collects page links."""

    def __init__(
        self,
        resolver: LinkTargetResolver,
        tracker: ErrorTracker,
        *,
        use_media_box: bool = True,
    ) -> None:
        self.resolver = resolver
        self.tracker = tracker
        self.use_media_box = use_media_box
        self._page: PdfPage | None = None

    def start_page(self, page: PageObject, page_num: int) -> RectangleObject:
        box = _page_box(page, self.use_media_box)
        self._page = PdfPage(
            pgnum=page_num - 1,
            width=float(box.width),
            height=float(box.height),
            rotation=int(page.rotation or 0),
        )
        return box

    def display_page(self, document: Document, page_num: int) -> None:
        self._page = None
        page = document.get_page(page_num)
        box = self.start_page(page, page_num)
        self._page.links = extract_links(page, self.resolver, self.tracker, box)

    def page_data(self) -> PdfPage | None:
        return self._page


class PageOutputDev(LinkOutputDev):
    """Full page device: positioned text spans, fonts and links."""

    def __init__(
        self,
        resolver: LinkTargetResolver,
        tracker: ErrorTracker,
        font_engine: FontEngine,
        *,
        use_media_box: bool = True,
    ) -> None:
        super().__init__(resolver, tracker, use_media_box=use_media_box)
        self.font_engine = font_engine

    def display_page(self, document: Document, page_num: int) -> None:
        super().display_page(document, page_num)
        page = document.get_page(page_num)
        box = _page_box(page, self.use_media_box)
        box_left, box_top = float(box.left), float(box.top)
        record = self._page

        def _visitor(text, cm, tm, font_dict, font_size) -> None:
            if not text or not text.strip():
                return
            font_idx = self.font_engine.track(font_dict, font_size)
            x = tm[4] * cm[0] + tm[5] * cm[2] + cm[4]
            y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
            span: dict[str, object] = {
                "text": text.strip(),
                "x": round(x - box_left, 2),
                "y": round(box_top - y, 2),
                "size": round(float(font_size or 0.0), 2),
            }
            if font_idx is not None:
                span["font_idx"] = font_idx
                record.fonts.add(font_idx)
            record.text_spans.append(span)

        visit_text(page, _visitor)
        LOGGER.debug("Page %d: %d text spans, %d links", page_num, len(record.text_spans), len(record.links))
