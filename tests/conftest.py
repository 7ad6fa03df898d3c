from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    RectangleObject,
    TextStringObject,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def _name(value: str) -> NameObject:
    return NameObject(value)


def goto(page_ref: IndirectObject, kind: str = "/XYZ", *args: float | None) -> DictionaryObject:
    dest = ArrayObject([page_ref, _name(kind)])
    dest.extend(NullObject() if arg is None else FloatObject(arg) for arg in args)
    return DictionaryObject({_name("/S"): _name("/GoTo"), _name("/D"): dest})


def goto_named(name: str) -> DictionaryObject:
    return DictionaryObject({_name("/S"): _name("/GoTo"), _name("/D"): TextStringObject(name)})


def goto_r(filename: str, page: int | None = None) -> DictionaryObject:
    action = DictionaryObject({_name("/S"): _name("/GoToR"), _name("/F"): TextStringObject(filename)})
    if page is not None:
        action[_name("/D")] = ArrayObject([NumberObject(page), _name("/Fit")])
    return action


def uri(value: str) -> DictionaryObject:
    return DictionaryObject({_name("/S"): _name("/URI"), _name("/URI"): TextStringObject(value)})


def launch(filename: str) -> DictionaryObject:
    return DictionaryObject({_name("/S"): _name("/Launch"), _name("/F"): TextStringObject(filename)})


def add_outline(writer: PdfWriter, items: list[dict[str, Any]], parent: IndirectObject) -> tuple[IndirectObject, IndirectObject]:
    """Write ``items`` as a sibling chain under ``parent``; returns (first, last)."""

    written: list[tuple[IndirectObject, DictionaryObject, dict[str, Any]]] = []
    for item in items:
        node = DictionaryObject()
        node[_name("/Title")] = TextStringObject(item["title"])
        node[_name("/Parent")] = parent
        if "action" in item:
            node[_name("/A")] = item["action"]
        if "dest" in item:
            node[_name("/Dest")] = item["dest"]
        written.append((writer._add_object(node), node, item))

    for index, (ref, node, item) in enumerate(written):
        if index > 0:
            node[_name("/Prev")] = written[index - 1][0]
        if index < len(written) - 1:
            node[_name("/Next")] = written[index + 1][0]
        children = item.get("children")
        if children:
            first, last = add_outline(writer, children, ref)
            node[_name("/First")] = first
            node[_name("/Last")] = last
            node[_name("/Count")] = NumberObject(len(children))
    return written[0][0], written[-1][0]


def attach_outline(writer: PdfWriter, items: list[dict[str, Any]]) -> None:
    root = DictionaryObject({_name("/Type"): _name("/Outlines")})
    root_ref = writer._add_object(root)
    first, last = add_outline(writer, items, root_ref)
    root[_name("/First")] = first
    root[_name("/Last")] = last
    root[_name("/Count")] = NumberObject(len(items))
    writer._root_object[_name("/Outlines")] = root_ref


def attach_named_dests(writer: PdfWriter, dests: dict[str, ArrayObject]) -> None:
    pairs = ArrayObject()
    for name in sorted(dests):
        pairs.append(TextStringObject(name))
        pairs.append(dests[name])
    tree = DictionaryObject({_name("/Names"): pairs})
    writer._root_object[_name("/Names")] = DictionaryObject({_name("/Dests"): writer._add_object(tree)})


def write_pdf(writer: PdfWriter, path: Path) -> Path:
    with path.open("wb") as stream:
        writer.write(stream)
    return path


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    for _ in range(5):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Producer": "pdfrecord-tests", "/Title": "Sample"})
    return write_pdf(writer, tmp_path / "sample.pdf")


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[[int], Path]:
    def _create(pages: int, filename: str | None = None) -> Path:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=72, height=72)
        return write_pdf(writer, tmp_path / (filename or f"pages_{pages}.pdf"))

    return _create


@pytest.fixture()
def outline_pdf(tmp_path: Path) -> Path:
    """Four pages (200x300, crop box 200x250 on page 3) with a mixed outline."""

    writer = PdfWriter()
    for _ in range(4):
        writer.add_blank_page(width=200, height=300)
    writer.pages[2].cropbox = RectangleObject([0, 0, 200, 250])
    refs = [page.indirect_reference for page in writer.pages]

    attach_named_dests(writer, {"appendix": ArrayObject([refs[3], _name("/FitH"), FloatObject(280)])})
    attach_outline(
        writer,
        [
            {
                "title": "  Chapter  One \n",
                "action": goto(refs[0], "/XYZ", 10, 250, None),
                "children": [
                    {"title": "Section 1.1", "action": goto(refs[1], "/Fit")},
                    {"title": "Section 1.2", "dest": ArrayObject([refs[2], _name("/FitH"), FloatObject(200)])},
                ],
            },
            {"title": "Run me", "action": launch("setup.exe")},
            {"title": "Appendix", "action": goto_named("appendix")},
            {"title": "Other file", "action": goto_r("other.pdf", 3)},
            {"title": "Missing remote", "action": goto_r("missing.pdf")},
            {"title": "Website", "action": uri("https://example.com/docs")},
            {"title": "Dangling", "action": goto_named("nowhere")},
        ],
    )
    return write_pdf(writer, tmp_path / "outline.pdf")


@pytest.fixture()
def named_dest_pdf(tmp_path: Path) -> Path:
    """Three pages with a catalog /Dests dictionary and a /Names tree."""

    writer = PdfWriter()
    for _ in range(3):
        writer.add_blank_page(width=200, height=300)
    refs = [page.indirect_reference for page in writer.pages]

    writer._root_object[_name("/Dests")] = writer._add_object(
        DictionaryObject(
            {
                _name("/Chapter2"): ArrayObject([refs[1], _name("/Fit")]),
                _name("/intro"): ArrayObject([refs[0], _name("/Fit")]),
            }
        )
    )
    attach_named_dests(writer, {"intro": ArrayObject([refs[2], _name("/Fit")])})
    attach_outline(
        writer,
        [
            {
                "title": "By name object",
                "action": DictionaryObject({_name("/S"): _name("/GoTo"), _name("/D"): _name("/Chapter2")}),
            },
            {"title": "By string", "action": goto_named("Chapter2")},
            {"title": "Intro", "action": goto_named("intro")},
        ],
    )
    return write_pdf(writer, tmp_path / "named.pdf")


@pytest.fixture()
def text_pdf(tmp_path: Path) -> Path:
    """Two pages of text in a standard font and a non-embedded custom font."""

    writer = PdfWriter()
    helvetica = writer._add_object(
        DictionaryObject(
            {
                _name("/Type"): _name("/Font"),
                _name("/Subtype"): _name("/Type1"),
                _name("/BaseFont"): _name("/Helvetica"),
                _name("/Encoding"): _name("/WinAnsiEncoding"),
            }
        )
    )
    custom = writer._add_object(
        DictionaryObject(
            {
                _name("/Type"): _name("/Font"),
                _name("/Subtype"): _name("/Type1"),
                _name("/BaseFont"): _name("/CustomSans"),
                _name("/Encoding"): _name("/WinAnsiEncoding"),
            }
        )
    )
    contents = [
        b"BT /F1 12 Tf 50 350 Td (Hello World) Tj ET\n"
        b"BT /F2 18 Tf 50 300 Td (Heading) Tj ET\n"
        b"BT /F1 12 Tf 50 250 Td (More text) Tj ET\n",
        b"BT /F1 9.5 Tf 50 350 Td (Footnote) Tj ET\n",
    ]
    for data in contents:
        page = writer.add_blank_page(width=300, height=400)
        stream = DecodedStreamObject()
        stream.set_data(data)
        page[_name("/Contents")] = writer._add_object(stream)
        page[_name("/Resources")] = DictionaryObject(
            {_name("/Font"): DictionaryObject({_name("/F1"): helvetica, _name("/F2"): custom})}
        )
    return write_pdf(writer, tmp_path / "text.pdf")


@pytest.fixture()
def link_pdf(tmp_path: Path) -> Path:
    """Two pages; page 1 carries a GoTo link, a URI link and a JavaScript link."""

    writer = PdfWriter()
    for _ in range(2):
        writer.add_blank_page(width=200, height=300)
    target = writer.pages[1].indirect_reference

    def _annot(rect: list[float], action: DictionaryObject) -> IndirectObject:
        return writer._add_object(
            DictionaryObject(
                {
                    _name("/Type"): _name("/Annot"),
                    _name("/Subtype"): _name("/Link"),
                    _name("/Rect"): ArrayObject(FloatObject(v) for v in rect),
                    _name("/A"): action,
                }
            )
        )

    script = DictionaryObject({_name("/S"): _name("/JavaScript"), _name("/JS"): TextStringObject("app.alert(1)")})
    writer.pages[0][_name("/Annots")] = ArrayObject(
        [
            _annot([10, 260, 90, 280], goto(target, "/XYZ", 0, 300, 0)),
            _annot([10, 200, 90, 220], uri("https://example.com")),
            _annot([10, 100, 90, 120], script),
        ]
    )
    return write_pdf(writer, tmp_path / "links.pdf")


@pytest.fixture()
def encrypted_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.encrypt(user_password="secret", owner_password="owner-secret", algorithm="RC4-128")
    return write_pdf(writer, tmp_path / "encrypted.pdf")


@pytest.fixture()
def outline_builders() -> dict[str, Callable[..., Any]]:
    return {
        "goto": goto,
        "goto_named": goto_named,
        "goto_r": goto_r,
        "uri": uri,
        "launch": launch,
        "add_outline": add_outline,
        "attach_outline": attach_outline,
        "write_pdf": write_pdf,
    }
