from __future__ import annotations

import io
import json

import pytest

from pdfrecord.serializer import RecordWriter


def test_nested_record_is_valid_json() -> None:
    stream = io.StringIO()
    writer = RecordWriter(stream)
    writer.begin_record()
    writer.write_key_value("meta", {"num_pages": 2, "title": "Café"})
    writer.begin_array("pages")
    writer.write_array_item({"pgnum": 0})
    writer.write_array_item({"pgnum": 1})
    writer.end_array()
    writer.end_record()

    assert writer.depth == 0
    assert json.loads(stream.getvalue()) == {
        "meta": {"num_pages": 2, "title": "Café"},
        "pages": [{"pgnum": 0}, {"pgnum": 1}],
    }
    assert "Café" in stream.getvalue()


def test_empty_containers() -> None:
    stream = io.StringIO()
    writer = RecordWriter(stream)
    writer.begin_record()
    writer.begin_array("pages")
    writer.end_array()
    writer.end_record()

    assert stream.getvalue() == '{"pages": []}'


def test_members_are_separated_once() -> None:
    stream = io.StringIO()
    writer = RecordWriter(stream)
    writer.begin_array()
    for value in (1, "two", None):
        writer.write_array_item(value)
    writer.end_array()

    assert stream.getvalue() == '[1, "two", null]'


def test_writing_outside_a_container_fails() -> None:
    writer = RecordWriter(io.StringIO())
    with pytest.raises(RuntimeError):
        writer.write_key_value("meta", {})
    with pytest.raises(RuntimeError):
        writer.end_record()
