"""Tests for splitting documents into a header mapping and a body."""

from __future__ import annotations

import datetime as dt
import logging

import pytest

from octoblog.frontmatter import FrontMatter, parse_date, parse_front_matter


def test_header_and_body_are_split() -> None:
    text = "---\ntitle: Hello\ntags: [a, b]\n---\nBody line\n"

    header, body = parse_front_matter(text)

    assert header.get_str("title") == "Hello"
    assert header.get_list("tags") == ["a", "b"]
    assert body == "Body line\n"


def test_document_without_block_is_unchanged() -> None:
    text = "# Title\n\nNo header here.\n"

    header, body = parse_front_matter(text)

    assert not header
    assert body == text


def test_unterminated_block_is_unchanged() -> None:
    text = "---\ntitle: Hello\nno closing delimiter\n"

    header, body = parse_front_matter(text)

    assert header.as_dict() == {}
    assert body == text


def test_malformed_header_keeps_body(caplog: pytest.LogCaptureFixture) -> None:
    text = "---\ntitle: Hello\ninvalid: yaml: format\n---\n\nStill here.\n"

    with caplog.at_level(logging.WARNING):
        header, body = parse_front_matter(text, source="bad.md")

    assert header.as_dict() == {}
    assert body == "\nStill here.\n"
    assert "bad.md" in caplog.text


def test_non_mapping_header_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        header, body = parse_front_matter("---\n- a\n- b\n---\nText\n")

    assert not header
    assert body == "Text\n"
    assert "not a mapping" in caplog.text


def test_crlf_and_bom_are_normalized() -> None:
    text = "\ufeff---\r\ntitle: Windows\r\n---\r\nBody\r\n"

    header, body = parse_front_matter(text)

    assert header.get_str("title") == "Windows"
    assert body == "Body\n"


def test_empty_document() -> None:
    header, body = parse_front_matter("   \n")

    assert not header
    assert body == ""


def test_delimiter_lines_are_trimmed() -> None:
    header, _body = parse_front_matter("---  \ntitle: Spaced\n  ---\nBody\n")

    assert header.get_str("title") == "Spaced"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-01-15", dt.datetime(2024, 1, 15)),
        ("2024-01-15 08:30:00", dt.datetime(2024, 1, 15, 8, 30)),
        (dt.date(2024, 1, 15), dt.datetime(2024, 1, 15)),
        ("not a date", None),
        (42, None),
    ],
)
def test_parse_date(value: object, expected: dt.datetime | None) -> None:
    assert parse_date(value) == expected


def test_parse_date_with_offset_becomes_local() -> None:
    parsed = parse_date("2024-01-15 08:30:00 +0000")
    expected = (
        dt.datetime(2024, 1, 15, 8, 30, tzinfo=dt.UTC).astimezone().replace(tzinfo=None)
    )

    assert parsed == expected
    assert parsed is not None
    assert parsed.tzinfo is None


def test_typed_accessors() -> None:
    header = FrontMatter(
        {
            "title": 12,
            "comments": False,
            "categories": "news",
            "tags": ["x", 3, "y"],
        }
    )

    assert header.get_str("title") == "12"
    assert header.get_bool("comments", default=True) is False
    assert header.get_bool("missing", default=True) is True
    assert header.get_list("categories") == ["news"]
    assert header.get_list("tags") == ["x", "3", "y"]
    assert "title" in header
