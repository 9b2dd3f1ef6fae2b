from __future__ import annotations

from datetime import datetime, timezone

from jenkinsfn.core.properties import format_timestamp, load_properties, store_properties


def test_store_escapes_like_java_properties():
    text = store_properties(
        {"a key": "x=y:z", "k#1": " leading space", "uni": "café"},
        comment="Generated",
        with_timestamp=False,
    )
    assert text.splitlines() == [
        "#Generated",
        "a\\ key=x\\=y\\:z",
        "k\\#1=\\ leading space",
        "uni=café",
    ]


def test_store_can_escape_non_ascii_like_output_stream_form():
    text = store_properties({"uni": "café", "emoji": "\U0001f600"}, with_timestamp=False, escape_unicode=True)
    assert text.splitlines() == ["emoji=\\uD83D\\uDE00", "uni=caf\\u00E9"]


def test_multiline_comment_is_prefixed_per_line():
    text = store_properties({}, comment="one\ntwo", with_timestamp=False)
    assert text == "#one\n#two\n"


def test_comment_lines_keep_existing_comment_markers():
    text = store_properties({}, comment="one\n#two\r\n!three\nfour \u20ac", with_timestamp=False)
    assert text == "#one\n#two\n!three\n#four \\u20AC\n"


def test_timestamp_format():
    ts = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert format_timestamp(ts) == "Fri Jan 02 03:04:05 UTC 2026"


def test_load_reads_stored_text_back():
    entries = {"greet": "acme.greet.GreetStep", "odd key": "tab\there", "emoji": "\U0001f600"}
    assert load_properties(store_properties(entries, comment="c")) == entries


def test_load_handles_separators_comments_and_continuations():
    text = (
        "# comment\n"
        "! also a comment\n"
        "\n"
        "a=1\n"
        "b : 2\n"
        "c 3\n"
        "d=first \\\n"
        "   second\n"
        "e\n"
        "a=override\n"
    )
    assert load_properties(text) == {"a": "override", "b": "2", "c": "3", "d": "first second", "e": ""}
