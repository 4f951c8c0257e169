import io

import pytest

from letters.errors import MessageReadError, TruncatedMultipartError
from letters.reader import HeaderMap, MultipartReader, canonical_header_key, read_message


@pytest.mark.parametrize("name, expected", [
    ("message-ID", "Message-Id"),
    ("CONTENT-TYPE", "Content-Type"),
    ("x-mailer", "X-Mailer"),
    ("Subject", "Subject"),
])
def test_canonical_header_key(name, expected):
    assert canonical_header_key(name) == expected


def test_header_map_keeps_duplicates_in_order():
    headers = HeaderMap()
    headers.add("received", "first")
    headers.add("Received", "second")
    assert headers.get("RECEIVED") == "first"
    assert headers.get_all("Received") == ["first", "second"]
    assert headers.get("Missing") == ""
    assert "received" in headers
    assert list(headers) == ["Received"]


def test_read_message_splits_headers_and_body(make_message):
    raw = make_message([("Subject", "Hi"), ("message-id", "<a@b>")], "body\r\ntext")
    message = read_message(raw)
    assert message.headers.get("Subject") == "Hi"
    assert message.headers.get("Message-Id") == "<a@b>"
    assert message.body == b"body\r\ntext"


def test_read_message_accepts_text_and_file_objects():
    raw = "Subject: Café\n\nbody"
    assert read_message(raw).headers.get("Subject") == "Café"
    assert read_message(io.BytesIO(raw.encode("utf-8"))).body == b"body"


def test_read_message_unfolds_continuation_lines():
    raw = b"Subject: Hello\r\n   folded\r\n\tworld\r\nTo: a@b.c\r\n\r\n"
    message = read_message(raw)
    assert message.headers.get("Subject") == "Hello folded world"
    assert message.headers.get("To") == "a@b.c"
    assert message.body == b""


def test_read_message_latin1_header_bytes():
    message = read_message(b"Subject: caf\xe9\n\nbody")
    assert message.headers.get("Subject") == "café"


@pytest.mark.parametrize("raw", [b"", b"  \r\n"])
def test_read_message_empty_input(raw):
    with pytest.raises(MessageReadError):
        read_message(raw)


def test_read_message_malformed_header_line():
    with pytest.raises(MessageReadError):
        read_message(b"Subject: ok\r\nthis line has no colon\r\n\r\nbody")


def test_multipart_reader_ignores_preamble_and_epilogue(make_message, make_multipart):
    body = make_multipart(
        "XYZ",
        [make_message([("Content-Type", "text/plain")], "one"),
         make_message([("Content-Type", "text/html")], "<p>two</p>")],
        preamble=b"This is a multi-part message in MIME format.\r\n",
        epilogue=b"trailing junk\r\n",
    )
    parts = list(MultipartReader(body, "XYZ"))
    assert [p.headers.get("Content-Type") for p in parts] == ["text/plain", "text/html"]
    assert [p.body for p in parts] == [b"one", b"<p>two</p>"]


def test_multipart_reader_tolerates_transport_padding():
    body = b"--b  \r\nContent-Type: text/plain\r\n\r\nhello\r\n--b-- \t\r\n"
    parts = list(MultipartReader(body, "b"))
    assert len(parts) == 1
    assert parts[0].body == b"hello"


def test_multipart_reader_does_not_split_on_boundary_prefix():
    body = b"--b\r\n\r\nline\r\n--bb not a delimiter\r\n--b--\r\n"
    parts = list(MultipartReader(body, "b"))
    assert parts[0].body == b"line\r\n--bb not a delimiter"


def test_multipart_reader_part_without_headers():
    parts = list(MultipartReader(b"--b\n\nplain\n--b--\n", "b"))
    assert len(parts[0].headers) == 0
    assert parts[0].body == b"plain"


def test_multipart_reader_truncated(make_message, make_multipart):
    body = make_multipart("b", [make_message([("Content-Type", "text/plain")], "x")], close=False)
    with pytest.raises(TruncatedMultipartError):
        list(MultipartReader(body, "b"))


def test_multipart_reader_no_delimiter():
    with pytest.raises(TruncatedMultipartError):
        list(MultipartReader(b"just some text\r\n", "b"))


@pytest.mark.parametrize("raw", [
    b"From sender@example.com Mon Jan  1 00:00:00 2020\nSubject: s\n\nbody",
    b"Subject : spaced name\n\nbody",
    b"Subj\xe9ct: latin-1 name\n\nbody",
])
def test_read_message_rejects_invalid_field_names(raw):
    with pytest.raises(MessageReadError):
        read_message(raw)
