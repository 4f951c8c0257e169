# ============================================================================
# letters/reader.py - Raw message and multipart tokenizing
# ============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterator, List, Tuple, Union

from .errors import MessageReadError, TruncatedMultipartError

# RFC 5322 field name: printable ASCII except the colon
_FIELD_NAME = re.compile(rb"[\x21-\x39\x3b-\x7e]+")


def canonical_header_key(name: str) -> str:
    """Canonical MIME header key, e.g. "message-ID" -> "Message-Id"."""
    if not name or any(c in name for c in " \t:"):
        return name
    return "-".join(word[:1].upper() + word[1:].lower() for word in name.split("-"))


class HeaderMap:
    """Ordered header fields keyed by canonical name; duplicates are kept."""

    def __init__(self, fields: Union[Dict[str, List[str]], None] = None):
        self._fields: Dict[str, List[str]] = {}
        for name, values in (fields or {}).items():
            for value in values:
                self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._fields.setdefault(canonical_header_key(name), []).append(value)

    def get(self, name: str) -> str:
        """First value of the field, or "" when absent."""
        values = self._fields.get(canonical_header_key(name))
        return values[0] if values else ""

    def get_all(self, name: str) -> List[str]:
        return list(self._fields.get(canonical_header_key(name), []))

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for name, values in self._fields.items():
            yield name, list(values)

    def __contains__(self, name: str) -> bool:
        return canonical_header_key(name) in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"HeaderMap({self._fields!r})"


@dataclass
class RawMessage:
    """A header block and the undecoded body that follows it."""

    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""


def _to_text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        # latin-1 maps every byte, so raw 8-bit headers are never lost
        return raw.decode("latin-1")


def parse_header_block(block: bytes) -> HeaderMap:
    """Parse "Name: value" lines, unfolding continuation lines."""
    headers = HeaderMap()
    name = None
    value_parts: List[bytes] = []

    def flush():
        if name is not None:
            headers.add(name, _to_text(b" ".join(p for p in value_parts if p)))

    for line in block.splitlines():
        if not line.strip():
            continue
        if line[:1] in (b" ", b"\t"):
            if name is None:
                raise MessageReadError(f"malformed MIME header: continuation line {line[:60]!r} "
                                       "before first header")
            value_parts.append(line.strip())
            continue
        flush()
        colon = line.find(b":")
        if colon <= 0 or not _FIELD_NAME.fullmatch(line[:colon]):
            raise MessageReadError(f"malformed MIME header line: {line[:60]!r}")
        name = line[:colon].decode("ascii")
        value_parts = [line[colon + 1:].strip()]
    flush()
    return headers


def split_message(data: bytes) -> RawMessage:
    """Split raw bytes at the first blank line into headers and body."""
    position = 0
    length = len(data)
    while position < length:
        end = data.find(b"\n", position)
        next_position = length if end == -1 else end + 1
        line = data[position:next_position]
        if line in (b"\n", b"\r\n"):
            return RawMessage(parse_header_block(data[:position]), data[next_position:])
        position = next_position
    return RawMessage(parse_header_block(data), b"")


def read_message(source: Union[bytes, bytearray, str, BinaryIO]) -> RawMessage:
    """Read a whole RFC 5322 message from bytes, text or a binary file object."""
    if hasattr(source, "read"):
        data = source.read()
    else:
        data = source
    if isinstance(data, str):
        data = data.encode("utf-8")
    data = bytes(data)
    if not data.strip():
        raise MessageReadError("cannot read message: input is empty")
    return split_message(data)


class MultipartReader:
    """
    Iterates over the parts of a multipart body delimited by boundary.

    The preamble and epilogue are ignored. Input that ends before the closing
    delimiter raises TruncatedMultipartError.
    """

    def __init__(self, body: bytes, boundary: str):
        self.boundary = boundary
        self._body = body
        self._delimiter = b"--" + boundary.encode("utf-8")
        self._close_delimiter = self._delimiter + b"--"

    def _delimiter_kind(self, line: bytes) -> str:
        if not line.startswith(self._delimiter):
            return ""
        # trailing whitespace is transport padding
        stripped = line.rstrip(b"\r\n").rstrip(b" \t")
        if stripped == self._delimiter:
            return "open"
        if stripped == self._close_delimiter:
            return "close"
        return ""

    @staticmethod
    def _strip_line_break(content: bytes) -> bytes:
        # the line break before a delimiter belongs to the delimiter
        if content.endswith(b"\r\n"):
            return content[:-2]
        if content.endswith(b"\n"):
            return content[:-1]
        return content

    def __iter__(self) -> Iterator[RawMessage]:
        lines = iter(self._body.splitlines(keepends=True))

        for line in lines:
            kind = self._delimiter_kind(line)
            if kind == "close":
                return
            if kind == "open":
                break
        else:
            raise TruncatedMultipartError(
                f"multipart: no delimiter found for boundary {self.boundary!r}"
            )

        buffer: List[bytes] = []
        for line in lines:
            kind = self._delimiter_kind(line)
            if not kind:
                buffer.append(line)
                continue
            yield split_message(self._strip_line_break(b"".join(buffer)))
            buffer = []
            if kind == "close":
                return

        raise TruncatedMultipartError(
            f"multipart: unexpected end of input before closing boundary {self.boundary!r}"
        )
