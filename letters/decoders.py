# ============================================================================
# letters/decoders.py - Transfer-encoding, charset and header-word decoding
# ============================================================================
"""
Decoders for the content of an email.

The decoders remove base64 and quoted-printable transfer-encodings and
convert declared charsets to Python text. Header values are decoded from
RFC 2047 encoded words using the same charset registry.
"""

import base64
import binascii
import codecs
import logging
import quopri
import re
from typing import Dict, Optional

import chardet

from .config import config
from .errors import HeaderDecodeError, TransferDecodeError, UnknownCharsetError
from .models import ContentInfo

logger = logging.getLogger(__name__)

# Vendor and WHATWG labels that Python's codec registry does not resolve
# (or resolves to a narrower charset than mail clients actually send).
_DEFAULT_ALIASES: Dict[str, str] = {
    "us-ascii": "cp1252",
    "ascii": "cp1252",
    "iso-8859-1": "cp1252",
    "iso8859-1": "cp1252",
    "latin1": "cp1252",
    "iso-8859-9": "cp1254",
    "tis-620": "cp874",
    "iso-8859-11": "cp874",
    "gb2312": "gbk",
    "x-gbk": "gbk",
    "ks_c_5601-1987": "cp949",
    "ks_c_5601": "cp949",
    "euc-kr": "cp949",
    "shift_jis": "cp932",
    "x-sjis": "cp932",
    "ms_kanji": "cp932",
    "iso-8859-6-i": "iso8859_6",
    "iso-8859-8-i": "iso8859_8",
    "x-mac-roman": "mac_roman",
    "macintosh": "mac_roman",
    "unicode-1-1-utf-7": "utf_7",
    "utf8": "utf_8",
}


class CharsetRegistry:
    """Maps charset labels found in messages to Python codec names."""

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        self._aliases: Dict[str, str] = {}
        for label, codec in (aliases or {}).items():
            self.register(label, codec)

    @staticmethod
    def normalize_label(label: str) -> str:
        # drop RFC 2231 language suffixes such as utf-8*en
        return label.strip().strip("\"'").split("*", 1)[0].strip().lower()

    def register(self, label: str, codec: str) -> None:
        self._aliases[self.normalize_label(label)] = codecs.lookup(codec).name

    def lookup(self, label: str) -> str:
        """Return the codec name for label or raise UnknownCharsetError."""
        normalized = self.normalize_label(label)
        if not normalized:
            raise UnknownCharsetError(label)
        if normalized in self._aliases:
            return self._aliases[normalized]

        candidates = [normalized]
        if normalized.startswith("windows-"):
            candidates.append("cp" + normalized[len("windows-"):])
        elif normalized.startswith("cp") and normalized[2:].isdigit():
            candidates.append("windows-" + normalized[2:])

        for candidate in candidates:
            try:
                name = codecs.lookup(candidate).name
                # rejects bytes-to-bytes codecs such as base64 or zlib
                b"".decode(name)
            except LookupError:
                continue
            return name
        raise UnknownCharsetError(label)


charsets = CharsetRegistry(_DEFAULT_ALIASES)


# ---------------------------------------------------------------------------
# Transfer encodings
# ---------------------------------------------------------------------------

_BASE64_WHITESPACE = re.compile(rb"\s+")
_QP_PADDED_SOFT_BREAK = re.compile(rb"=[ \t]+(?=\r?\n)")
_QP_BAD_ESCAPE = re.compile(rb"=(?![0-9A-Fa-f]{2}|\r?\n|$)")


def _decode_base64(raw: bytes) -> bytes:
    cleaned = _BASE64_WHITESPACE.sub(b"", raw).rstrip(b"=")
    if len(cleaned) % 4 == 1:
        raise TransferDecodeError("invalid base64 content: truncated final quantum")
    cleaned += b"=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except binascii.Error as exc:
        raise TransferDecodeError(f"invalid base64 content: {exc}") from exc


def _decode_quoted_printable(raw: bytes) -> bytes:
    raw = _QP_PADDED_SOFT_BREAK.sub(b"=", raw)
    bad = _QP_BAD_ESCAPE.search(raw)
    if bad:
        snippet = raw[bad.start():bad.start() + 3]
        raise TransferDecodeError(
            f"invalid quoted-printable escape {snippet!r} at offset {bad.start()}"
        )
    return quopri.decodestring(raw)


def decode_transfer(raw: bytes, content_info: ContentInfo) -> bytes:
    """Remove the part's Content-Transfer-Encoding, if any."""
    encoding = content_info.transfer_encoding
    if encoding == "base64":
        return _decode_base64(raw)
    if encoding == "quoted-printable":
        return _decode_quoted_printable(raw)
    return raw


# ---------------------------------------------------------------------------
# Charsets
# ---------------------------------------------------------------------------

def _detect_charset(data: bytes, min_confidence: float) -> Optional[str]:
    detected = chardet.detect(data)
    encoding = detected.get("encoding")
    confidence = detected.get("confidence") or 0.0
    if not encoding or confidence < min_confidence:
        return None
    try:
        return charsets.lookup(encoding)
    except UnknownCharsetError:
        return None


def decode_charset(
    data: bytes,
    content_info: ContentInfo,
    fallback_charset: Optional[str] = None,
    min_confidence: Optional[float] = None,
) -> str:
    """
    Convert bytes in the part's charset to text.

    An unknown declared charset raises UnknownCharsetError. Without a
    declared charset, UTF-8 is tried first, then chardet detection, then
    the configured fallback charset.
    """
    if content_info.charset:
        codec = charsets.lookup(content_info.charset)
        return data.decode(codec, errors="replace")

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        pass

    if min_confidence is None:
        min_confidence = config.CHARSET_DETECTION_MIN_CONFIDENCE
    codec = _detect_charset(data, min_confidence)
    if codec:
        logger.warning(f"No charset declared for {content_info.type}, detected {codec}")
        return data.decode(codec, errors="replace")

    codec = charsets.lookup(fallback_charset or config.FALLBACK_CHARSET)
    logger.warning(f"No charset declared for {content_info.type}, falling back to {codec}")
    return data.decode(codec, errors="replace")


def decode_text(raw: bytes, content_info: ContentInfo, **charset_options) -> str:
    """Decode a text part: transfer-encoding, charset, CRLF to LF, trim."""
    data = decode_transfer(raw, content_info)
    text = decode_charset(data, content_info, **charset_options)
    return text.replace("\r\n", "\n").strip()


def decode_file(raw: bytes, content_info: ContentInfo) -> bytes:
    """Decode a file part: transfer-encoding only, exact bytes."""
    return decode_transfer(raw, content_info)


# ---------------------------------------------------------------------------
# Header words (RFC 2047)
# ---------------------------------------------------------------------------

_ENCODED_WORD = re.compile(r"=\?([^?\s]+)\?([BbQq])\?([^?]*)\?=")


def _decode_word(charset: str, encoding: str, text: str) -> str:
    payload = text.encode("utf-8")
    if encoding in "Bb":
        payload = payload.rstrip(b"=")
        payload += b"=" * (-len(payload) % 4)
        try:
            decoded = base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid base64 in encoded word: {exc}") from exc
    else:
        decoded = binascii.a2b_qp(payload, header=True)
    codec = charsets.lookup(charset)
    return decoded.decode(codec, errors="replace")


def decode_header(value: str) -> str:
    """
    Decode the RFC 2047 encoded words in a header value.

    Text outside encoded words is returned untouched, and whitespace between
    two adjacent encoded words is dropped. Tokens that are not syntactically
    encoded words stay literal; encoded words whose payload or charset cannot
    be decoded raise HeaderDecodeError.
    """
    if "=?" not in value:
        return value

    out = []
    position = 0
    previous_was_word = False
    for match in _ENCODED_WORD.finditer(value):
        gap = value[position:match.start()]
        if not (previous_was_word and gap.strip() == ""):
            out.append(gap)
        charset, encoding, text = match.groups()
        try:
            out.append(_decode_word(charset, encoding, text))
        except (ValueError, UnknownCharsetError) as exc:
            raise HeaderDecodeError(value, str(exc)) from exc
        position = match.end()
        previous_was_word = True
    out.append(value[position:])
    return "".join(out)
