import logging

import pytest

CRLF = b"\r\n"


def _message(headers, body=b"", newline=CRLF):
    """Raw message or part bytes from (name, value) header pairs and a body."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    lines = [f"{name}: {value}".encode("utf-8") + newline for name, value in headers]
    return b"".join(lines) + newline + body


def _multipart(boundary, parts, newline=CRLF, preamble=b"", epilogue=b"", close=True):
    """Multipart body from already built parts."""
    delimiter = b"--" + boundary.encode("ascii")
    out = preamble
    for part in parts:
        out += delimiter + newline + part + newline
    if close:
        out += delimiter + b"--" + newline
    return out + epilogue


@pytest.fixture
def make_message():
    return _message


@pytest.fixture
def make_multipart():
    return _multipart


@pytest.fixture
def logger():
    return logging.getLogger("letters.test")
