import io

import pytest

from letters.models import Address, ContentInfo, File, FileType
from letters.options import (
    buffer_file,
    parse_address,
    parse_address_list,
    parse_date,
    save_files_to_directory,
)


def _file(name, payload, file_type=FileType.ATTACHMENT):
    return File(file_type=file_type, name=name, content_info=ContentInfo(type="application/pdf"),
                reader=io.BytesIO(payload))


def test_parse_address():
    assert parse_address("Jane Doe <jane@example.com>") == Address("Jane Doe", "jane@example.com")
    assert str(parse_address("jane@example.com")) == "jane@example.com"


def test_parse_address_list():
    assert parse_address_list("a@example.com, B <b@example.com>") == [
        Address("", "a@example.com"),
        Address("B", "b@example.com"),
    ]
    assert parse_address_list("undisclosed-recipients:;") == []


@pytest.mark.parametrize("value", ["nobody", "a@example.com, b@example.com"])
def test_parse_address_rejects(value):
    with pytest.raises(ValueError):
        parse_address(value)


def test_parse_date():
    parsed = parse_date("Fri, 21 Nov 1997 09:55:06 -0600")
    assert (parsed.year, parsed.month, parsed.day, parsed.hour) == (1997, 11, 21, 9)
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_buffer_file():
    file = _file("a.pdf", b"payload")
    buffer_file(file)
    assert file.data == b"payload"
    assert file.size == 7


def test_save_files_to_directory(tmp_path):
    target = tmp_path / "out"
    save = save_files_to_directory(target)
    save(_file("report.pdf", b"one"))
    save(_file("report.pdf", b"two"))
    save(_file("../../etc/passwd", b"three"))
    save(_file("", b"four", FileType.INLINE))

    assert (target / "report.pdf").read_bytes() == b"one"
    assert (target / "report-1.pdf").read_bytes() == b"two"
    assert (target / "passwd").read_bytes() == b"three"
    assert (target / "inline-1").read_bytes() == b"four"
    assert sorted(p.name for p in target.iterdir()) == ["inline-1", "passwd", "report-1.pdf", "report.pdf"]
