import base64
import json

import letters.cli as cli
from letters.cli import main
from letters.config import ParserConfig


def _write_message(tmp_path, make_message, make_multipart, extra_part=None):
    parts = [
        make_message([("Content-Type", "text/plain")], "hello from the cli"),
        make_message(
            [("Content-Type", "application/octet-stream"),
             ("Content-Disposition", 'attachment; filename="blob.bin"'),
             ("Content-Transfer-Encoding", "base64")],
            base64.encodebytes(b"\x00\x01\x02"),
        ),
    ]
    if extra_part is not None:
        parts.append(extra_part)
    raw = make_message(
        [("From", "cli@example.com"), ("Subject", "cli test"),
         ("Content-Type", 'multipart/mixed; boundary="cli"')],
        make_multipart("cli", parts),
    )
    path = tmp_path / "message.eml"
    path.write_bytes(raw)
    return path


def test_cli_prints_json(tmp_path, capsys, make_message, make_multipart):
    path = _write_message(tmp_path, make_message, make_multipart)
    assert main([str(path), "--include-data"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["success"] is True
    assert result["processing_mode"] == "full"
    assert result["email"]["text"] == "hello from the cli"
    assert result["email"]["headers"]["subject"] == "cli test"
    assert result["email"]["files"][0]["name"] == "blob.bin"
    assert result["email"]["files"][0]["data"] == base64.b64encode(b"\x00\x01\x02").decode("ascii")


def test_cli_headers_only_to_output_file(tmp_path, make_message, make_multipart):
    path = _write_message(tmp_path, make_message, make_multipart)
    output = tmp_path / "out.json"
    assert main([str(path), "--headers-only", "--output", str(output)]) == 0
    result = json.loads(output.read_text(encoding="utf-8"))
    assert result["processing_mode"] == "headers_only"
    assert result["email"]["text"] == ""
    assert result["email"]["headers"]["from"] == ["cli@example.com"]


def test_cli_save_files(tmp_path, capsys, make_message, make_multipart):
    path = _write_message(tmp_path, make_message, make_multipart)
    out_dir = tmp_path / "files"
    assert main([str(path), "--save-files", str(out_dir)]) == 0
    assert (out_dir / "blob.bin").read_bytes() == b"\x00\x01\x02"
    result = json.loads(capsys.readouterr().out)
    assert result["email"]["files"][0]["size"] is None


def test_cli_error_response(tmp_path, capsys, make_message, make_multipart):
    unknown = make_message([("Content-Type", "text/x-unknown")], "?")
    path = _write_message(tmp_path, make_message, make_multipart, extra_part=unknown)
    assert main([str(path)]) == 1
    result = json.loads(capsys.readouterr().out)
    assert result["success"] is False
    assert result["error"]["code"] == "UNKNOWN_CONTENT_TYPE"
    assert result["error"]["part"] == "3"

    assert main([str(path), "--skip-content-type", "text/x-unknown"]) == 0
    capsys.readouterr()


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.eml")]) == 1
    result = json.loads(capsys.readouterr().out)
    assert result["error"]["code"] == "READ_ERROR"


def test_cli_rejects_invalid_environment(tmp_path, capsys, monkeypatch, make_message, make_multipart):
    path = _write_message(tmp_path, make_message, make_multipart)
    monkeypatch.setenv("LETTERS_PROCESSING_MODE", "everything")
    monkeypatch.setattr(cli, "config", ParserConfig())
    assert main([str(path)]) == 1
    result = json.loads(capsys.readouterr().out)
    assert result["success"] is False
    assert result["error"]["code"] == "CONFIGURATION_ERROR"
    assert "LETTERS_PROCESSING_MODE" in result["error"]["details"]
