"""Tests for the command-line entry point."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from outlinelock import app

from tests.helpers import SCENARIO_A


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def outline_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.org"
    path.write_text(SCENARIO_A, encoding="utf-8")
    return path


def _run(tmp_path: Path, *argv: str) -> tuple[int, str]:
    out = io.StringIO()
    code = app.main([*argv, "--settings", str(tmp_path / "settings.json")], stdout=out)
    return code, out.getvalue()


def test_report_lists_locked_headlines(tmp_path: Path, outline_file: Path) -> None:
    code, output = _run(tmp_path, str(outline_file))

    assert code == 0
    assert output.splitlines() == [
        "Re-applied locks: 1 headline locked",
        "line     3  [17, 45)  Heading B",
    ]


def test_json_report(tmp_path: Path, outline_file: Path) -> None:
    code, output = _run(tmp_path, str(outline_file), "--json")
    report = json.loads(output)

    assert code == 0
    assert report["lock_tag"] == "locked"
    assert report["locked"] == [{"start": 17, "end": 45}]
    assert report["headlines"][0]["title"] == "Heading B"


def test_toggle_line_rewrites_file(tmp_path: Path, outline_file: Path) -> None:
    code, output = _run(tmp_path, str(outline_file), "--toggle-line", "1")

    assert code == 0
    assert "Locked subtree: Heading A" in output
    assert outline_file.read_text(encoding="utf-8").startswith("* Heading A :locked:\n")


def test_toggle_offset_unlocks(tmp_path: Path, outline_file: Path) -> None:
    code, output = _run(tmp_path, str(outline_file), "--toggle-offset", "20")

    assert code == 0
    assert outline_file.read_text(encoding="utf-8") == "* Heading A\nbody\n* Heading B\nsecret\n"
    assert "No headlines tagged :locked:" in output


def test_custom_lock_tag(tmp_path: Path) -> None:
    path = tmp_path / "notes.org"
    path.write_text("* A :frozen:\na\n* B :locked:\nb\n", encoding="utf-8")

    code, output = _run(tmp_path, str(path), "--lock-tag", "frozen", "--json")

    assert code == 0
    assert json.loads(output)["locked"] == [{"start": 0, "end": 15}]


def test_toggle_before_first_headline_fails(tmp_path: Path) -> None:
    path = tmp_path / "notes.org"
    path.write_text("intro\n* A\n", encoding="utf-8")

    code, output = _run(tmp_path, str(path), "--toggle-line", "1")

    assert code == 1
    assert "No headline at cursor" in output
    assert path.read_text(encoding="utf-8") == "intro\n* A\n"


def test_malformed_outline_fails(tmp_path: Path) -> None:
    path = tmp_path / "notes.org"
    path.write_text("* A :x::y:\n", encoding="utf-8")

    code, output = _run(tmp_path, str(path))

    assert code == 1
    assert output.startswith("warning: Cannot read outline:")


def test_missing_file_exits_with_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(tmp_path, str(tmp_path / "absent.org"))

    assert excinfo.value.code == 2


def test_line_offset() -> None:
    assert app._line_offset("a\nbb\nccc\n", 3) == 5
    assert app._line_offset("a\n", 0) == 0


@pytest.mark.parametrize(
    "argv",
    [
        ("--toggle-line", "99"),
        ("--toggle-line", "0"),
        ("--toggle-offset", "999"),
        ("--toggle-offset", "-1"),
    ],
)
def test_toggle_target_outside_document_is_usage_error(
    tmp_path: Path, outline_file: Path, capsys: pytest.CaptureFixture[str], argv: tuple[str, str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(tmp_path, str(outline_file), *argv)

    assert excinfo.value.code == 2
    assert "outside the document" in capsys.readouterr().err
    assert outline_file.read_text(encoding="utf-8") == SCENARIO_A


def test_toggle_keeps_crlf_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "notes.org"
    path.write_bytes(b"* A\r\nbody\r\n* B\r\nmore\r\n")

    code, _ = _run(tmp_path, str(path), "--toggle-line", "3")

    assert code == 0
    assert path.read_bytes() == b"* A\r\nbody\r\n* B :locked:\r\nmore\r\n"
