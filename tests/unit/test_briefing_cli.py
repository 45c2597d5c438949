"""Unit tests for the matins-render command."""

from __future__ import annotations

import email
import typing as typ

import msgspec
import pytest

from matins.briefing import cli
from matins.issues.models import ProjectDocumentInput

if typ.TYPE_CHECKING:
    from pathlib import Path

_AT = "2024-01-19T23:30:00+00:00"


@pytest.fixture(autouse=True)
def configured_levels(monkeypatch: pytest.MonkeyPatch) -> list[str | None]:
    """Record logging configuration instead of reconfiguring femtologging."""
    levels: list[str | None] = []

    def fake_configure(level: str | None, *, force: bool = False) -> tuple[str, bool]:
        del force
        levels.append(level)
        return ("INFO", False)

    monkeypatch.setattr(cli, "configure_logging", fake_configure)
    return levels


@pytest.fixture
def input_file(
    tmp_path: Path,
    sample_project: ProjectDocumentInput,
    empty_project: ProjectDocumentInput,
) -> Path:
    """Write two classified projects to a JSON file."""
    path = tmp_path / "projects.json"
    path.write_bytes(msgspec.json.encode([sample_project, empty_project]))
    return path


@pytest.mark.usefixtures("clean_env")
class TestMain:
    """Tests for ``cli.main``."""

    def test_markdown_output(
        self, input_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Without a key both projects are rendered deterministically."""
        assert cli.main([str(input_file), "--at", _AT]) == 0
        out = capsys.readouterr().out
        assert out.startswith("# [Morning Meeting] 2024/01/20 - Project Phoenix")
        assert "# [Morning Meeting] 2024/01/20 - Quiet Project" in out

    def test_chat_output(
        self, input_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Chat format prints one JSON payload per project."""
        assert cli.main([str(input_file), "--at", _AT, "--format", "chat"]) == 0
        payloads = msgspec.json.decode(capsys.readouterr().out)
        assert [p["fileName"] for p in payloads] == [
            "morning-meeting-PROJ-2024-01-20.md",
            "morning-meeting-IDLE-2024-01-20.md",
        ]

    def test_html_output(
        self, input_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """HTML format prints complete documents."""
        assert cli.main([str(input_file), "--at", _AT, "--format", "html"]) == 0
        assert capsys.readouterr().out.count("<!DOCTYPE html>") == 2

    def test_email_output(
        self, input_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Email format prints MIME messages for each project."""
        argv = [
            str(input_file),
            "--at",
            _AT,
            "--format",
            "email",
            "--sender",
            "briefing@example.com",
            "--to",
            "team@example.com",
        ]
        assert cli.main(argv) == 0
        out = capsys.readouterr().out
        assert out.count("Content-Type: multipart/mixed") == 2
        first = email.message_from_string(out)
        assert first["Subject"].startswith("[Morning Meeting] Project Phoenix")

    def test_email_requires_addresses(
        self, input_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Email format without addresses is rejected before rendering."""
        assert cli.main([str(input_file), "--format", "email"]) == 1
        assert "--sender" in capsys.readouterr().err

    def test_missing_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """An unreadable input file exits with status 1."""
        assert cli.main([str(tmp_path / "absent.json")]) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_invalid_json(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Malformed input exits with status 1."""
        path = tmp_path / "bad.json"
        path.write_text('[{"projectKey": 5}]')
        assert cli.main([str(path)]) == 1
        assert "Invalid project input" in capsys.readouterr().err

    def test_invalid_configuration(
        self,
        input_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Invalid settings exit with status 1."""
        monkeypatch.setenv("MATINS_TIMEZONE", "Nowhere/Special")
        assert cli.main([str(input_file)]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_log_level_from_environment(
        self,
        input_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        configured_levels: list[str | None],
    ) -> None:
        """The log level is read from ``MATINS_LOG_LEVEL``."""
        monkeypatch.setenv("MATINS_LOG_LEVEL", "debug")
        assert cli.main([str(input_file)]) == 0
        assert configured_levels == ["debug"]

    def test_naive_timestamp_rejected(self, input_file: Path) -> None:
        """``--at`` must carry an offset."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(input_file), "--at", "2024-01-20T08:30:00"])
        assert exc_info.value.code == 2
