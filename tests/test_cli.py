"""Tests for the management CLI."""

from pathlib import Path

import bcrypt
import pytest

from medimaging.cli.main import main


class TestInit:
    def test_creates_layout(self, tmp_path: Path) -> None:
        main(["init", str(tmp_path)])

        assert (tmp_path / "uploads" / "dicom").is_dir()
        assert 'pacs_direct_url = "http://localhost:8042"' in (tmp_path / "settings.toml").read_text()
        assert (tmp_path / ".env.example").exists()

    def test_keeps_existing_settings(self, tmp_path: Path) -> None:
        (tmp_path / "settings.toml").write_text('port = 9000\n')

        main(["init", str(tmp_path)])

        assert (tmp_path / "settings.toml").read_text() == "port = 9000\n"


class TestHashPassword:
    def test_prints_verifiable_hash(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["hash-password", "--password", "s3cret"])

        hashed = capsys.readouterr().out.strip()
        assert bcrypt.checkpw(b"s3cret", hashed.encode())

    def test_prompted_passwords_must_match(self, monkeypatch: pytest.MonkeyPatch) -> None:
        answers = iter(["first", "second"])
        monkeypatch.setattr("medimaging.cli.main.getpass.getpass", lambda _prompt: next(answers))

        with pytest.raises(SystemExit):
            main(["hash-password"])


def test_no_command_prints_help() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main([])

    assert exc_info.value.code == 1
