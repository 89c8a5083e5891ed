"""
Tests for the command line entry point.
"""

from pathlib import Path

import pytest

from subsync import main as cli
from subsync.source.client import AcquisitionError, SourceClient
from subsync.source.models import ErrorKind, Origin, RawPayload
from subsync.storage.state_store import StateStore


@pytest.fixture
def isolated(monkeypatch, tmp_path):
    """Run from an empty directory with no SUBSYNC_* configuration."""
    for name in ("SUBSYNC_PROXY", "SUBSYNC_USER_AGENT", "SUBSYNC_OUTPUT_DIR",
                 "SUBSYNC_CLIPBOARD", "SUBSYNC_DRY_RUN", "SUBSYNC_ALLOW_EMPTY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _serve(monkeypatch, text: str = "", error: AcquisitionError = None) -> None:
    """Replace HTTP fetching with a canned response."""
    def fake_fetch(self, url):
        if error is not None:
            raise error
        return RawPayload(url, Origin.REMOTE, text)

    monkeypatch.setattr(SourceClient, "fetch", fake_fetch)


def test_no_arguments_shows_help(capsys):
    """Test running without arguments prints help and succeeds."""
    assert cli.main([]) == 0
    assert "--link" in capsys.readouterr().out


def test_missing_link_fails(isolated):
    """Test that options without a link are an error."""
    assert cli.main(["--dry-run"]) == 1


def test_sync_url(isolated: Path, monkeypatch):
    """Test a URL run writes the artifact and exits 0."""
    _serve(monkeypatch, "b\nc\nc\n")

    code = cli.main(["-l", "https://host/sub", "--no-clipboard"])

    assert code == 0
    assert StateStore(isolated / "output").path_for("https://host/sub").read_text(encoding="utf-8") == "b\nc"


def test_sync_local_file(isolated: Path):
    """Test a local file run with a custom output directory."""
    (isolated / "subs.txt").write_text("x\ny\nx\n", encoding="utf-8")

    code = cli.main(["-l", "subs.txt", "-o", "saved", "--no-clipboard"])

    assert code == 0
    assert StateStore(isolated / "saved").path_for("subs.txt").read_text(encoding="utf-8") == "x\ny"


def test_up_to_date_run(isolated: Path, monkeypatch, caplog):
    """Test a repeated run reports that nothing changed."""
    _serve(monkeypatch, "a\n")
    cli.main(["-l", "https://host/sub", "--no-clipboard"])

    code = cli.main(["-l", "https://host/sub", "--no-clipboard"])

    assert code == 0
    assert "already up to date" in caplog.text


def test_acquisition_error_exit_code(isolated: Path, monkeypatch):
    """Test fetch failures exit 1 and write nothing."""
    _serve(monkeypatch, error=AcquisitionError(ErrorKind.TIMEOUT, "Network timeout"))

    code = cli.main(["-l", "https://host/sub", "--no-clipboard"])

    assert code == 1
    assert not (isolated / "output").exists()


def test_invalid_source_exit_code(isolated: Path):
    """Test a value that is neither URL nor file exits 1."""
    assert cli.main(["-l", "does-not-exist.txt", "--no-clipboard"]) == 1


def test_invalid_proxy_exit_code(isolated: Path):
    """Test configuration errors exit 1."""
    assert cli.main(["-l", "https://host/sub", "-p", "not a proxy"]) == 1


def test_dry_run_writes_nothing(isolated: Path, monkeypatch):
    """Test --dry-run leaves the output directory alone."""
    _serve(monkeypatch, "a\n")

    code = cli.main(["-l", "https://host/sub", "--dry-run", "--no-clipboard"])

    assert code == 0
    assert not (isolated / "output").exists()


def test_empty_source_exit_code(isolated: Path, monkeypatch):
    """Test the empty-source guard exits 1 unless --allow-empty is given."""
    _serve(monkeypatch, "a\n")
    cli.main(["-l", "https://host/sub", "--no-clipboard"])
    _serve(monkeypatch, "")

    assert cli.main(["-l", "https://host/sub", "--no-clipboard"]) == 1
    assert cli.main(["-l", "https://host/sub", "--no-clipboard", "--allow-empty"]) == 0
    assert StateStore(isolated / "output").path_for("https://host/sub").read_text(encoding="utf-8") == ""


def test_long_link_is_saved(isolated: Path, monkeypatch):
    """Test a link longer than the file name limit still syncs."""
    link = "https://example.com/sub?token=" + "t" * 300
    _serve(monkeypatch, "a\n")

    assert cli.main(["-l", link, "--no-clipboard"]) == 0
    assert StateStore(isolated / "output").path_for(link).read_text(encoding="utf-8") == "a"
