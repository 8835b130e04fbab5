"""Server CLI commands that do not start a server."""

import pytest

from autopilot import server_cli
from autopilot.config import settings


@pytest.fixture
def file_db(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "local_mode", False)
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")


def test_create_key_prints_id_and_raw_key(file_db, capsys):
    server_cli.main(["create-key", "--seller", "bot-1", "--name", "ci"])

    out, err = capsys.readouterr()
    key_id, raw_key = out.strip().split("\t")
    assert key_id.startswith("key_")
    assert raw_key.startswith("ak_")
    assert "cannot be retrieved again" in err


def test_worker_once_with_empty_queue(file_db, capsys):
    server_cli.main(["worker", "--once"])
    assert "Processed 0 job(s)" in capsys.readouterr().out


def test_command_is_required():
    with pytest.raises(SystemExit):
        server_cli.main([])
