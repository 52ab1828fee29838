import contextlib
import json

import pytest

from vaultterm import game
from vaultterm.session import CommandHistory
from tests.conftest import SECRET


class FauxPromptSession:
    def __init__(self, lines, history=None):
        self.lines = list(lines)
        self.history = history
        self.prompts = []

    def prompt(self, message):
        self.prompts.append(message)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


@pytest.fixture()
def console(monkeypatch):
    sessions = []

    def install(lines):
        def factory(history=None):
            session = FauxPromptSession(lines, history=history)
            sessions.append(session)
            return session

        monkeypatch.setattr(game, "PromptSession", factory)
        return sessions

    monkeypatch.setattr(game, "patch_stdout", lambda raw=False: contextlib.nullcontext())
    monkeypatch.setattr(game, "clear", lambda: None)
    return install


def test_render_wraps_long_lines_and_keeps_indent() -> None:
    text = "  " + "word " * 40
    rendered = game.render(text)
    assert all(line.startswith("  ") for line in rendered.split("\n"))
    assert all(len(line) <= game.WIDTH for line in rendered.split("\n"))
    assert game.render("  short line") == "  short line"


def test_session_history_feeds_newest_first() -> None:
    history = CommandHistory(["scan", "status", "repair"])
    adapter = game.SessionHistory(history)
    assert adapter.load_history_strings() == ["repair", "status", "scan"]


def test_main_plays_a_full_session(console, tmp_path, capsys) -> None:
    scores = tmp_path / "scores.json"
    sessions = console(["scan", "script scan 25", "repair", "grep GGCAMP", f"submit {SECRET}", "status"])
    code = game.main(
        ["--seed", "7", "--interval", "3600", "--lines", "600", "--scores", str(scores), "--no-bell"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "VAULT-TEC MAINFRAME" in out
    assert "FLAG ACCEPTED. Vault stabilized... for now." in out
    assert "> scan" not in out
    # the loop stops once the flag is accepted
    assert sessions[0].lines == ["status"]
    assert list(sessions[0].history.history)[:2] == ["scan", "script scan 25"]
    assert json.loads(scores.read_text(encoding="utf-8"))[0]["level"] == 4


def test_main_ends_on_eof(console, tmp_path, capsys) -> None:
    console([])
    code = game.main(["--interval", "3600", "--scores", str(tmp_path / "s.json"), "--no-bell"])
    assert code == 0
    assert "Session ended." in capsys.readouterr().out


def test_main_rejects_invalid_settings(console, capsys) -> None:
    console([])
    assert game.main(["--lines", "100", "--no-bell"]) == 2
    assert "log_lines" in capsys.readouterr().out
