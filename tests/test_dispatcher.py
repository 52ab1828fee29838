from typing import List

from vaultterm.dispatcher import Command, Dispatcher, parse
from vaultterm.session import CommandHistory, SessionState
from tests.conftest import run, snapshot


class FauxTerminal:
    def __init__(self) -> None:
        self.state = SessionState(integrity=100, salvage_required=1)
        self.lines: List[str] = []

    def emit(self, *lines: str) -> None:
        self.lines.extend(lines)


def test_parse_lowercases_name_and_keeps_argument_case() -> None:
    assert parse("  GREP  GGCAMP   Vault_Logs.bak ") == Command("grep", ["GGCAMP", "Vault_Logs.bak"])
    assert parse("   ") is None
    assert parse("") is None


def test_unknown_command_reports_and_mutates_nothing(terminal) -> None:
    before = snapshot(terminal)
    output = run(terminal, "frobnicate now")
    assert output == ["> frobnicate now", "Unknown command: frobnicate. Try 'help'."]
    assert snapshot(terminal) == before


def test_history_records_every_non_empty_line(terminal) -> None:
    run(terminal, "help", "   ", "bogus", "Scan")
    assert list(terminal.state.history) == ["help", "bogus", "Scan"]


def test_history_keeps_lines_verbatim(terminal) -> None:
    output = run(terminal, "  scan  ")
    assert list(terminal.state.history) == ["  scan  "]
    assert output[0] == "> scan"
    assert terminal.state.salvage_cycles == 1


def test_history_recall_clamps_and_never_wraps() -> None:
    history = CommandHistory(["a", "b", "c"])
    assert [history.previous() for _ in range(4)] == ["c", "b", "a", "a"]
    assert [history.next() for _ in range(3)] == ["b", "c", "c"]
    history.append("d")
    assert history.previous() == "d"


def test_history_recall_on_empty_history() -> None:
    history = CommandHistory()
    assert history.previous("draft") == "draft"
    assert history.next() == ""


def test_repeat_is_bounded_by_the_iteration_cap() -> None:
    calls = []
    dispatcher = Dispatcher(iteration_cap=5)
    dispatcher.register(lambda term, args: calls.append(args), "ping", "p")
    term = FauxTerminal()
    assert dispatcher.repeat(term, "ping x", 10) == 5
    assert calls == [["x"]] * 5
    assert dispatcher.repeat(term, "P", -3) == 0
    assert len(calls) == 5


def test_script_scan_respects_cap(terminal) -> None:
    output = run(terminal, "script scan 5000")
    assert terminal.state.salvage_cycles == terminal.cfg.script_cap
    assert output[-1] == "script: completed scripted scans."
    assert list(terminal.state.history) == ["script scan 5000"]


def test_batch_alias_runs_scans(terminal) -> None:
    run(terminal, "batch scan 3")
    assert terminal.state.salvage_cycles == 3


def test_script_rejects_other_commands_and_bad_counts(terminal) -> None:
    output = run(terminal, "script brute 2", "script scan zero", "script scan -4", "script")
    assert terminal.state.salvage_cycles == 0
    assert terminal.state.brute_uses == 0
    assert output.count("script: only 'scan' is scriptable in this terminal.") == 2
    assert output.count("script: invalid count. usage: script scan <positive_number>") == 2
