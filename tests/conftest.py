from dataclasses import asdict
from pathlib import Path
from typing import List

import pytest

from vaultterm.config import TerminalConfig
from vaultterm.terminal import Terminal

SECRET = "GGCAMP{vaults_keep_their_sins}"


class RecordingNotifier:
    def __init__(self) -> None:
        self.events: List[str] = []

    def notify(self, kind: str) -> None:
        self.events.append(kind)


class BrokenNotifier:
    def notify(self, kind: str) -> None:
        raise RuntimeError("speaker unplugged")


def run(term: Terminal, *lines: str) -> List[str]:
    """Execute ``lines`` and return only the transcript they produced."""
    start = len(term.state.transcript)
    for line in lines:
        term.execute(line)
    return term.state.transcript[start:]


@pytest.fixture()
def scores_path(tmp_path: Path) -> Path:
    return tmp_path / "level_scores.json"


@pytest.fixture()
def cfg(scores_path: Path) -> TerminalConfig:
    return TerminalConfig(
        seed=1234,
        decay_interval=3600.0,
        salvage_required=8,
        scores_path=scores_path,
    )


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def terminal(cfg: TerminalConfig, notifier: RecordingNotifier):
    term = Terminal(cfg, notifier=notifier)
    yield term
    term.close()


def snapshot(term: Terminal) -> dict:
    """SessionState fields other than the transcript and history."""
    data = asdict(term.state)
    data.pop("transcript")
    data.pop("history")
    return data
