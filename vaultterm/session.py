from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import FRAGMENT_LABELS, TerminalConfig

FRAGMENT_SLOTS = len(FRAGMENT_LABELS)


class SequenceStage(enum.Enum):
    LOCKED = "locked"
    PARTIAL = "partial"
    OPEN = "open"


class CommandHistory:
    """Submitted lines plus a recall cursor that clamps at both ends."""

    def __init__(self, entries: Optional[List[str]] = None) -> None:
        self.entries: List[str] = list(entries or [])
        self._cursor: Optional[int] = None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def append(self, line: str) -> None:
        self.entries.append(line)
        self._cursor = None

    def previous(self, current: str = "") -> str:
        if not self.entries:
            return current
        if self._cursor is None:
            self._cursor = len(self.entries) - 1
        else:
            self._cursor = max(0, self._cursor - 1)
        return self.entries[self._cursor]

    def next(self) -> str:
        if not self.entries or self._cursor is None:
            return ""
        self._cursor = min(len(self.entries) - 1, self._cursor + 1)
        return self.entries[self._cursor]


@dataclass
class SessionState:
    integrity: int
    salvage_required: int
    contamination: int = 0
    fragments_revealed: List[str] = field(default_factory=list)
    fragments_by_label: Dict[str, str] = field(default_factory=dict)
    salvage_cycles: int = 0
    brute_uses: int = 0
    sequence_stage: SequenceStage = SequenceStage.LOCKED
    required_sequence: Optional[List[str]] = None
    sequence_entry: List[str] = field(default_factory=list)
    corpus_searchable: bool = False
    completed: bool = False
    history: CommandHistory = field(default_factory=CommandHistory)
    transcript: List[str] = field(default_factory=list)

    def labeled_count(self) -> int:
        return sum(1 for label in FRAGMENT_LABELS if label in self.fragments_by_label)

    def missing_labels(self) -> List[str]:
        return [label for label in FRAGMENT_LABELS if label not in self.fragments_by_label]

    def apply_decay(self, step: int) -> None:
        self.contamination += step
        self.integrity = max(0, self.integrity - step)

    def reveal(self, token, label=None):
        """Record a salvaged hex token.

        The buffer holds at most four tokens and is never rewritten once full.
        A labeled fragment is still captured in ``fragments_by_label`` when the
        buffer has no room, so repair stays reachable.
        """
        learned = False
        if token not in self.fragments_revealed and len(self.fragments_revealed) < FRAGMENT_SLOTS:
            self.fragments_revealed.append(token)
            learned = True
        if label is not None and label not in self.fragments_by_label:
            self.fragments_by_label[label] = token
            learned = True
        return learned


def fresh_state(cfg: TerminalConfig, rng: random.Random) -> SessionState:
    required = cfg.salvage_required
    if required is None:
        required = rng.randint(*cfg.salvage_range)
    return SessionState(integrity=cfg.start_integrity, salvage_required=required)
