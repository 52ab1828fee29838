from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

LOG_NAME = "vault_logs.bak"
LOG_ALIASES = (LOG_NAME, "vault_logs")
FRAGMENT_LABELS = ("A", "B", "C", "D")
FRAGMENT_SPAN = 29


@dataclass(frozen=True)
class TerminalConfig:
    # Win condition
    secret: str = "GGCAMP{vaults_keep_their_sins}"
    flag_prefix: str = "GGCAMP"
    level: int = 4
    next_level: int = 5
    transition_delay: float = 20.0

    # Decay
    start_integrity: int = 200
    decay_step: int = 10
    decay_interval: float = 45.0

    # Salvage
    brute_penalty: int = 15
    brute_cap: int = 2
    salvage_range: Tuple[int, int] = (6, 20)
    salvage_required: Optional[int] = None
    repair_bonus: int = 10
    repair_cleanse: int = 20
    sequence_token_len: int = 12

    # Corpus
    log_lines: int = 4000
    corrupt_every: int = 137
    fragment_window: Tuple[int, int] = (50, 420)

    # Console
    view_tail: int = 20
    search_limit: int = 50
    script_cap: int = 1000

    scores_path: Path = Path("level_scores.json")
    seed: Optional[int] = None

    def validate(self) -> None:
        if len(self.secret) < len(FRAGMENT_LABELS):
            raise ValueError("secret must be at least 4 characters.")
        if not self.flag_prefix or not self.secret.startswith(self.flag_prefix):
            raise ValueError("secret must start with flag_prefix.")
        if self.start_integrity < 0:
            raise ValueError("start_integrity must be >= 0.")
        if self.decay_step <= 0:
            raise ValueError("decay_step must be > 0.")
        if self.decay_interval <= 0.0:
            raise ValueError("decay_interval must be > 0.")
        if self.brute_penalty <= self.decay_step:
            raise ValueError("brute_penalty must be larger than decay_step.")
        if self.brute_cap < 0:
            raise ValueError("brute_cap must be >= 0.")
        lo, hi = self.salvage_range
        if lo < 1 or hi < lo:
            raise ValueError("salvage_range must be an increasing pair >= 1.")
        if self.salvage_required is not None and self.salvage_required < 0:
            raise ValueError("salvage_required must be >= 0.")
        if self.corrupt_every < 1:
            raise ValueError("corrupt_every must be >= 1.")
        start, stop = self.fragment_window
        if start < 1 or stop < start:
            raise ValueError("fragment_window must be an increasing pair >= 1.")
        if self.log_lines <= stop + FRAGMENT_SPAN:
            raise ValueError(
                f"log_lines must exceed fragment_window end + {FRAGMENT_SPAN}."
            )
        if self.view_tail < 1 or self.search_limit < 1:
            raise ValueError("view_tail and search_limit must be >= 1.")
        if self.script_cap < 1:
            raise ValueError("script_cap must be >= 1.")
        if self.sequence_token_len < 2:
            raise ValueError("sequence_token_len must be >= 2.")
