from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Dict, Optional

from .config import LOG_NAME, TerminalConfig
from .corpus import Corpus, generate
from .decay import DecayScheduler
from .dispatcher import Command, Dispatcher
from .puzzle import COMMANDS
from .session import SessionState, fresh_state
from .sinks import ScoreLog, notify_safely, score_record

logger = logging.getLogger(__name__)

BANNER = [
    "VAULT-TEC MAINFRAME [Retro-Terminal v1952]",
    "ENV: POST-APOCALYPTIC CORPORATE MELTDOWN",
    "",
    "OBJECTIVE:",
    f"  - Recover the hidden vault compliance flag from {LOG_NAME}",
    "  - Then submit it using: submit GGCAMP{...}",
    "",
    "SUGGESTED SEQUENCE:",
    "  1) type 'help' to see all commands",
    "  2) run 'reroute' to unlock the power routing puzzle",
    "  3) use 'scan' / limited 'brute' to uncover corrupted hex fragments",
    "  4) power-users: automate salvage with 'script scan 100'",
    "  5) once enough salvage cycles have run, use 'repair' to reconstruct the flag fragments",
    f"  6) use 'grep GGCAMP {LOG_NAME}' to search for the flag",
    "  7) submit the recovered flag with 'submit GGCAMP{...}'",
    "",
    "HINT: salvage requires multiple cycles; brute-force is strictly limited.",
    "",
    'HINT: "the world ended, but compliance reports didn\'t."',
    "",
    "Type 'help' for commands.",
    "",
]


class Terminal:
    """One puzzle session: state, corpus, decay clock and command table.

    Every mutation of :attr:`state` happens while holding :attr:`lock`, whether
    it comes from a command or from a decay tick. The lock is re-entrant so
    ``script`` can dispatch nested commands inside a single transaction.
    """

    def __init__(
        self,
        cfg: Optional[TerminalConfig] = None,
        *,
        corpus: Optional[Corpus] = None,
        notifier=None,
        score_log: Optional[ScoreLog] = None,
        echo: Optional[Callable[[str], None]] = None,
        on_clear: Optional[Callable[[], None]] = None,
        on_complete: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        cfg = cfg or TerminalConfig()
        cfg.validate()
        self.cfg = cfg
        self.rng = random.Random(cfg.seed)
        self.corpus = corpus or generate(
            cfg.secret,
            cfg.log_lines,
            self.rng,
            corrupt_every=cfg.corrupt_every,
            window=cfg.fragment_window,
        )
        self.state: SessionState = fresh_state(cfg, self.rng)
        self.lock = threading.RLock()
        self.notifier = notifier
        self.score_log = score_log if score_log is not None else ScoreLog(cfg.scores_path)
        self.echo = echo
        self.on_clear = on_clear
        self.on_complete = on_complete
        self.scheduler = DecayScheduler(cfg.decay_interval, self.tick)
        self.dispatcher = Dispatcher(COMMANDS, iteration_cap=cfg.script_cap)
        self.started = False

    # ------------------------------------------------------------ lifecycle
    def start(self) -> None:
        with self.lock:
            if self.started:
                return
            self.started = True
            self.emit(*BANNER)
        self.scheduler.start()

    def stop_decay(self) -> None:
        self.scheduler.stop()

    def close(self) -> None:
        self.scheduler.stop()
        self.scheduler.join()

    @property
    def completed(self) -> bool:
        return self.state.completed

    # ------------------------------------------------------------- commands
    def execute(self, raw: str) -> Optional[Command]:
        with self.lock:
            return self.dispatcher.submit(self, raw)

    def tick(self) -> bool:
        with self.lock:
            if self.scheduler.stopped:
                return False
            step = self.cfg.decay_step
            self.state.apply_decay(step)
            self.emit(f"[RAD] contamination rising: +{step} (score -{step})")
            logger.debug(
                "decay tick integrity=%d contamination=%d",
                self.state.integrity,
                self.state.contamination,
            )
        self.notify("decay")
        return True

    def complete(self) -> Dict[str, Any]:
        self.state.completed = True
        record = score_record(self.cfg.level, self.state.integrity)
        self.score_log.record(record)
        if self.on_complete is not None:
            try:
                self.on_complete(record)
            except Exception:
                logger.debug("completion hook failed", exc_info=True)
        return record

    # ----------------------------------------------------------- transcript
    def emit(self, *lines: str) -> None:
        for line in lines:
            self.state.transcript.append(line)
            if self.echo is not None:
                self.echo(line)

    def clear_transcript(self) -> None:
        self.state.transcript.clear()
        if self.on_clear is not None:
            self.on_clear()

    def notify(self, kind: str) -> None:
        notify_safely(self.notifier, kind)
