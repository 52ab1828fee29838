from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Handler = Callable[..., None]

DEFAULT_ITERATION_CAP = 1000


@dataclass(frozen=True)
class Command:
    name: str
    args: List[str]


def parse(raw: str) -> Optional[Command]:
    parts = raw.split()
    if not parts:
        return None
    return Command(name=parts[0].lower(), args=parts[1:])


class Dispatcher:
    def __init__(
        self,
        handlers: Optional[Dict[str, Handler]] = None,
        *,
        iteration_cap: int = DEFAULT_ITERATION_CAP,
    ) -> None:
        self.handlers: Dict[str, Handler] = dict(handlers or {})
        self.iteration_cap = max(1, int(iteration_cap))

    def register(self, handler: Handler, *names: str) -> None:
        for name in names:
            self.handlers[name.lower()] = handler

    def submit(self, term, raw: str) -> Optional[Command]:
        """Record, echo and run one line typed by the player."""
        if not raw.strip():
            return None
        term.state.history.append(raw)
        return self.run(term, raw)

    def run(self, term, line: str) -> Optional[Command]:
        command = parse(line)
        if command is None:
            return None
        term.emit(f"> {line.strip()}")
        handler = self.handlers.get(command.name)
        if handler is None:
            term.emit(f"Unknown command: {command.name}. Try 'help'.")
            return command
        logger.debug("dispatch %s %s", command.name, command.args)
        handler(term, command.args)
        return command

    def repeat(self, term, line: str, count: int) -> int:
        """Run ``line`` up to ``count`` times, bounded by the iteration cap."""
        runs = min(max(0, int(count)), self.iteration_cap)
        for _ in range(runs):
            self.run(term, line)
        return runs
