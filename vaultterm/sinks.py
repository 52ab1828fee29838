"""Write-only collaborators of the engine: notification cues and the score log."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

logger = logging.getLogger(__name__)


class SilentNotifier:
    def notify(self, kind: str) -> None:
        return None


class BellNotifier:
    """Ring the terminal bell for decay and brute events."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream

    def notify(self, kind: str) -> None:
        stream = self.stream or sys.stdout
        stream.write("\a")
        stream.flush()


def notify_safely(notifier, kind):
    """Call ``notifier.notify(kind)``; a failing notifier never reaches the caller."""
    if notifier is None:
        return
    try:
        notifier.notify(kind)
    except Exception:
        logger.debug("notifier failed for %s", kind, exc_info=True)


def score_record(level: int, score: int, when: Optional[datetime] = None) -> Dict[str, Any]:
    when = when or datetime.now(timezone.utc)
    return {"level": level, "score": score, "when": when.isoformat()}


class ScoreLog:
    """Append-only list of finished-level records in a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def record(self, record: Dict[str, Any]) -> bool:
        try:
            existing = self._read()
            existing.append(record)
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump(existing, handle, indent=2)
        except (OSError, ValueError):
            logger.debug("unable to write score record to %s", self.path, exc_info=True)
            return False
        return True

    def _read(self) -> List[Any]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, list):
            raise ValueError(f"{self.path} does not hold a list of records")
        return data
