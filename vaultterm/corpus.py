"""Synthetic vault audit log with the secret token hidden in hex fragments.

The corpus is generated once per session. Its shape never changes between runs
(filler cadence, four labeled fragment lines, one hint line); only the offset of
the fragment cluster is randomized, so a player cannot memorize line numbers.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Sequence, Tuple

from .config import FRAGMENT_LABELS, FRAGMENT_SPAN, LOG_NAME

USERS = ("vault_op_11", "vault_med_07", "vault_tech_04", "settler_01", "engineer_42")
BUCKETS = ("rad_mon", "eco_backup", "compliance", "food_ration")

HINT_MARKER = "[HINT]"
HEX_RUN = re.compile(r"[0-9a-f]{8,}", re.IGNORECASE)
FRAGMENT_LINE = re.compile(r"frag([A-D]):([0-9a-fA-F]*):")
FLAG_SHAPE = re.compile(r"^([^{}]+\{)(.+)(\})$")

# offsets of fragments A-D and of the hint, relative to the cluster base
FRAGMENT_OFFSETS = (0, 7, 21, FRAGMENT_SPAN)
HINT_OFFSET = 3


def to_hex(text: str) -> str:
    return text.encode("utf-8").hex()


def decode_hex(value: str) -> str:
    """Decode pairs of hex digits to text.

    Raises ``ValueError`` for odd-length input or non-hex digits.
    """
    if any(ch.isspace() for ch in value):
        raise ValueError("whitespace in hex payload")
    raw = bytes.fromhex(value)
    return raw.decode("utf-8", errors="replace")


def split_token(token: str) -> List[str]:
    """Cut ``token`` into four contiguous slices, in A-D order."""
    match = FLAG_SHAPE.match(token)
    if match and len(match.group(2)) >= 2:
        head, body, tail = match.groups()
        middle = len(body) / 2
        cuts = [i for i, ch in enumerate(body) if ch == "_" and i > 0]
        cut = min(cuts, key=lambda i: (abs(i - middle), i)) if cuts else len(body) // 2
        return [head, body[:cut], body[cut:], tail]
    size, extra = divmod(len(token), len(FRAGMENT_LABELS))
    pieces = []
    start = 0
    for index in range(len(FRAGMENT_LABELS)):
        stop = start + size + (1 if index < extra else 0)
        pieces.append(token[start:stop])
        start = stop
    return pieces


@dataclass(frozen=True)
class Corpus:
    lines: Tuple[str, ...]
    name: str = LOG_NAME

    def __len__(self) -> int:
        return len(self.lines)

    @cached_property
    def _fragments(self) -> Tuple[Tuple[str, str], ...]:
        found = {}
        for line in self.lines:
            match = FRAGMENT_LINE.search(line)
            if match and match.group(1) not in found:
                found[match.group(1)] = match.group(2)
        return tuple((label, found[label]) for label in FRAGMENT_LABELS if label in found)

    @cached_property
    def _hex_tokens(self) -> Tuple[str, ...]:
        tokens = []
        seen = set()
        for line in self.lines:
            match = HEX_RUN.search(line)
            if match and match.group(0) not in seen:
                seen.add(match.group(0))
                tokens.append(match.group(0))
        return tuple(tokens)

    def fragment_lines(self) -> List[Tuple[str, str]]:
        """Return ``(label, hex)`` for each tagged fragment line, in label order."""
        return list(self._fragments)

    def label_of(self, token: str) -> Optional[str]:
        for label, payload in self._fragments:
            if payload == token:
                return label
        return None

    def hex_tokens(self) -> List[str]:
        return list(self._hex_tokens)

    def decoy_tokens(self) -> List[str]:
        payloads = {payload for _, payload in self._fragments}
        return [token for token in self._hex_tokens if token not in payloads]

    def hint(self) -> Optional[str]:
        for line in self.lines:
            if line.startswith(HINT_MARKER):
                return line
        return None

    def tail(self, count: int) -> List[str]:
        return list(self.lines[-count:]) if count > 0 else []

    def decoded(self, line: str) -> Optional[str]:
        match = FRAGMENT_LINE.search(line)
        payload = match.group(2) if match else None
        if payload is None:
            run = HEX_RUN.search(line)
            payload = run.group(0) if run else None
        if not payload:
            return None
        try:
            return decode_hex(payload)
        except ValueError:
            return None

    def search(self, pattern: str, limit: int) -> List[Tuple[str, Optional[str]]]:
        """Case-insensitive search over raw lines and their decoded payloads.

        Returns ``(line, ascii)`` pairs; ``ascii`` is set when the hit came from
        the decoded payload rather than the raw text.
        """
        try:
            regex = re.compile(pattern, re.IGNORECASE)
        except re.error:
            regex = re.compile(re.escape(pattern), re.IGNORECASE)
        hits: List[Tuple[str, Optional[str]]] = []
        for line in self.lines:
            if len(hits) >= limit:
                break
            if regex.search(line):
                hits.append((line, None))
                continue
            text = self.decoded(line)
            if text is not None and regex.search(text):
                hits.append((line, text))
        return hits


def _filler(index: int, corrupt_every: int) -> str:
    ident = 100000 + index
    user = USERS[index % len(USERS)]
    bucket = BUCKETS[index % len(BUCKETS)]
    if index % corrupt_every == 0:
        hexfrag = to_hex(f"{ident}-{user}-{bucket}")[:20]
        return (
            f'[CORRUPT] id={ident} fragment=0x{hexfrag} note="partial: {hexfrag[:12]}..."'
        )
    return (
        f'[AUDIT] vault_del id={ident} user={user} bucket={bucket} '
        f'file="bin_{ident}.dat" status=obliterated'
    )


def generate(
    secret: str,
    line_count: int,
    rng: Optional[random.Random] = None,
    *,
    corrupt_every: int = 137,
    window: Sequence[int] = (50, 420),
) -> Corpus:
    rng = rng or random.Random()
    line_count = max(int(line_count), FRAGMENT_SPAN + 2)
    lines = [_filler(index, corrupt_every) for index in range(line_count)]

    last_base = line_count - FRAGMENT_SPAN - 1
    stop = min(int(window[1]), last_base)
    start = max(1, min(int(window[0]), stop))
    base = rng.randint(start, stop)

    pieces = [to_hex(piece) for piece in split_token(secret)]
    for label, offset, piece in zip(FRAGMENT_LABELS, FRAGMENT_OFFSETS, pieces):
        lines[base + offset] = (
            f'[AUDIT] salvage id={1337 + offset} user=vault_curator '
            f'note="frag{label}:{piece}:chunk"'
        )
    lines[base + HINT_OFFSET] = (
        f"{HINT_MARKER} {LOG_NAME} contains hex fragments. ASCII -> hex -> glue -> flag. "
        '"the world ended, but compliance reports didn\'t."'
    )
    return Corpus(lines=tuple(lines))
