import logging

from .config import FRAGMENT_LABELS, LOG_ALIASES, LOG_NAME
from .corpus import decode_hex
from .session import FRAGMENT_SLOTS, SequenceStage

logger = logging.getLogger(__name__)

SCRIPTABLE = ("scan",)

HELP = [
    "Commands:",
    "  help                       show this help",
    "  status                     show score + contamination + fragments",
    "  scan                       scan for corrupted fragments (low reveal)",
    "  brute                      attempt brute-force recovery (fast, raises contamination, VERY limited)",
    "  reroute [t1 t2 t3 t4]      start the reroute power puzzle, or enter its 4-token sequence",
    "  repair [t1 t2 t3 t4]       attempt to repair/merge fragments (after enough salvage cycles)",
    f"  view {LOG_NAME}        print the audit log tail (very large)",
    f"  grep <pattern> {LOG_NAME}   search logs for pattern (hex or ascii)",
    "  script scan <n>            run 'scan' n times (automation)",
    "  submit <flag>              submit the recovered flag",
    "  clear                      clear console",
]


def _salvage_line(term, verb):
    state = term.state
    return f"{verb}: salvage cycle recorded ({state.salvage_cycles}/{state.salvage_required})."


def _reveal(term, token):
    label = term.corpus.label_of(token)
    added = term.state.reveal(token, label)
    if added:
        logger.debug("revealed %s (label=%s)", token, label)
    return added


def cmd_help(term, args):
    term.emit(*HELP)


def cmd_status(term, args):
    state = term.state
    term.emit(
        f"INTEGRITY: {state.integrity} pts",
        f"CONTAMINATION: {state.contamination} units",
        f"FRAGMENTS FOUND: {state.labeled_count()}/{len(FRAGMENT_LABELS)}",
        f"SALVAGE CYCLES: {state.salvage_cycles}/{state.salvage_required} (scan + brute)",
        f"BRUTE ATTEMPTS: {state.brute_uses}/{term.cfg.brute_cap}",
        f"POWER ROUTING: {state.sequence_stage.value.upper()}",
        f"ARCHIVE: {'RECOVERED' if state.corpus_searchable else 'CORRUPTED'}",
    )


def cmd_scan(term, args):
    state = term.state
    if state.labeled_count() >= FRAGMENT_SLOTS:
        state.salvage_cycles += 1
        term.emit("scan: no additional core fragments found.", _salvage_line(term, "scan"))
        return

    found = []
    for label, payload in term.corpus.fragment_lines():
        if label in state.fragments_by_label:
            continue
        if _reveal(term, payload):
            found.append(payload)
            if len(found) >= 2:
                break

    if not found:
        candidates = [t for t in term.corpus.decoy_tokens() if t not in state.fragments_revealed]
        if candidates:
            token = term.rng.choice(candidates)
            if _reveal(term, token):
                found.append(token)

    state.salvage_cycles += 1
    if found:
        term.emit(
            f"scan: recovered core fragments -> {', '.join(found)}",
            _salvage_line(term, "scan"),
            "",
        )
    else:
        term.emit("scan: found nothing unusual.", _salvage_line(term, "scan"))


def cmd_brute(term, args):
    state = term.state
    cap = term.cfg.brute_cap
    if state.brute_uses >= cap:
        term.emit(
            f"brute: maximum brute-force attempts reached ({cap}/{cap}).",
            "brute: SYSTEM WARNING - brute interface in lockdown.",
            "brute: further brute attempts disabled. Use 'scan' or 'script scan <n>' to continue salvage.",
        )
        return

    state.brute_uses += 1
    state.salvage_cycles += 1
    term.emit(
        "brute: starting brute-force salvage (this will raise contamination) ...",
        f"brute: WARNING - brute is strictly limited ({state.brute_uses}/{cap} uses).",
    )

    pool = term.corpus.hex_tokens()
    picks = term.rng.sample(pool, k=min(2, len(pool)))
    found = [token for token in picks if _reveal(term, token)]

    penalty = term.cfg.brute_penalty
    state.apply_decay(penalty)
    term.emit(f"brute: contamination +{penalty} (score -{penalty})")
    term.notify("decay")

    if found:
        term.emit(f"brute: recovered fragments -> {', '.join(found)}", _salvage_line(term, "brute"))
    else:
        term.emit("brute: no new fragments recovered.", _salvage_line(term, "brute"))


def _sequence_for(term):
    width = term.cfg.sequence_token_len
    fragments = term.corpus.fragment_lines()
    if len(fragments) >= len(FRAGMENT_LABELS):
        return [payload[:width] for _, payload in fragments[: len(FRAGMENT_LABELS)]]
    pool = term.corpus.hex_tokens()
    sequence = []
    for index in range(len(FRAGMENT_LABELS)):
        sequence.append(term.rng.choice(pool)[:width] if pool else f"deadbeef{index}")
    return sequence


def cmd_reroute(term, args):
    state = term.state
    if state.sequence_stage is SequenceStage.OPEN:
        term.emit("reroute: power has already been routed. Vault stable.")
        return
    if args and len(args) != len(FRAGMENT_LABELS):
        term.emit("usage: reroute            (unlock the power panel)",
                  "       reroute t1 t2 t3 t4 (enter the 4-token sequence)")
        return

    if args and state.sequence_stage is SequenceStage.PARTIAL:
        state.sequence_entry = list(args)
        if args == state.required_sequence:
            state.sequence_stage = SequenceStage.OPEN
            term.emit(
                "reroute: sequence accepted. power distribution restored.",
                "reroute: power has been routed. Vault stable.",
            )
        else:
            term.emit(
                "reroute: sequence rejected. tokens must match the panel exactly, in order.",
                "reroute: use `scan` / `brute` to recover hex fragments and try again.",
            )
        return

    state.required_sequence = _sequence_for(term)
    state.sequence_entry = []
    state.sequence_stage = SequenceStage.PARTIAL
    term.emit(
        "reroute: power distribution panel unlocked (partial).",
        "reroute: a sequence of 4 hex tokens must be entered in order to complete reroute.",
        "reroute: use `scan` / `brute` to recover hex fragments, then `reroute <token1> <token2> <token3> <token4>`.",
    )
    if args:
        term.emit("reroute: panel was offline; the entered tokens were not checked.")


def cmd_repair(term, args):
    state = term.state
    if state.corpus_searchable:
        term.emit(f"repair: {LOG_NAME} already restored. nothing left to merge.")
        return
    if args and len(args) != len(FRAGMENT_LABELS):
        term.emit("usage: repair [t1 t2 t3 t4]")
        return

    if state.salvage_cycles < state.salvage_required:
        term.emit(
            "repair: system integrity routines incomplete.",
            f"repair: additional salvage cycles required ({state.salvage_cycles}/{state.salvage_required}).",
            "repair: keep using 'scan', 'script scan <n>' and limited 'brute' until threshold is reached.",
        )
        return

    missing = state.missing_labels()
    if missing:
        term.emit(
            f"repair: insufficient core fragments recovered ({state.labeled_count()}/{len(FRAGMENT_LABELS)}).",
            f"repair: missing fragments: {', '.join(missing)}.",
            "repair: keep using scan / brute until all 4 core fragments are found.",
        )
        return

    tokens = list(args) if args else [state.fragments_by_label[label] for label in FRAGMENT_LABELS]
    try:
        ascii_text = decode_hex("".join(tokens))
    except ValueError:
        term.emit("repair: error while reconstructing fragments.")
        return

    if term.cfg.flag_prefix not in ascii_text:
        term.emit(
            "repair: fragments did not reconstruct a valid flag.",
            f"repair: reconstructed ascii -> {ascii_text or '[empty]'}",
        )
        return

    state.corpus_searchable = True
    state.integrity += term.cfg.repair_bonus
    state.contamination = max(0, state.contamination - term.cfg.repair_cleanse)
    term.stop_decay()
    term.emit(
        "repair: fragments merged. vault stability increased.",
        f"repair: recovered ascii snippet -> {ascii_text}",
        f"repair: {LOG_NAME} is now searchable.",
    )


def cmd_view(term, args):
    target = " ".join(args)
    if not target:
        term.emit(f"view: missing file (try: view {LOG_NAME})")
        return
    if target not in LOG_ALIASES:
        term.emit(f"view: {target}: no such file")
        return
    term.emit(f"--- {LOG_NAME} (tail) ---", *term.corpus.tail(term.cfg.view_tail), "--- end tail ---")


def cmd_search(term, args):
    if not term.state.corpus_searchable:
        term.emit(
            f"grep: {LOG_NAME} is corrupted / not recovered. Try repair after collecting fragments."
        )
        return
    if not args:
        term.emit(f"grep: missing pattern (try: grep GGCAMP {LOG_NAME})")
        return
    pattern = args[0]
    target = " ".join(args[1:]) or LOG_NAME
    if target not in LOG_ALIASES:
        term.emit(f"grep: {target}: no such file")
        return
    hits = term.corpus.search(pattern, term.cfg.search_limit)
    if not hits:
        term.emit(f"grep: no matches for '{pattern}'")
        return
    lines = ["--- grep results ---"]
    for line, text in hits:
        lines.append(line)
        if text is not None:
            lines.append(f"    ascii -> {text}")
    lines.append("--- end results ---")
    term.emit(*lines)


def cmd_script(term, args):
    sub = args[0].lower() if args else ""
    if sub not in SCRIPTABLE:
        term.emit(
            "script: only 'scan' is scriptable in this terminal.",
            "usage: script scan <count>",
        )
        return
    try:
        count = int(args[1]) if len(args) > 1 else 0
    except ValueError:
        count = 0
    if count <= 0:
        term.emit("script: invalid count. usage: script scan <positive_number>")
        return

    capped = min(count, term.dispatcher.iteration_cap)
    term.emit(
        f"script: running '{sub}' {capped} time(s)...",
        "script: this may spam the terminal - that's expected.",
        "",
    )
    term.dispatcher.repeat(term, sub, capped)
    term.emit("script: completed scripted scans.")


def cmd_submit(term, args):
    candidate = " ".join(args)
    if not candidate:
        term.emit("submit: missing flag. Usage: submit GGCAMP{...}")
        return
    if candidate != term.cfg.secret:
        term.emit("submit: incorrect flag")
        return
    if term.state.completed:
        term.emit("submit: flag already accepted.")
        return
    term.stop_decay()
    term.emit("", "FLAG ACCEPTED. Vault stabilized... for now.", f"Final Score: {term.state.integrity} pts")
    term.complete()
    term.emit(
        f"You will be transitioned to Level {term.cfg.next_level} "
        f"in {term.cfg.transition_delay:g} seconds..."
    )


def cmd_clear(term, args):
    term.clear_transcript()


COMMANDS = {
    "help": cmd_help,
    "?": cmd_help,
    "status": cmd_status,
    "scan": cmd_scan,
    "brute": cmd_brute,
    "reroute": cmd_reroute,
    "repair": cmd_repair,
    "view": cmd_view,
    "search": cmd_search,
    "grep": cmd_search,
    "script": cmd_script,
    "batch": cmd_script,
    "submit": cmd_submit,
    "clear": cmd_clear,
}
