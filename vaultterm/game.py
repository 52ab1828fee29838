#!/usr/bin/env python3
import argparse
import logging
import textwrap
from dataclasses import replace
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.history import History
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import clear

from .config import TerminalConfig
from .session import CommandHistory
from .sinks import BellNotifier, SilentNotifier
from .terminal import Terminal

WIDTH = 100


def render(text):
    lines = []
    for para in text.split("\n"):
        if para.strip() == "" or len(para) <= WIDTH:
            lines.append(para.rstrip())
            continue
        indent = " " * (len(para) - len(para.lstrip()))
        lines.append(textwrap.fill(para.strip(), width=WIDTH, initial_indent=indent,
                                   subsequent_indent=indent + "  "))
    return "\n".join(lines)


def show(text=""):
    if text is None:
        return
    if text == "":
        print()
        return
    print(render(text))


def echo(line):
    # the prompt already shows what the player typed
    if line.startswith("> "):
        return
    show(line)


class SessionHistory(History):
    """Feed prompt_toolkit's arrow-key recall from the session's command history."""

    def __init__(self, history: CommandHistory) -> None:
        super().__init__()
        self.history = history

    def load_history_strings(self):
        return list(reversed(self.history.entries))

    def store_string(self, string: str) -> None:
        # the dispatcher records every submitted line
        return None


def build_parser():
    parser = argparse.ArgumentParser(description="vaultterm // vault-tec mainframe sim")
    parser.add_argument("--seed", type=int, default=None, help="seed for a reproducible vault")
    parser.add_argument("--interval", type=float, default=None, help="seconds between decay ticks")
    parser.add_argument("--lines", type=int, default=None, help="size of the audit log")
    parser.add_argument("--scores", type=Path, default=None, help="score log JSON file")
    parser.add_argument("--no-bell", action="store_true", help="disable the terminal bell cue")
    parser.add_argument("--verbose", action="store_true", help="debug logging on stderr")
    return parser


def build_config(args):
    updates = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.interval is not None:
        updates["decay_interval"] = args.interval
    if args.lines is not None:
        updates["log_lines"] = args.lines
    if args.scores is not None:
        updates["scores_path"] = args.scores
    return replace(TerminalConfig(), **updates)


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    try:
        cfg = build_config(args)
        notifier = SilentNotifier() if args.no_bell else BellNotifier()
        terminal = Terminal(cfg, notifier=notifier, echo=echo, on_clear=clear)
    except ValueError as exc:
        show(f"vaultterm: {exc}")
        return 2

    session = PromptSession(history=SessionHistory(terminal.state.history))
    with patch_stdout(raw=True):
        terminal.start()
        try:
            while not terminal.completed:
                try:
                    line = session.prompt("> ")
                except (EOFError, KeyboardInterrupt):
                    print()
                    show("Session ended.")
                    return 0
                terminal.execute(line)
        finally:
            terminal.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
