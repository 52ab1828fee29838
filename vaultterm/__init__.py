"""Vault-Tec mainframe puzzle terminal."""

from .config import TerminalConfig
from .corpus import Corpus, generate
from .dispatcher import Command, Dispatcher, parse
from .session import CommandHistory, SequenceStage, SessionState
from .terminal import Terminal

__all__ = [
    "Command",
    "CommandHistory",
    "Corpus",
    "Dispatcher",
    "SequenceStage",
    "SessionState",
    "Terminal",
    "TerminalConfig",
    "generate",
    "parse",
]
