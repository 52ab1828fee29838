import threading
import time
from dataclasses import replace

from vaultterm.decay import DecayScheduler
from vaultterm.terminal import Terminal
from tests.conftest import BrokenNotifier


def test_start_and_stop_are_idempotent() -> None:
    scheduler = DecayScheduler(3600.0, lambda: None)
    assert scheduler.start() is True
    assert scheduler.start() is False
    assert scheduler.active
    assert scheduler.stop() is True
    assert scheduler.stop() is False
    assert scheduler.start() is False
    scheduler.join()
    assert not scheduler.active


def test_scheduler_fires_on_its_own_thread() -> None:
    fired = threading.Event()
    threads = []

    def on_tick() -> None:
        threads.append(threading.current_thread().name)
        fired.set()

    scheduler = DecayScheduler(0.01, on_tick)
    scheduler.start()
    assert fired.wait(2.0)
    scheduler.stop()
    scheduler.join()
    assert threads[0] == "vaultterm-decay"
    assert scheduler.ticks >= 1


def test_tick_moves_both_resources_and_floors_integrity(terminal, notifier) -> None:
    terminal.state.integrity = 5
    assert terminal.tick() is True
    assert terminal.state.integrity == 0
    assert terminal.state.contamination == 10
    assert terminal.state.transcript[-1] == "[RAD] contamination rising: +10 (score -10)"
    assert notifier.events == ["decay"]
    terminal.tick()
    assert terminal.state.integrity == 0
    assert terminal.state.contamination == 20


def test_tick_after_stop_is_a_no_op(terminal) -> None:
    terminal.stop_decay()
    assert terminal.tick() is False
    assert terminal.state.contamination == 0
    assert terminal.state.integrity == terminal.cfg.start_integrity


def test_failing_notifier_never_breaks_a_tick(cfg) -> None:
    term = Terminal(cfg, notifier=BrokenNotifier())
    try:
        assert term.tick() is True
        assert term.state.contamination == cfg.decay_step
    finally:
        term.close()


def test_blocked_engine_does_not_burst_ticks(cfg) -> None:
    term = Terminal(replace(cfg, decay_interval=0.05))
    step = term.cfg.decay_step
    try:
        with term.lock:
            term.start()
            time.sleep(0.3)
            assert term.state.contamination == 0
        deadline = time.monotonic() + 2.0
        while term.state.contamination == 0 and time.monotonic() < deadline:
            time.sleep(0.001)
        term.stop_decay()
    finally:
        term.close()
    assert step <= term.state.contamination < 3 * step
