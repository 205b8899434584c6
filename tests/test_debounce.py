import pytest

from state.debounce import Debouncer


def test_burst_collapses_into_one_call(clock) -> None:
    calls: list[float] = []
    debouncer = Debouncer(0.5, lambda: calls.append(clock()), clock=clock)

    for _ in range(10):
        debouncer.trigger()
        clock.advance(0.04)
        assert not debouncer.poll()

    clock.advance(0.5)
    assert debouncer.poll()
    assert len(calls) == 1
    assert not debouncer.pending


def test_trigger_resets_rather_than_queues(clock) -> None:
    calls: list[int] = []
    debouncer = Debouncer(0.5, lambda: calls.append(1), clock=clock)

    debouncer.trigger()
    clock.advance(0.4)
    debouncer.trigger()
    clock.advance(0.4)

    assert not debouncer.poll()
    clock.advance(0.2)
    assert debouncer.poll()
    assert calls == [1]


def test_flush_fires_pending_immediately(clock) -> None:
    calls: list[int] = []
    debouncer = Debouncer(0.5, lambda: calls.append(1), clock=clock)

    assert not debouncer.flush()
    debouncer.trigger()
    assert debouncer.flush()
    assert calls == [1]
    assert not debouncer.flush()


def test_cancel_drops_pending_call(clock) -> None:
    calls: list[int] = []
    debouncer = Debouncer(0.5, lambda: calls.append(1), clock=clock)
    debouncer.trigger()

    assert debouncer.cancel()
    clock.advance(1)
    assert not debouncer.poll()
    assert calls == []
    assert not debouncer.cancel()


def test_negative_delay_is_rejected() -> None:
    with pytest.raises(ValueError):
        Debouncer(-1, lambda: None)
