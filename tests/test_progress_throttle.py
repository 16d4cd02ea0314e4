from __future__ import annotations

from sm3hash.core.stream import ProgressThrottle


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_step_lets_values_through() -> None:
    throttle = ProgressThrottle(step=1, interval=10.0, clock=FakeClock())
    throttle.mark(0)

    assert throttle.offer(1)
    assert throttle.offer(5)
    assert throttle.last_percent == 5


def test_unchanged_or_lower_values_never_pass() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(step=1, interval=0.2, clock=clock)
    throttle.mark(40)

    clock.now = 5.0
    assert not throttle.offer(40)
    assert not throttle.offer(39)
    assert throttle.last_percent == 40


def test_interval_releases_small_steps() -> None:
    clock = FakeClock()
    throttle = ProgressThrottle(step=5, interval=0.2, clock=clock)
    throttle.mark(0)

    assert not throttle.offer(3)

    clock.now = 0.25
    assert throttle.offer(3)
    assert not throttle.offer(4)

    clock.now = 0.3
    assert throttle.offer(8)


def test_step_is_at_least_one() -> None:
    throttle = ProgressThrottle(step=0, interval=1.0, clock=FakeClock())

    assert throttle.step == 1


def test_first_offer_without_mark() -> None:
    throttle = ProgressThrottle(step=1, interval=1.0, clock=FakeClock())

    assert throttle.offer(0)
    assert not throttle.offer(0)
