import pytest

from stairup.exceptions import CooldownActiveError
from stairup.utils.cooldown import LapCooldown


class FakeClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value


def test_cooldown_blocks_until_window_passes():
    clock = FakeClock()
    cooldown = LapCooldown(60, clock=clock)

    cooldown.check("s1")
    cooldown.mark("s1")

    clock.value += 20.5
    assert cooldown.remaining("s1") == 40
    with pytest.raises(CooldownActiveError) as exc_info:
        cooldown.check("s1")
    assert exc_info.value.retry_after == 40
    assert exc_info.value.status_code == 429

    clock.value += 40
    assert cooldown.remaining("s1") == 0
    cooldown.check("s1")


def test_cooldown_is_per_session_and_can_be_forgotten():
    clock = FakeClock()
    cooldown = LapCooldown(60, clock=clock)
    cooldown.mark("s1")

    assert cooldown.remaining("s2") == 0
    cooldown.forget("s1")
    assert cooldown.remaining("s1") == 0


def test_zero_seconds_disables_cooldown():
    cooldown = LapCooldown(0)
    cooldown.mark("s1")
    cooldown.check("s1")
