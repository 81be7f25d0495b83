"""Shared fixtures: fake clock/input/renderer and small board layouts."""

import pytest

from game_logic import AutopilotConfig


class FakeClock:
    """Records sleeps instead of sleeping; CPU time advances by a fixed step per read."""

    def __init__(self, cpu_step: float = 0.25):
        self.sleeps = []
        self.cpu_step = cpu_step
        self._cpu = 0.0

    def sleep(self, micros):
        self.sleeps.append(micros)

    def cpu_time(self):
        value = self._cpu
        self._cpu += self.cpu_step
        return value


class ScriptedInput:
    """Answers poll_stop_requested() from a script, then False forever."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.polls = 0

    def poll_stop_requested(self):
        self.polls += 1
        if self.answers:
            return self.answers.pop(0)
        return False


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def draw_cell(self, x, y, symbol):
        self.calls.append(("draw", x, y, symbol))

    def clear_cell(self, x, y):
        self.calls.append(("clear", x, y))


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recording_renderer():
    return RecordingRenderer()


@pytest.fixture
def straight_config():
    """30x20 open board; three targets reachable along straight lines."""
    return AutopilotConfig(
        width=30,
        height=20,
        start_x=5,
        start_y=10,
        length=3,
        heading="right",
        targets=[(15, 10), (15, 14), (10, 14)],
        obstacles=[],
        quota=3,
        tick_delay_micros=5000,
    )


@pytest.fixture
def pocket_config():
    """9x9 board where the head starts boxed in by walls and its own body."""
    return AutopilotConfig(
        width=9,
        height=9,
        start_x=2,
        start_y=2,
        length=4,
        heading="left",
        targets=[(2, 7)],
        obstacles=[(2, 3)],
        obstacle_size=1,
        quota=1,
        tick_delay_micros=0,
    )
