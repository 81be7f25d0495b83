# Per-tick autopilot state machine: navigator -> snake.advance -> outcome.
from __future__ import annotations

from dataclasses import dataclass

try:
    from .game_logic import (
        CELL_WALL,
        STATUS_COLLIDED,
        STATUS_RUNNING,
        STATUS_STOPPED,
        STATUS_WON,
        STOP_REQUESTED,
        STOP_STALLED,
        TERMINAL_STATUSES,
        AutopilotConfig,
        Cell,
        Snake,
    )
    from .navigator import Navigator
except ImportError:
    from game_logic import (
        CELL_WALL,
        STATUS_COLLIDED,
        STATUS_RUNNING,
        STATUS_STOPPED,
        STATUS_WON,
        STOP_REQUESTED,
        STOP_STALLED,
        TERMINAL_STATUSES,
        AutopilotConfig,
        Cell,
        Snake,
    )
    from navigator import Navigator


@dataclass
class TickResult:
    """What changed during one tick (moved=False when the game was already over)."""
    status: str
    moved: bool = False
    direction: str | None = None
    head: Cell | None = None
    previous_head: Cell | None = None
    freed: Cell | None = None
    crossed: bool = False
    eaten: Cell | None = None
    next_target: Cell | None = None


class AutopilotGame:
    """Pure autopilot state + rules (no rendering, input or timing)."""

    def __init__(self, config: AutopilotConfig) -> None:
        self.config = config
        self.reset()

    def reset(self) -> None:
        """Validate the layout and build a fresh board, snake and first goal."""
        self.board = self.config.validate()
        self.snake = Snake(self.config.initial_body())
        self.heading = self.config.heading
        self.navigator = Navigator(self.board)
        self.status = STATUS_RUNNING
        self.collision_reason: str | None = None
        self.stop_reason: str | None = None
        self.stop_requested = False
        self.eaten = 0
        self.moves = 0
        self.stagnation_steps = 0
        self.target: Cell | None = None
        self._activate_target()

    @property
    def running(self) -> bool:
        return self.status == STATUS_RUNNING

    @property
    def finished(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _activate_target(self) -> None:
        self.target = tuple(self.config.targets[self.eaten])
        self.board.place_target(self.target)
        self.navigator.set_goal(self.target, self.snake.head)

    def request_stop(self) -> None:
        """Ask the game to stop; honoured at the start of the next step()."""
        self.stop_requested = True

    def step(self) -> TickResult:
        """Advance one tick. Returns what moved and the resulting status."""
        if self.stop_requested and self.status == STATUS_RUNNING:
            self.status = STATUS_STOPPED
            self.stop_reason = STOP_REQUESTED
        if self.finished:
            return TickResult(status=self.status)

        direction = self.navigator.choose(self.snake, self.heading)
        previous_head = self.snake.head
        head, freed, crossed = self.snake.advance(direction, self.board)
        self.heading = direction
        self.moves += 1
        if crossed:
            self.navigator.note_crossing()

        result = TickResult(
            status=self.status,
            moved=True,
            direction=direction,
            head=head,
            previous_head=previous_head,
            freed=freed,
            crossed=crossed,
        )

        if head == self.target:
            self.board.clear_target(head)
            self.eaten += 1
            self.stagnation_steps = 0
            result.eaten = head
            if self.eaten == self.config.quota:
                self.status = STATUS_WON
                self.target = None
            else:
                self._activate_target()
                result.next_target = self.target
        elif self.board.classify(head) == CELL_WALL:
            self.status = STATUS_COLLIDED
            self.collision_reason = "wall"
        elif head in self.snake.body_cells():
            self.status = STATUS_COLLIDED
            self.collision_reason = "self"
        else:
            self.stagnation_steps += 1
            if self.stagnation_steps > self.config.stall_limit_factor * len(self.snake):
                self.status = STATUS_STOPPED
                self.stop_reason = STOP_STALLED

        result.status = self.status
        return result
