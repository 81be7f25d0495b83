# Core board/snake model for the autopilot, independent from GUI/terminal code.
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, fields

import numpy as np


# Bounds used when validating configuration.
MIN_BOARD_SIZE = 5
MAX_BOARD_SIZE = 200
MIN_LENGTH = 1
MIN_TICK_DELAY_US = 0
MAX_TICK_DELAY_US = 5_000_000
MIN_STALL_LIMIT_FACTOR = 1

REVERSE_DIRECTION = {"up": "down", "down": "up", "left": "right", "right": "left"}
DELTAS = {"up": (0, -1), "down": (0, 1), "left": (-1, 0), "right": (1, 0)}

# Cell states stored in the board grid.
CELL_OPEN = 0
CELL_WALL = 1
CELL_PORTAL = 2
CELL_TARGET = 3

STATUS_RUNNING = "running"
STATUS_WON = "won"
STATUS_COLLIDED = "collided"
STATUS_STOPPED = "stopped"
STOP_REQUESTED = "requested"
STOP_STALLED = "stalled"
TERMINAL_STATUSES = (STATUS_WON, STATUS_COLLIDED, STATUS_STOPPED)

# Classic layout: 80x40 board, ten apples, six 5x5 blocks.
CLASSIC_TARGETS = (
    (75, 8), (75, 39), (78, 2), (2, 2), (8, 5),
    (78, 39), (74, 33), (2, 38), (72, 35), (5, 2),
)
CLASSIC_OBSTACLES = ((3, 3), (74, 3), (3, 34), (74, 34), (38, 21), (38, 15))

Cell = tuple[int, int]


class ConfigurationError(ValueError):
    """Raised when a board layout cannot be played as configured."""


def step_cell(cell: Cell, direction: str) -> Cell:
    """Translate a cell by one tile in the given direction (no wrap)."""
    dx, dy = DELTAS[direction]
    return cell[0] + dx, cell[1] + dy


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass
class AutopilotConfig:
    """Runtime settings shared between the engine and the front-ends."""
    width: int = 80
    height: int = 40
    start_x: int = 40
    start_y: int = 20
    length: int = 10
    heading: str = "right"
    targets: list[Cell] = field(default_factory=lambda: list(CLASSIC_TARGETS))
    obstacles: list[Cell] = field(default_factory=lambda: list(CLASSIC_OBSTACLES))
    obstacle_size: int = 5
    tick_delay_micros: int = 100_000
    quota: int = 10
    wrap_anywhere: bool = False
    stop_key: str = "a"
    # Give up after stall_limit_factor * len(snake) ticks without eating.
    stall_limit_factor: int = 100

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def initial_body(self) -> list[Cell]:
        """Head at (start_x, start_y), segments trailing opposite the heading."""
        dx, dy = DELTAS[REVERSE_DIRECTION[self.heading]]
        return [(self.start_x + i * dx, self.start_y + i * dy) for i in range(self.length)]

    def validate(self) -> "Board":
        """Check every field and return the board built from them."""
        for label, value in (("width", self.width), ("height", self.height)):
            if not (MIN_BOARD_SIZE <= value <= MAX_BOARD_SIZE):
                raise ConfigurationError(
                    f"{label} must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {value}."
                )
        if self.heading not in DELTAS:
            raise ConfigurationError(f"Unknown heading: {self.heading!r}")
        if self.length < MIN_LENGTH:
            raise ConfigurationError(f"length must be >= {MIN_LENGTH}, got {self.length}.")
        if self.obstacle_size < 1:
            raise ConfigurationError(f"obstacle_size must be >= 1, got {self.obstacle_size}.")
        if not (MIN_TICK_DELAY_US <= self.tick_delay_micros <= MAX_TICK_DELAY_US):
            raise ConfigurationError(
                f"tick_delay_micros must be between {MIN_TICK_DELAY_US} and {MAX_TICK_DELAY_US}."
            )
        if self.quota < 1:
            raise ConfigurationError(f"quota must be >= 1, got {self.quota}.")
        if self.quota > len(self.targets):
            raise ConfigurationError(
                f"quota ({self.quota}) exceeds the number of registered targets ({len(self.targets)})."
            )
        if len(self.stop_key) != 1:
            raise ConfigurationError("stop_key must be a single character.")
        if self.stall_limit_factor < MIN_STALL_LIMIT_FACTOR:
            raise ConfigurationError(
                f"stall_limit_factor must be >= {MIN_STALL_LIMIT_FACTOR}, got {self.stall_limit_factor}."
            )

        board = Board(
            self.width,
            self.height,
            obstacles=self.obstacles,
            obstacle_size=self.obstacle_size,
            wrap_anywhere=self.wrap_anywhere,
        )

        for idx, target in enumerate(self.targets[: self.quota]):
            if not board.in_bounds(target):
                raise ConfigurationError(f"Target #{idx} {target} lies outside the board.")
            if board.classify(target) != CELL_OPEN:
                raise ConfigurationError(f"Target #{idx} {target} is not on an open cell.")

        for cell in self.initial_body():
            if not board.in_bounds(cell):
                raise ConfigurationError(f"Initial snake segment {cell} lies outside the board.")
            if board.classify(cell) == CELL_WALL:
                raise ConfigurationError(f"Initial snake segment {cell} overlaps a wall.")
        return board


class Board:
    """Static occupancy grid with four edge-midpoint portals."""

    def __init__(
        self,
        width: int,
        height: int,
        obstacles: list[Cell] | tuple[Cell, ...] = (),
        obstacle_size: int = 5,
        wrap_anywhere: bool = False,
    ) -> None:
        self.width = width
        self.height = height
        self.wrap_anywhere = wrap_anywhere
        self.portals: dict[str, Cell] = {
            "up": (width // 2, 1),
            "down": (width // 2, height),
            "left": (1, height // 2),
            "right": (width, height // 2),
        }

        # grid[y - 1, x - 1] holds the state of cell (x, y).
        self.grid = np.full((height, width), CELL_OPEN, dtype=np.int8)
        self.grid[0, :] = CELL_WALL
        self.grid[-1, :] = CELL_WALL
        self.grid[:, 0] = CELL_WALL
        self.grid[:, -1] = CELL_WALL
        for x, y in self.portals.values():
            self.grid[y - 1, x - 1] = CELL_PORTAL

        portal_cells = set(self.portals.values())
        for anchor in obstacles:
            ax, ay = anchor
            far = (ax + obstacle_size - 1, ay + obstacle_size - 1)
            if not (self.in_bounds(anchor) and self.in_bounds(far)):
                raise ConfigurationError(f"Obstacle at {anchor} does not fit on the board.")
            for px, py in portal_cells:
                if ax <= px <= far[0] and ay <= py <= far[1]:
                    raise ConfigurationError(f"Obstacle at {anchor} covers the portal at {(px, py)}.")
            self.grid[ay - 1 : far[1], ax - 1 : far[0]] = CELL_WALL

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 1 <= x <= self.width and 1 <= y <= self.height

    def classify(self, cell: Cell) -> int:
        if self.in_bounds(cell):
            x, y = cell
            return int(self.grid[y - 1, x - 1])
        return CELL_PORTAL if self.wrap(cell) is not None else CELL_WALL

    def portal_crossing(self, cell: Cell) -> Cell | None:
        """Map the cell just past a portal to the portal on the opposite edge."""
        x, y = cell
        mid_x = self.width // 2
        mid_y = self.height // 2
        if x == mid_x and y == 0:
            return mid_x, self.height
        if x == mid_x and y == self.height + 1:
            return mid_x, 1
        if y == mid_y and x == 0:
            return self.width, mid_y
        if y == mid_y and x == self.width + 1:
            return 1, mid_y
        return None

    def wrap(self, cell: Cell) -> Cell | None:
        """Apply the board topology; None means the cell leads off the board."""
        if self.in_bounds(cell):
            return cell
        crossed = self.portal_crossing(cell)
        if crossed is not None or not self.wrap_anywhere:
            return crossed

        x, y = cell
        if x < 1:
            x = self.width
        elif x > self.width:
            x = 1
        if y < 1:
            y = self.height
        elif y > self.height:
            y = 1
        return x, y

    def exit_cell(self, portal: str) -> Cell:
        """Off-board cell just beyond a portal; stepping into it triggers the crossing."""
        return step_cell(self.portals[portal], portal)

    def landing_cell(self, portal: str) -> Cell:
        """Where the head reappears after leaving through a portal."""
        return self.portals[REVERSE_DIRECTION[portal]]

    def place_target(self, cell: Cell) -> None:
        if not self.in_bounds(cell) or self.classify(cell) != CELL_OPEN:
            raise ConfigurationError(f"Cannot place a target on {cell}: cell is not open.")
        x, y = cell
        self.grid[y - 1, x - 1] = CELL_TARGET

    def clear_target(self, cell: Cell) -> None:
        x, y = cell
        if self.grid[y - 1, x - 1] == CELL_TARGET:
            self.grid[y - 1, x - 1] = CELL_OPEN


class Snake:
    """Fixed-length body, head at index 0."""

    def __init__(self, positions: list[Cell]) -> None:
        if not positions:
            raise ConfigurationError("A snake needs at least one segment.")
        self.positions: deque[Cell] = deque(positions)

    @property
    def head(self) -> Cell:
        return self.positions[0]

    def __len__(self) -> int:
        return len(self.positions)

    def body_cells(self) -> list[Cell]:
        return list(self.positions)[1:]

    def advance(self, direction: str, board: Board) -> tuple[Cell, Cell, bool]:
        """
        Rigid shift by one cell. Returns (new_head, freed_tail, crossed).

        In strict mode a head on a non-portal border cell stepping outward is
        left off the board; in a game the walled border stops it first.

        No collision check is done here; callers screen directions with
        would_collide before committing a move.
        """
        raw_head = step_cell(self.head, direction)
        wrapped = board.wrap(raw_head)
        new_head = raw_head if wrapped is None else wrapped
        crossed = wrapped is not None and wrapped != raw_head

        freed = self.positions.pop()
        self.positions.appendleft(new_head)
        return new_head, freed, crossed


def would_collide(snake: Snake, board: Board, direction: str) -> bool:
    """True if moving the head one step in `direction` hits a wall or the body."""
    projected = step_cell(snake.head, direction)
    if board.classify(projected) == CELL_WALL:
        return True
    return projected in snake.positions
