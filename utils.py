# Shared helpers: adapter protocols, config loading, and the timed run loop.
from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
import threading
import time
from typing import Protocol

import numpy as np

try:
    from .autopilot import AutopilotGame, TickResult
    from .game_logic import (
        CELL_TARGET,
        CELL_WALL,
        AutopilotConfig,
        Cell,
        ConfigurationError,
    )
except ImportError:
    from autopilot import AutopilotGame, TickResult
    from game_logic import (
        CELL_TARGET,
        CELL_WALL,
        AutopilotConfig,
        Cell,
        ConfigurationError,
    )


# Board symbols used by the character renderers.
SYMBOL_BODY = "X"
SYMBOL_HEAD = "O"
SYMBOL_WALL = "#"
SYMBOL_TARGET = "6"
SYMBOL_BLANK = " "

# Expected JSON types per AutopilotConfig field.
INT_FIELDS = frozenset(
    {
        "width",
        "height",
        "start_x",
        "start_y",
        "length",
        "obstacle_size",
        "tick_delay_micros",
        "quota",
        "stall_limit_factor",
    }
)
BOOL_FIELDS = frozenset({"wrap_anywhere"})
STR_FIELDS = frozenset({"heading", "stop_key"})


class Renderer(Protocol):
    def draw_cell(self, x: int, y: int, symbol: str) -> None: ...

    def clear_cell(self, x: int, y: int) -> None: ...


class InputSource(Protocol):
    def poll_stop_requested(self) -> bool: ...


class Clock(Protocol):
    def sleep(self, micros: int) -> None: ...

    def cpu_time(self) -> float: ...


class SystemClock:
    """Wall-clock sleeps, process CPU time for reporting."""

    def sleep(self, micros: int) -> None:
        if micros > 0:
            time.sleep(micros / 1_000_000)

    def cpu_time(self) -> float:
        return time.process_time()


@dataclass
class RunReport:
    status: str
    eaten: int
    quota: int
    moves: int
    cpu_seconds: float
    collision_reason: str | None = None
    stop_reason: str | None = None
    trail: list[Cell] = field(default_factory=list)


def load_config(path: str) -> AutopilotConfig:
    """Read a JSON layout; keys mirror AutopilotConfig field names."""
    with open(path, "r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: expected a JSON object at the top level.")
    return config_from_dict(raw)


def _is_int(value: object) -> bool:
    # JSON true/false arrive as bool, which is an int subclass.
    return isinstance(value, int) and not isinstance(value, bool)


def _cell_list(key: str, value: object) -> list[Cell]:
    if not isinstance(value, list):
        raise ConfigurationError(f"{key} must be a list of [x, y] pairs.")
    cells = []
    for pair in value:
        if not (isinstance(pair, (list, tuple)) and len(pair) == 2 and all(_is_int(v) for v in pair)):
            raise ConfigurationError(f"{key} must be a list of [x, y] integer pairs, got {pair!r}.")
        cells.append((pair[0], pair[1]))
    return cells


def config_from_dict(raw: dict) -> AutopilotConfig:
    """Build a config from JSON-style data, rejecting unknown keys and wrong types."""
    unknown = set(raw) - AutopilotConfig.field_names()
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    data = dict(raw)
    for key, value in data.items():
        if key in INT_FIELDS and not _is_int(value):
            raise ConfigurationError(f"{key} must be an integer, got {value!r}.")
        if key in BOOL_FIELDS and not isinstance(value, bool):
            raise ConfigurationError(f"{key} must be true or false, got {value!r}.")
        if key in STR_FIELDS and not isinstance(value, str):
            raise ConfigurationError(f"{key} must be a string, got {value!r}.")
    for key in ("targets", "obstacles"):
        if key in data:
            data[key] = _cell_list(key, data[key])
    return AutopilotConfig(**data)


def config_to_dict(cfg: AutopilotConfig) -> dict:
    data = asdict(cfg)
    data["targets"] = [list(cell) for cell in cfg.targets]
    data["obstacles"] = [list(cell) for cell in cfg.obstacles]
    return data


def make_game(cfg: AutopilotConfig) -> AutopilotGame:
    return AutopilotGame(cfg)


def board_symbol(state: int) -> str:
    if state == CELL_WALL:
        return SYMBOL_WALL
    if state == CELL_TARGET:
        return SYMBOL_TARGET
    return SYMBOL_BLANK


def draw_board(game: AutopilotGame, renderer: Renderer) -> None:
    """Full redraw: grid cells, then body segments, then the head."""
    grid = game.board.grid
    for (row, col), state in np.ndenumerate(grid):
        renderer.draw_cell(col + 1, row + 1, board_symbol(int(state)))
    for x, y in game.snake.body_cells():
        renderer.draw_cell(x, y, SYMBOL_BODY)
    hx, hy = game.snake.head
    renderer.draw_cell(hx, hy, SYMBOL_HEAD)


def draw_tick(game: AutopilotGame, result: TickResult, renderer: Renderer) -> None:
    """Incremental redraw of the cells a tick touched."""
    if not result.moved:
        return
    if result.freed is not None and result.freed not in game.snake.positions:
        fx, fy = result.freed
        symbol = board_symbol(game.board.classify(result.freed))
        if symbol == SYMBOL_BLANK:
            renderer.clear_cell(fx, fy)
        else:
            renderer.draw_cell(fx, fy, symbol)
    if result.previous_head is not None and len(game.snake) > 1:
        px, py = result.previous_head
        renderer.draw_cell(px, py, SYMBOL_BODY)
    if result.head is not None and game.board.in_bounds(result.head):
        hx, hy = result.head
        renderer.draw_cell(hx, hy, SYMBOL_HEAD)
    if result.next_target is not None:
        tx, ty = result.next_target
        renderer.draw_cell(tx, ty, SYMBOL_TARGET)


def run_game(
    game: AutopilotGame,
    renderer: Renderer | None = None,
    input_source: InputSource | None = None,
    clock: Clock | None = None,
    stop_flag: threading.Event | None = None,
    max_ticks: int | None = None,
    delay: bool = True,
) -> RunReport:
    """Tick the game until it reaches a terminal status (or max_ticks)."""
    if clock is None:
        clock = SystemClock()
    start_cpu = clock.cpu_time()
    trail: list[Cell] = [game.snake.head]

    if renderer is not None:
        draw_board(game, renderer)

    ticks = 0
    while not game.finished:
        if max_ticks is not None and ticks >= max_ticks:
            break

        result = game.step()
        if not result.moved:
            break
        ticks += 1
        trail.append(result.head)

        if renderer is not None:
            draw_tick(game, result, renderer)

        if game.running:
            if delay:
                clock.sleep(game.config.tick_delay_micros)
            if input_source is not None and input_source.poll_stop_requested():
                game.request_stop()
            if stop_flag is not None and stop_flag.is_set():
                game.request_stop()

    # Apply a stop request observed on the last tick.
    if game.stop_requested and game.running:
        game.step()

    return RunReport(
        status=game.status,
        eaten=game.eaten,
        quota=game.config.quota,
        moves=game.moves,
        cpu_seconds=clock.cpu_time() - start_cpu,
        collision_reason=game.collision_reason,
        stop_reason=game.stop_reason,
        trail=trail,
    )
