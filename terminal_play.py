# Terminal entrypoint: run the autopilot in curses (or headless) and report the result.
from __future__ import annotations

import argparse
import curses
import os
from dataclasses import replace

# Keep matplotlib cache local for environments without writable home config.
LOCAL_MPLCONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".mplconfig")
os.makedirs(LOCAL_MPLCONFIG, exist_ok=True)
os.environ.setdefault("MPLCONFIGDIR", LOCAL_MPLCONFIG)

import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
import numpy as np

try:
    from .autopilot import AutopilotGame
    from .game_logic import AutopilotConfig, ConfigurationError, STATUS_COLLIDED, STATUS_WON
    from .utils import RunReport, SystemClock, load_config, make_game, run_game
except ImportError:
    from autopilot import AutopilotGame
    from game_logic import AutopilotConfig, ConfigurationError, STATUS_COLLIDED, STATUS_WON
    from utils import RunReport, SystemClock, load_config, make_game, run_game


class CursesRenderer:
    """Draws board cells at (x - 1, y - 1); getch() in CursesInput refreshes the screen."""

    def __init__(self, stdscr: "curses.window") -> None:
        self.stdscr = stdscr

    def draw_cell(self, x: int, y: int, symbol: str) -> None:
        try:
            self.stdscr.addstr(y - 1, x - 1, symbol)
        except curses.error:
            # Writing the bottom-right cell moves the cursor off-screen; the glyph is still drawn.
            pass

    def clear_cell(self, x: int, y: int) -> None:
        self.draw_cell(x, y, " ")


class CursesInput:
    """Non-blocking key polling; returns True once the stop key was pressed."""

    def __init__(self, stdscr: "curses.window", stop_key: str) -> None:
        self.stdscr = stdscr
        self.stop_code = ord(stop_key)
        self.stdscr.nodelay(True)

    def poll_stop_requested(self) -> bool:
        stop = False
        key = self.stdscr.getch()
        while key != -1:
            if key == self.stop_code:
                stop = True
            key = self.stdscr.getch()
        return stop


def _run_in_curses(game: AutopilotGame, max_ticks: int | None) -> RunReport:
    def _session(stdscr: "curses.window") -> RunReport:
        curses.curs_set(0)
        rows, cols = stdscr.getmaxyx()
        if rows < game.config.height or cols < game.config.width:
            raise SystemExit(
                f"Terminal too small: need {game.config.width}x{game.config.height}, have {cols}x{rows}."
            )
        stdscr.clear()
        report = run_game(
            game,
            renderer=CursesRenderer(stdscr),
            input_source=CursesInput(stdscr, game.config.stop_key),
            clock=SystemClock(),
            max_ticks=max_ticks,
        )
        stdscr.refresh()
        return report

    return curses.wrapper(_session)


def print_report(report: RunReport) -> None:
    """End-of-run summary in the console."""
    if report.status == STATUS_WON:
        outcome = "Won"
    elif report.status == STATUS_COLLIDED:
        outcome = f"Collided ({report.collision_reason})"
    elif report.stop_reason is not None:
        outcome = f"Stopped ({report.stop_reason})"
    else:
        outcome = report.status.capitalize()
    print("=" * 40)
    print(f"{'Result':<16}{outcome:>24}")
    print(f"{'Targets eaten':<16}{f'{report.eaten}/{report.quota}':>24}")
    print(f"{'Moves':<16}{report.moves:>24}")
    print("=" * 40)
    print(f"CPU time = {report.cpu_seconds:.3f} s")


def plot_run(game: AutopilotGame, report: RunReport) -> None:
    """Board with walls, remaining targets and the head trail."""
    grid = game.board.grid.astype(np.float32)
    cmap = ListedColormap(["#1c2229", "#7f8b99", "#42c4ff", "#ff5c74"])

    fig, ax = plt.subplots(figsize=(10, 10 * game.config.height / game.config.width + 1))
    ax.imshow(
        grid,
        cmap=cmap,
        vmin=0,
        vmax=3,
        extent=(0.5, game.config.width + 0.5, game.config.height + 0.5, 0.5),
        interpolation="nearest",
    )

    trail = np.asarray(report.trail, dtype=np.float32)
    if trail.size > 0:
        # Break the line where the head jumped through a portal.
        jumps = np.abs(np.diff(trail, axis=0)).sum(axis=1) > 1
        segments = np.split(trail, np.nonzero(jumps)[0] + 1)
        for idx, segment in enumerate(segments):
            ax.plot(
                segment[:, 0],
                segment[:, 1],
                color="#45d483",
                linewidth=1.6,
                label="Head trail" if idx == 0 else None,
            )
        ax.plot(trail[0, 0], trail[0, 1], marker="o", color="#ffd166", label="Start")
        ax.plot(trail[-1, 0], trail[-1, 1], marker="X", color="#ff7f0e", label="End")

    targets = np.asarray(game.config.targets[: game.config.quota], dtype=np.float32)
    ax.scatter(targets[:, 0], targets[:, 1], marker="s", facecolors="none", edgecolors="#ff5c74", label="Targets")

    ax.set_title(f"Autopilot run: {report.status}, {report.eaten}/{report.quota} targets, {report.moves} moves")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.legend(loc="upper right")
    plt.tight_layout()
    plt.show()


def parse_args() -> argparse.Namespace:
    defaults = AutopilotConfig()
    parser = argparse.ArgumentParser(description="Self-piloted snake on a portal board")
    parser.add_argument("--config", type=str, default="", help="JSON layout file (keys match AutopilotConfig).")
    parser.add_argument("--width", type=int, default=None, help=f"Board width (default {defaults.width}).")
    parser.add_argument("--height", type=int, default=None, help=f"Board height (default {defaults.height}).")
    parser.add_argument("--tick-ms", type=int, default=None, help="Delay between ticks in milliseconds.")
    parser.add_argument("--quota", type=int, default=None, help="Targets to eat before the run is won.")
    parser.add_argument(
        "--wrap-anywhere",
        action="store_true",
        help="Wrap the head on any edge instead of only through the four portals.",
    )
    parser.add_argument("--headless", action="store_true", help="Run without curses and without tick delay.")
    parser.add_argument("--max-ticks", type=int, default=0, help="Stop after N ticks (0 = no limit).")
    parser.add_argument("--plot", action="store_true", help="Show a matplotlib plot of the run afterwards.")
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> AutopilotConfig:
    cfg = load_config(args.config) if args.config else AutopilotConfig()
    overrides = {}
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    if args.tick_ms is not None:
        overrides["tick_delay_micros"] = args.tick_ms * 1000
    if args.quota is not None:
        overrides["quota"] = args.quota
    if args.wrap_anywhere:
        overrides["wrap_anywhere"] = True
    return replace(cfg, **overrides)


def run_terminal_cli() -> None:
    args = parse_args()
    if args.max_ticks < 0:
        raise SystemExit("--max-ticks must be >= 0.")
    if args.tick_ms is not None and args.tick_ms < 0:
        raise SystemExit("--tick-ms must be >= 0.")

    try:
        cfg = build_config(args)
        game = make_game(cfg)
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")

    max_ticks = args.max_ticks or None
    print(
        f"\nBoard {cfg.width}x{cfg.height}, snake length {cfg.length}, "
        f"quota {cfg.quota}, {len(cfg.obstacles)} obstacles, "
        f"wrap: {'anywhere' if cfg.wrap_anywhere else 'portals only'}"
    )
    if args.headless:
        report = run_game(game, max_ticks=max_ticks, delay=False)
    else:
        print(f"Press '{cfg.stop_key}' to stop.")
        report = _run_in_curses(game, max_ticks)

    print_report(report)
    if args.plot:
        plot_run(game, report)


if __name__ == "__main__":
    run_terminal_cli()
