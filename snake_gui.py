# Tkinter viewer that animates the autopilot snake tick by tick.
from __future__ import annotations

import json
from dataclasses import replace
import tkinter as tk
from tkinter import filedialog, messagebox

# Support both package imports and running this file directly.
try:
    from .autopilot import AutopilotGame
    from .game_logic import (
        CELL_PORTAL,
        CELL_TARGET,
        CELL_WALL,
        STATUS_COLLIDED,
        STATUS_RUNNING,
        AutopilotConfig,
        ConfigurationError,
    )
    from .utils import load_config
except ImportError:
    from autopilot import AutopilotGame
    from game_logic import (
        CELL_PORTAL,
        CELL_TARGET,
        CELL_WALL,
        STATUS_COLLIDED,
        STATUS_RUNNING,
        AutopilotConfig,
        ConfigurationError,
    )
    from utils import load_config


MIN_CELL_SIZE = 6
MAX_CELL_SIZE = 32
MIN_SPEED_MS = 10
MAX_SPEED_MS = 1000


def open_layout() -> AutopilotConfig:
    """Small obstacle-free board; handy for watching the portal routing."""
    return AutopilotConfig(
        width=40,
        height=20,
        start_x=10,
        start_y=10,
        length=5,
        targets=[(30, 5), (35, 17), (3, 3), (20, 18), (37, 2)],
        obstacles=[],
        quota=5,
    )


class AutopilotApp:
    """Tkinter presentation layer for AutopilotGame."""
    UI_SCALE = 1.2
    BG = "#101418"
    BOARD_BG = "#1c2229"
    SIDEBAR_BG = "#0f1720"
    WALL_COLOR = "#7f8b99"
    PORTAL_COLOR = "#42c4ff"
    SNAKE_HEAD = "#45d483"
    SNAKE_BODY = "#1fb86b"
    APPLE_COLOR = "#ff5c74"
    TEXT_PRIMARY = "#e6eef7"
    TEXT_MUTED = "#95a4b8"
    ACCENT = "#42c4ff"

    LAYOUT_PRESETS = {
        "Classic (80x40)": AutopilotConfig,
        "Open (40x20)": open_layout,
    }

    def __init__(self, root: tk.Tk) -> None:
        self.root = root
        self.root.title("Snake Autopilot")
        self.root.configure(bg=self.BG)
        self.root.tk.call("tk", "scaling", self.UI_SCALE)

        self.cell_size = 12
        self.config = AutopilotConfig()
        self.game = AutopilotGame(self.config)
        self.paused = True
        self.after_id: str | None = None  # Tkinter timer id for the game loop

        self._build_layout()
        self._bind_keys()
        self._apply_canvas_size()
        self.draw()

    def _s(self, value: int) -> int:
        """Scale pixel/font values for better readability."""
        return int(round(value * self.UI_SCALE))

    def _build_layout(self) -> None:
        """Create board canvas + right sidebar panels."""
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)

        container = tk.Frame(self.root, bg=self.BG)
        container.grid(row=0, column=0, sticky="nsew", padx=self._s(16), pady=self._s(16))
        container.columnconfigure(0, weight=1)
        container.rowconfigure(0, weight=1)

        self.canvas = tk.Canvas(container, bg=self.BOARD_BG, highlightthickness=0, bd=0)
        self.canvas.grid(row=0, column=0, sticky="nsew", padx=(0, self._s(16)))

        self.sidebar = tk.Frame(container, bg=self.SIDEBAR_BG, width=self._s(320))
        self.sidebar.grid(row=0, column=1, sticky="ns")
        self.sidebar.grid_propagate(False)

        tk.Label(
            self.sidebar,
            text="Autopilot",
            fg=self.TEXT_PRIMARY,
            bg=self.SIDEBAR_BG,
            font=("Helvetica", self._s(16), "bold"),
        ).pack(anchor="w", padx=self._s(16), pady=(self._s(16), self._s(14)))

        self._build_status()
        self._build_controls()
        self._build_buttons()

    def _build_status(self) -> None:
        frame = tk.LabelFrame(
            self.sidebar,
            text="Status",
            fg=self.TEXT_PRIMARY,
            bg=self.SIDEBAR_BG,
            bd=1,
            font=("Helvetica", self._s(10), "bold"),
            labelanchor="n",
        )
        frame.pack(fill="x", padx=self._s(16), pady=(0, self._s(14)))

        self.eaten_var = tk.StringVar()
        self.moves_var = tk.StringVar()
        self.route_var = tk.StringVar()
        self.state_var = tk.StringVar(value="State: Ready")

        for var in (self.eaten_var, self.moves_var, self.route_var, self.state_var):
            tk.Label(
                frame,
                textvariable=var,
                fg=self.TEXT_PRIMARY,
                bg=self.SIDEBAR_BG,
                font=("Helvetica", self._s(11)),
                anchor="w",
            ).pack(fill="x", padx=self._s(10), pady=self._s(4))

    def _build_controls(self) -> None:
        """Settings section for values that rebuild the game state."""
        frame = tk.LabelFrame(
            self.sidebar,
            text="Settings",
            fg=self.TEXT_PRIMARY,
            bg=self.SIDEBAR_BG,
            bd=1,
            font=("Helvetica", self._s(10), "bold"),
            labelanchor="n",
        )
        frame.pack(fill="x", padx=self._s(16), pady=(0, self._s(14)))

        self.layout_var = tk.StringVar(value="Classic (80x40)")
        self.cell_size_var = tk.StringVar(value=str(self.cell_size))
        self.speed_var = tk.StringVar(value=str(self.config.tick_delay_micros // 1000))
        self.wrap_var = tk.BooleanVar(value=self.config.wrap_anywhere)

        row = tk.Frame(frame, bg=self.SIDEBAR_BG)
        row.pack(fill="x", padx=self._s(10), pady=self._s(4))
        tk.Label(row, text="Layout", fg=self.TEXT_PRIMARY, bg=self.SIDEBAR_BG).pack(side="left")
        tk.OptionMenu(row, self.layout_var, *self.LAYOUT_PRESETS.keys()).pack(side="right")

        for label, var in (("Cell Size", self.cell_size_var), ("Speed (ms)", self.speed_var)):
            row = tk.Frame(frame, bg=self.SIDEBAR_BG)
            row.pack(fill="x", padx=self._s(10), pady=self._s(4))
            tk.Label(row, text=label, fg=self.TEXT_PRIMARY, bg=self.SIDEBAR_BG).pack(side="left")
            tk.Spinbox(row, from_=0, to=9999, textvariable=var, width=8, justify="center").pack(side="right")

        tk.Checkbutton(
            frame,
            text="Wrap on any edge",
            variable=self.wrap_var,
            fg=self.TEXT_PRIMARY,
            bg=self.SIDEBAR_BG,
            selectcolor=self.BOARD_BG,
            activebackground=self.SIDEBAR_BG,
        ).pack(anchor="w", padx=self._s(10), pady=(self._s(4), self._s(10)))

    def _build_buttons(self) -> None:
        frame = tk.Frame(self.sidebar, bg=self.SIDEBAR_BG)
        frame.pack(fill="x", padx=self._s(16), pady=(0, self._s(10)))

        for text, command in (
            ("Start", self.start_game),
            ("Pause", self.toggle_pause),
            ("Reset", self.reset_game),
            ("Apply Settings", self.apply_settings),
            ("Load Layout...", self.load_layout),
        ):
            tk.Button(
                frame,
                text=text,
                command=command,
                fg="#09141f",
                bg=self.ACCENT,
                activebackground="#74d8ff",
                bd=0,
                relief="flat",
                font=("Helvetica", self._s(11), "bold"),
                pady=self._s(6),
                cursor="hand2",
            ).pack(fill="x", pady=self._s(4))

        self.footer_var = tk.StringVar(value=f"Stop: '{self.config.stop_key}'   Pause: Space")
        tk.Label(
            self.sidebar,
            textvariable=self.footer_var,
            fg=self.TEXT_MUTED,
            bg=self.SIDEBAR_BG,
            font=("Helvetica", self._s(10)),
        ).pack(anchor="w", padx=self._s(16), pady=(self._s(4), self._s(10)))

    def _bind_keys(self) -> None:
        self.root.bind("<Key>", self._on_key)
        self.root.bind("<space>", lambda _e: self.toggle_pause())

    def _on_key(self, event: tk.Event) -> None:
        if event.char == self.config.stop_key:
            self.game.request_stop()

    def _parse_int(self, raw: str, low: int, high: int, label: str) -> int:
        """Parse and range-check integer settings with a clear error message."""
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"{label} must be an integer.")
        if not (low <= value <= high):
            raise ValueError(f"{label} must be between {low} and {high}.")
        return value

    def _rebuild(self, config: AutopilotConfig) -> None:
        try:
            game = AutopilotGame(config)
        except ConfigurationError as exc:
            messagebox.showerror("Invalid Layout", str(exc))
            return
        self.config = config
        self.game = game
        self.paused = True
        self._cancel_loop()
        self._apply_canvas_size()
        self.footer_var.set(f"Stop: '{self.config.stop_key}'   Pause: Space")
        self.state_var.set("State: Ready")
        self.draw()

    def apply_settings(self) -> None:
        """Validate sidebar values, then rebuild the game with new config."""
        try:
            self.cell_size = self._parse_int(self.cell_size_var.get(), MIN_CELL_SIZE, MAX_CELL_SIZE, "Cell size")
            speed_ms = self._parse_int(self.speed_var.get(), MIN_SPEED_MS, MAX_SPEED_MS, "Speed")
            base = self.LAYOUT_PRESETS[self.layout_var.get()]()
        except (ValueError, KeyError) as exc:
            messagebox.showerror("Invalid Setting", str(exc))
            return
        self._rebuild(replace(base, tick_delay_micros=speed_ms * 1000, wrap_anywhere=self.wrap_var.get()))

    def load_layout(self) -> None:
        path = filedialog.askopenfilename(filetypes=[("JSON layout", "*.json"), ("All files", "*.*")])
        if not path:
            return
        try:
            config = load_config(path)
        except (OSError, json.JSONDecodeError, ConfigurationError) as exc:
            messagebox.showerror("Load Failed", str(exc))
            return
        self._rebuild(config)

    def _apply_canvas_size(self) -> None:
        self.canvas.configure(
            width=self.config.width * self.cell_size,
            height=self.config.height * self.cell_size,
        )

    def _cancel_loop(self) -> None:
        if self.after_id is not None:
            self.root.after_cancel(self.after_id)
            self.after_id = None

    def start_game(self) -> None:
        """Start or resume live ticking; a finished game restarts from scratch."""
        if self.game.finished:
            self.game.reset()
        self.paused = False
        self.state_var.set("State: Running")
        self.tick()

    def toggle_pause(self) -> None:
        if self.game.finished:
            return
        self.paused = not self.paused
        if self.paused:
            self.state_var.set("State: Paused")
            self._cancel_loop()
        else:
            self.state_var.set("State: Running")
            self.tick()

    def reset_game(self) -> None:
        self._cancel_loop()
        self.game.reset()
        self.paused = True
        self.state_var.set("State: Ready")
        self.draw()

    def tick(self) -> None:
        """Single frame of the game loop; reschedules itself while running."""
        self._cancel_loop()
        if self.paused:
            return

        self.game.step()
        # A stop key pressed during the delay ends the game on the following tick.
        if self.game.stop_requested and self.game.status == STATUS_RUNNING:
            self.game.step()

        if self.game.finished:
            self.paused = True
            self.state_var.set(self._final_state())
            self.draw()
            return

        self.draw()
        self.after_id = self.root.after(max(1, self.config.tick_delay_micros // 1000), self.tick)

    def _final_state(self) -> str:
        if self.game.status == STATUS_COLLIDED:
            return f"State: Collided ({self.game.collision_reason})"
        if self.game.stop_reason is not None:
            return f"State: Stopped ({self.game.stop_reason})"
        return f"State: {self.game.status.capitalize()}"

    def draw(self) -> None:
        """Render walls, portals, target, snake and status labels."""
        self.canvas.delete("all")
        cell = self.cell_size
        grid = self.game.board.grid
        fills = {CELL_WALL: self.WALL_COLOR, CELL_PORTAL: self.PORTAL_COLOR}

        for row in range(grid.shape[0]):
            for col in range(grid.shape[1]):
                state = int(grid[row, col])
                x1, y1 = col * cell, row * cell
                if state in fills:
                    self.canvas.create_rectangle(x1, y1, x1 + cell, y1 + cell, fill=fills[state], outline="")
                elif state == CELL_TARGET:
                    self.canvas.create_oval(
                        x1 + 2, y1 + 2, x1 + cell - 2, y1 + cell - 2, fill=self.APPLE_COLOR, outline=""
                    )

        for idx, (x, y) in enumerate(self.game.snake.positions):
            if not self.game.board.in_bounds((x, y)):
                continue
            color = self.SNAKE_HEAD if idx == 0 else self.SNAKE_BODY
            x1, y1 = (x - 1) * cell + 1, (y - 1) * cell + 1
            self.canvas.create_rectangle(x1, y1, x1 + cell - 2, y1 + cell - 2, fill=color, outline="")

        self.eaten_var.set(f"Eaten: {self.game.eaten}/{self.config.quota}")
        self.moves_var.set(f"Moves: {self.game.moves}")
        self.route_var.set(f"Route: {self.game.navigator.route}")


def run_autopilot_gui() -> None:
    """Launch the autopilot viewer."""
    root = tk.Tk()
    AutopilotApp(root)
    root.mainloop()


if __name__ == "__main__":
    run_autopilot_gui()
