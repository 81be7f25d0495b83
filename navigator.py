# Route heuristic and one-step lookahead steering for the autopilot snake.
from __future__ import annotations

try:
    from .game_logic import REVERSE_DIRECTION, Board, Cell, Snake, manhattan, would_collide
except ImportError:
    from game_logic import REVERSE_DIRECTION, Board, Cell, Snake, manhattan, would_collide


ROUTE_DIRECT = "direct"
# Earlier entries win equal-cost ties.
ROUTE_ORDER = (ROUTE_DIRECT, "up", "down", "left", "right")


def route_costs(head: Cell, goal: Cell, board: Board) -> dict[str, int]:
    """
    Manhattan cost of each route class:
    - direct: head -> goal
    - via portal P: head -> cell past P, then landing portal -> goal
    """
    costs = {ROUTE_DIRECT: manhattan(head, goal)}
    for portal in ROUTE_ORDER[1:]:
        costs[portal] = manhattan(head, board.exit_cell(portal)) + manhattan(board.landing_cell(portal), goal)
    return costs


def classify_route(head: Cell, goal: Cell, board: Board) -> str:
    costs = route_costs(head, goal, board)
    # min() keeps the first minimum it sees, so ROUTE_ORDER is the tie-break.
    return min(ROUTE_ORDER, key=costs.__getitem__)


def _vertical(offset: int) -> str:
    return "down" if offset > 0 else "up"


def _horizontal(offset: int) -> str:
    return "right" if offset > 0 else "left"


def candidate_directions(dx: int, dy: int, horizontal_first: bool = False) -> list[str]:
    """Ordered fallback chain for an offset; empty when already on the waypoint."""
    if dx == 0 and dy == 0:
        return []

    if horizontal_first:
        use_vertical = dx == 0
    else:
        use_vertical = dy != 0

    if use_vertical:
        primary, secondary = _vertical(dy), _horizontal(dx)
    else:
        primary, secondary = _horizontal(dx), _vertical(dy)
    return [primary, secondary, REVERSE_DIRECTION[secondary], REVERSE_DIRECTION[primary]]


def step_toward(
    snake: Snake,
    board: Board,
    waypoint: Cell,
    heading: str,
    horizontal_first: bool = False,
) -> str:
    """Pick the first candidate that does not collide; keep the last one if all do."""
    hx, hy = snake.head
    candidates = candidate_directions(waypoint[0] - hx, waypoint[1] - hy, horizontal_first)
    if not candidates:
        return heading

    for direction in candidates:
        if not would_collide(snake, board, direction):
            return direction
    return candidates[-1]


class Navigator:
    """Per-goal route state: chosen route class plus the portal-crossing latch."""

    def __init__(self, board: Board) -> None:
        self.board = board
        self.goal: Cell | None = None
        self.route = ROUTE_DIRECT
        self.crossed = False

    def set_goal(self, goal: Cell, head: Cell) -> None:
        self.goal = goal
        self.crossed = False
        self.route = classify_route(head, goal, self.board)

    def note_crossing(self) -> None:
        self.crossed = True

    @property
    def waypoint(self) -> Cell:
        if self.goal is None:
            raise RuntimeError("Navigator has no goal; call set_goal first.")
        if self.route == ROUTE_DIRECT or self.crossed:
            return self.goal
        return self.board.exit_cell(self.route)

    def choose(self, snake: Snake, heading: str) -> str:
        return step_toward(snake, self.board, self.waypoint, heading, horizontal_first=self.crossed)
