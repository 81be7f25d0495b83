"""Tests for Snake.advance and the collision predicate."""

from game_logic import CELL_WALL, Board, Snake, would_collide


class TestSnakeAdvance:
    def test_advance_shifts_body_rigidly(self):
        board = Board(10, 10)
        snake = Snake([(5, 5), (4, 5), (3, 5)])
        head, freed, crossed = snake.advance("right", board)
        assert head == (6, 5)
        assert freed == (3, 5)
        assert crossed is False
        assert list(snake.positions) == [(6, 5), (5, 5), (4, 5)]

    def test_each_segment_takes_its_predecessor_position(self):
        board = Board(10, 10)
        snake = Snake([(5, 5), (5, 6), (5, 7), (5, 8)])
        for direction in ["up", "left", "left", "down"]:
            before = list(snake.positions)
            snake.advance(direction, board)
            after = list(snake.positions)
            assert len(after) == len(before)
            assert after[1:] == before[:-1]

    def test_no_growth(self):
        board = Board(10, 10)
        snake = Snake([(5, 5), (4, 5)])
        snake.advance("right", board)
        snake.advance("right", board)
        assert len(snake) == 2

    def test_crossing_top_portal_lands_on_bottom_portal(self):
        board = Board(10, 10)
        snake = Snake([(5, 1), (5, 2), (5, 3)])
        head, freed, crossed = snake.advance("up", board)
        assert head == (5, 10)
        assert freed == (5, 3)
        assert crossed is True

    def test_crossing_left_portal_lands_on_right_portal(self):
        board = Board(10, 10)
        snake = Snake([(1, 5), (2, 5)])
        head, _, crossed = snake.advance("left", board)
        assert head == (10, 5)
        assert crossed is True

    def test_strict_exit_away_from_portal_lands_on_wall(self):
        board = Board(10, 10)
        snake = Snake([(3, 1), (3, 2)])
        head, _, crossed = snake.advance("up", board)
        assert head == (3, 0)
        assert crossed is False
        assert board.classify(head) == CELL_WALL

    def test_wrap_anywhere_exit(self):
        board = Board(10, 10, wrap_anywhere=True)
        snake = Snake([(3, 1), (3, 2)])
        head, _, crossed = snake.advance("up", board)
        assert head == (3, 10)
        assert crossed is True

        snake = Snake([(1, 3), (2, 3)])
        head, _, _ = snake.advance("left", board)
        assert head == (10, 3)


class TestWouldCollide:
    def setup_method(self):
        # 5x5 board: border walls plus a single wall cell at (4, 3).
        self.board = Board(5, 5, obstacles=[(4, 3)], obstacle_size=1)
        self.snake = Snake([(3, 3), (3, 4), (2, 4)])

    def test_wall_is_fatal(self):
        assert would_collide(self.snake, self.board, "right") is True

    def test_body_is_fatal(self):
        assert would_collide(self.snake, self.board, "down") is True

    def test_open_cells_are_safe(self):
        assert would_collide(self.snake, self.board, "up") is False
        assert would_collide(self.snake, self.board, "left") is False

    def test_predicate_has_no_side_effects(self):
        before = list(self.snake.positions)
        for direction in ["up", "down", "left", "right", "up"]:
            would_collide(self.snake, self.board, direction)
        assert list(self.snake.positions) == before

    def test_tail_counts_as_body(self):
        snake = Snake([(3, 3), (3, 4), (2, 4), (2, 3)])
        assert would_collide(snake, self.board, "left") is True

    def test_stepping_out_through_a_portal_is_safe(self):
        snake = Snake([(2, 1), (2, 2)])
        assert would_collide(snake, self.board, "up") is False
