# game/session.py
import copy
import logging

from .hints import explain_hint, unavailable
from .moves import (
    WRONG_DIGIT,
    apply_move,
    budget_from_board,
    check_cell,
)
from .sudoku import CELLS_TO_REMOVE, DEFAULT_MAX_ATTEMPTS, generate_sudoku

logger = logging.getLogger(__name__)

IDLE = 'idle'
GENERATING = 'generating'
PLAYING = 'playing'
PAUSED = 'paused'
COMPLETED = 'completed'
FAILED = 'failed'

DIRECTIONS = {
    'up': (-1, 0),
    'down': (1, 0),
    'left': (0, -1),
    'right': (0, 1),
}


class GameSession:
    """
    One player's game, from puzzle generation to completion or failure.

    The session owns the solution, the carved puzzle and the working
    board. Callers render `state()` and never touch the solution.

    `load_best_time(player, difficulty)` and
    `save_best_time(player, difficulty, seconds)` are the persistence
    hooks; the second returns True when it stored a new personal best.
    """

    def __init__(self, player=None, load_best_time=None, save_best_time=None,
                 hints_per_game=3, max_wrong_attempts=3,
                 max_carve_attempts=DEFAULT_MAX_ATTEMPTS):
        self.player = player
        self.load_best_time = load_best_time
        self.save_best_time = save_best_time
        self.hints_per_game = hints_per_game
        self.max_wrong_attempts = max_wrong_attempts
        self.max_carve_attempts = max_carve_attempts

        self.status = IDLE
        self.difficulty = None
        self.solution = None
        self.puzzle = None
        self.board = None
        self.budget = None
        self.selected = None
        self.elapsed = 0
        self.wrong_attempts = 0
        self.hints_remaining = hints_per_game
        self.last_smart_move = ''
        self.best_time = None
        self.new_best = False

    @property
    def playing(self):
        return self.status == PLAYING

    def new_game(self, difficulty='medium'):
        """Generate a fresh puzzle and start playing it."""
        if difficulty not in CELLS_TO_REMOVE:
            raise ValueError(f"Unknown difficulty: {difficulty!r}")
        if self.status == GENERATING:
            raise ValueError("A puzzle is already being generated")

        previous = self.status
        self.status = GENERATING
        try:
            puzzle, solution = generate_sudoku(difficulty, self.max_carve_attempts)
            self.start(puzzle, solution, difficulty)
        except Exception:
            self.status = previous
            raise

        return self.state()

    def start(self, puzzle, solution, difficulty):
        """Begin play on an already carved puzzle."""
        self.difficulty = difficulty
        self.solution = copy.deepcopy(solution)
        self.puzzle = copy.deepcopy(puzzle)
        self.board = copy.deepcopy(puzzle)
        self.budget = budget_from_board(self.board)
        self.selected = None
        self.elapsed = 0
        self.wrong_attempts = 0
        self.hints_remaining = self.hints_per_game
        self.last_smart_move = ''
        self.new_best = False
        self.best_time = None
        if self.player and self.load_best_time:
            try:
                self.best_time = self.load_best_time(self.player, difficulty)
            except Exception as e:
                logger.error(f"Best time read failed for {self.player} ({difficulty}): {e}")

        self.status = PLAYING
        empty = sum(1 for row in self.puzzle for v in row if v == 0)
        logger.info(f"Game started for {self.player or 'guest'}: {difficulty}, {empty} empty cells")

    def select(self, row, col):
        """Select an editable cell. Returns whether the selection was accepted."""
        check_cell(row, col)
        if not self.playing or self.puzzle[row][col] != 0:
            return False
        self.selected = (row, col)
        return True

    def move_selection(self, direction):
        """Move the selection to the nearest editable cell in a direction."""
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction!r}")
        if not self.playing or self.selected is None:
            return False

        d_row, d_col = DIRECTIONS[direction]
        row, col = self.selected
        row, col = row + d_row, col + d_col
        while 0 <= row <= 8 and 0 <= col <= 8:
            if self.puzzle[row][col] == 0:
                self.selected = (row, col)
                return True
            row, col = row + d_row, col + d_col
        return False

    def input(self, num):
        """
        Play num (0 erases) into the selected cell.
        Returns None when there is nothing to play into.
        """
        if not self.playing or self.selected is None:
            return None

        row, col = self.selected
        result = apply_move(self.board, self.puzzle, self.solution, self.budget,
                            row, col, num, self.last_smart_move)

        if result.reason == WRONG_DIGIT:
            self.wrong_attempts += 1
            logger.info(f"Wrong digit {num} at ({row}, {col}), attempt {self.wrong_attempts}")
            if self.wrong_attempts >= self.max_wrong_attempts:
                self.fail()
            return result

        if result.smart_move:
            self.last_smart_move = result.smart_move
        if result.board_complete:
            self.complete()
        return result

    def hint(self, row=None, col=None):
        """Explain the digit for an empty cell, using up one hint."""
        if row is None or col is None:
            if self.selected is None:
                return unavailable(row, col, self.hints_remaining)
            row, col = self.selected
        check_cell(row, col)

        if (not self.playing or self.hints_remaining <= 0
                or self.puzzle[row][col] != 0 or self.board[row][col] != 0):
            return unavailable(row, col, self.hints_remaining)

        result = explain_hint(self.board, self.solution, row, col)
        self.hints_remaining -= 1
        result.hints_remaining = self.hints_remaining
        return result

    def pause(self):
        if self.status != PLAYING:
            return False
        self.status = PAUSED
        return True

    def resume(self):
        if self.status != PAUSED:
            return False
        self.status = PLAYING
        return True

    def toggle_pause(self):
        return self.resume() if self.status == PAUSED else self.pause()

    def tick(self, seconds=1):
        """Advance the timer. Time only passes while playing."""
        if self.playing:
            self.elapsed += seconds
        return self.elapsed

    def fail(self):
        self.status = FAILED
        self.selected = None
        logger.info(f"Game over for {self.player or 'guest'} after {self.wrong_attempts} wrong attempts")

    def complete(self):
        self.status = COMPLETED
        self.selected = None

        if self.player and self.save_best_time:
            self.new_best = bool(self.save_best_time(self.player, self.difficulty, self.elapsed))
        else:
            self.new_best = self.best_time is None or self.elapsed < self.best_time
        if self.new_best:
            self.best_time = self.elapsed

        logger.info(
            f"Puzzle solved by {self.player or 'guest'} in {self.elapsed}s "
            f"({self.difficulty}, new best: {self.new_best})"
        )

    def state(self):
        """Everything the presentation layer may render. The solution is never included."""
        return {
            'status': self.status,
            'difficulty': self.difficulty,
            'puzzle': copy.deepcopy(self.puzzle),
            'board': copy.deepcopy(self.board),
            'budget': {str(k): v for k, v in (self.budget or {}).items()},
            'selected': list(self.selected) if self.selected else None,
            'elapsed': self.elapsed,
            'wrong_attempts': self.wrong_attempts,
            'attempts_left': max(self.max_wrong_attempts - self.wrong_attempts, 0),
            'hints_remaining': self.hints_remaining,
            'last_smart_move': self.last_smart_move,
            'best_time': self.best_time,
            'new_best': self.new_best,
            'player': self.player,
        }
