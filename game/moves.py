# game/moves.py
from dataclasses import dataclass
from typing import Optional

# Outcome of a move
COMMITTED = 'committed'
REJECTED = 'rejected'

# Rejection reasons
NON_EDITABLE_CELL = 'non_editable_cell'
WRONG_DIGIT = 'wrong_digit'
DIGIT_EXHAUSTED = 'digit_exhausted'

# Each digit may appear on the board nine times
DIGIT_LIMIT = 9

SMART_MOVE_LABELS = {
    (True, False, False): 'row',
    (False, True, False): 'column',
    (False, False, True): 'box',
    (True, True, False): 'row+column',
    (True, False, True): 'row+box',
    (False, True, True): 'column+box',
    (True, True, True): 'all-three',
}


@dataclass
class MoveResult:
    status: str
    row: int
    col: int
    digit: int
    reason: Optional[str] = None
    smart_move: Optional[str] = None
    board_complete: bool = False

    @property
    def committed(self):
        return self.status == COMMITTED

    def to_dict(self):
        return {
            'status': self.status,
            'row': self.row,
            'col': self.col,
            'digit': self.digit,
            'reason': self.reason,
            'smart_move': self.smart_move,
            'board_complete': self.board_complete,
        }


def new_budget():
    return {num: DIGIT_LIMIT for num in range(1, 10)}


def budget_from_board(board):
    """Remaining placements per digit given what is already on the board."""
    budget = new_budget()
    for row in board:
        for num in row:
            if num:
                budget[num] -= 1
    return budget


def check_cell(row, col, num=0):
    if not (0 <= row <= 8 and 0 <= col <= 8):
        raise ValueError(f"Cell ({row}, {col}) is outside the board")
    if not 0 <= num <= 9:
        raise ValueError(f"Digit must be between 0 and 9, got {num}")


def smart_move_label(board, row, col):
    """
    Which units through (row, col) are now completely filled.
    Returns '' when the move completed nothing.
    """
    row_full = all(board[row][j] != 0 for j in range(9))
    col_full = all(board[i][col] != 0 for i in range(9))
    start_row, start_col = 3 * (row // 3), 3 * (col // 3)
    box_full = all(
        board[i][j] != 0
        for i in range(start_row, start_row + 3)
        for j in range(start_col, start_col + 3)
    )
    return SMART_MOVE_LABELS.get((row_full, col_full, box_full), '')


def is_board_complete(board, solution):
    for i in range(9):
        for j in range(9):
            if board[i][j] == 0 or board[i][j] != solution[i][j]:
                return False
    return True


def apply_move(board, puzzle, solution, budget, row, col, num, last_smart_move=''):
    """
    Place num (or erase with 0) at (row, col) on the working board.

    The board and budget are only modified when the move is committed.
    A smart move is reported only when its label differs from
    last_smart_move, the label reported most recently in the session.
    """
    check_cell(row, col, num)

    if puzzle[row][col] != 0:
        return MoveResult(REJECTED, row, col, num, reason=NON_EDITABLE_CELL)

    if num != 0 and num != solution[row][col]:
        return MoveResult(REJECTED, row, col, num, reason=WRONG_DIGIT)

    previous = board[row][col]
    if num != 0 and num != previous and budget[num] <= 0:
        return MoveResult(REJECTED, row, col, num, reason=DIGIT_EXHAUSTED)

    board[row][col] = num
    if previous:
        budget[previous] += 1
    if num:
        budget[num] -= 1

    result = MoveResult(COMMITTED, row, col, num)
    if num == 0:
        return result

    label = smart_move_label(board, row, col)
    if label and label != last_smart_move:
        result.smart_move = label

    result.board_complete = is_board_complete(board, solution)
    return result
