# game/hints.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .moves import COMMITTED, REJECTED, check_cell
from .sudoku import is_valid_move

HINT_UNAVAILABLE = 'hint_unavailable'

UNIT_NAMES = {
    'row': 'row',
    'column': 'column',
    'box': '3x3 box',
}


@dataclass
class HintResult:
    status: str
    row: int
    col: int
    digit: Optional[int] = None
    reason: Optional[str] = None
    eliminated: Dict[int, str] = field(default_factory=dict)
    explanation: List[str] = field(default_factory=list)
    hints_remaining: int = 0

    def to_dict(self):
        return {
            'status': self.status,
            'row': self.row,
            'col': self.col,
            'digit': self.digit,
            'reason': self.reason,
            'eliminated': {str(k): v for k, v in self.eliminated.items()},
            'explanation': self.explanation,
            'hints_remaining': self.hints_remaining,
        }


def unavailable(row, col, hints_remaining):
    return HintResult(REJECTED, row, col, reason=HINT_UNAVAILABLE,
                      hints_remaining=hints_remaining)


def _unit_holding(board, num, row, col):
    """First unit through (row, col) that already holds num, or None."""
    if num in board[row]:
        return 'row'
    if any(board[i][col] == num for i in range(9)):
        return 'column'
    start_row, start_col = 3 * (row // 3), 3 * (col // 3)
    for i in range(start_row, start_row + 3):
        for j in range(start_col, start_col + 3):
            if board[i][j] == num:
                return 'box'
    return None


def _unit_cells(unit, row, col):
    if unit == 'row':
        return [(row, j) for j in range(9)]
    if unit == 'column':
        return [(i, col) for i in range(9)]
    start_row, start_col = 3 * (row // 3), 3 * (col // 3)
    return [(i, j) for i in range(start_row, start_row + 3)
            for j in range(start_col, start_col + 3)]


def _only_place_in(board, num, row, col):
    """Unit in which (row, col) is the only empty cell that can take num."""
    for unit in ('row', 'column', 'box'):
        others = [
            (i, j) for i, j in _unit_cells(unit, row, col)
            if (i, j) != (row, col) and board[i][j] == 0 and is_valid_move(board, num, i, j)
        ]
        if not others:
            return unit
    return None


def explain_hint(board, solution, row, col):
    """
    Explain why the solution digit is forced at an empty cell.

    Every other digit is checked against the row, column and box on the
    current board. If they are all ruled out the digit is the only
    candidate; otherwise we look for a unit where this is the only
    place the digit fits.
    """
    check_cell(row, col)
    digit = solution[row][col]

    eliminated = {}
    for num in range(1, 10):
        if num == digit:
            continue
        unit = _unit_holding(board, num, row, col)
        if unit:
            eliminated[num] = unit

    explanation = [f"This should be {digit} because:"]
    if len(eliminated) == 8:
        reason = 'only_candidate'
        for num in sorted(eliminated):
            explanation.append(f"- {num} is already in this {UNIT_NAMES[eliminated[num]]}")
        explanation.append(f"- {digit} is the only number that fits here without conflicts")
    else:
        unit = _only_place_in(board, digit, row, col)
        if unit:
            reason = f"only_place_in_{unit}"
            explanation.append(f"- {digit} cannot go anywhere else in this {UNIT_NAMES[unit]}")
        else:
            reason = 'unique_solution'
            explanation.append("- it is the only value consistent with the puzzle's unique solution")

    return HintResult(COMMITTED, row, col, digit=digit, reason=reason,
                      eliminated=eliminated, explanation=explanation)
