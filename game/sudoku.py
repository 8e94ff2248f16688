# game/sudoku.py
import random
import copy
import logging

logger = logging.getLogger(__name__)

DIGITS = range(1, 10)

# Number of cells removed from the solved board for each difficulty
CELLS_TO_REMOVE = {
    'easy': 40,
    'medium': 50,
    'hard': 60
}

DEFAULT_MAX_ATTEMPTS = 200


class SudokuError(Exception):
    """Base class for puzzle engine failures."""


class GenerationError(SudokuError):
    """A generated or carved board broke an engine invariant."""


def box_index(row, col):
    return (row // 3) * 3 + col // 3


def is_valid_move(board, num, row, col):
    """
    Check if placing num at (row, col) is valid.
    The cell itself is expected to be empty.
    """
    # Check row and column
    for i in range(9):
        if board[row][i] == num or board[i][col] == num:
            return False

    # Check 3x3 box
    start_row, start_col = 3 * (row // 3), 3 * (col // 3)
    for i in range(start_row, start_row + 3):
        for j in range(start_col, start_col + 3):
            if board[i][j] == num:
                return False

    return True


def fill_box(board, row, col):
    """Fill the 3x3 box whose top-left corner is (row, col) with a shuffled 1-9."""
    numbers = list(DIGITS)
    random.shuffle(numbers)
    for i in range(3):
        for j in range(3):
            board[row + i][col + j] = numbers[i * 3 + j]


def fill_diagonal_boxes(board):
    """
    Seed the three boxes on the main diagonal.
    They share no row, column or box, so no validity check is needed.
    """
    for start in range(0, 9, 3):
        fill_box(board, start, start)


def solve_sudoku(board, index=0):
    """
    Fill the remaining empty cells in row-major order by backtracking.
    Tries digits 1-9 in order and resets a cell to 0 when unwinding.
    Returns True if solved, False otherwise.
    """
    while index < 81 and board[index // 9][index % 9] != 0:
        index += 1
    if index == 81:
        return True

    row, col = divmod(index, 9)
    for num in DIGITS:
        if is_valid_move(board, num, row, col):
            board[row][col] = num
            if solve_sudoku(board, index + 1):
                return True

    board[row][col] = 0
    return False


def generate_solved_board():
    """
    Generate a complete, rule-valid 9x9 board.
    """
    board = [[0] * 9 for _ in range(9)]
    fill_diagonal_boxes(board)

    if not solve_sudoku(board) or not is_solved_board(board):
        raise GenerationError("Backtracking could not complete a diagonally seeded board")

    return board


def count_solutions(board, cap=2):
    """
    Count the solutions of a partially filled board, stopping at cap.
    The caller's board is never modified.
    """
    rows = [0] * 9
    cols = [0] * 9
    boxes = [0] * 9
    empties = []

    for r in range(9):
        for c in range(9):
            num = board[r][c]
            if num == 0:
                empties.append((r, c))
                continue
            bit = 1 << num
            b = box_index(r, c)
            # Conflicting givens admit no completion
            if rows[r] & bit or cols[c] & bit or boxes[b] & bit:
                return 0
            rows[r] |= bit
            cols[c] |= bit
            boxes[b] |= bit

    count = 0

    def search():
        nonlocal count
        if not empties:
            count += 1
            return

        # Branch on the most constrained cell
        best_index, best_options = 0, None
        for i, (r, c) in enumerate(empties):
            used = rows[r] | cols[c] | boxes[box_index(r, c)]
            options = [n for n in DIGITS if not used & (1 << n)]
            if best_options is None or len(options) < len(best_options):
                best_index, best_options = i, options
                if len(options) <= 1:
                    break

        r, c = empties.pop(best_index)
        b = box_index(r, c)
        for num in best_options:
            bit = 1 << num
            rows[r] |= bit
            cols[c] |= bit
            boxes[b] |= bit
            search()
            rows[r] &= ~bit
            cols[c] &= ~bit
            boxes[b] &= ~bit
            if count >= cap:
                break
        empties.insert(best_index, (r, c))

    search()
    return min(count, cap)


def has_unique_solution(board):
    """
    Check if the Sudoku puzzle has exactly one solution.
    """
    return count_solutions(board) == 1


def create_puzzle(solution, difficulty='medium', max_attempts=DEFAULT_MAX_ATTEMPTS):
    """
    Carve a puzzle out of a solved board by removing cells one at a time.

    A removal is kept only if the puzzle still has exactly one solution.
    After max_attempts consecutive failed picks, or once every remaining
    given is known to be essential, the puzzle is returned with fewer
    removals than the difficulty asks for.
    """
    if difficulty not in CELLS_TO_REMOVE:
        raise ValueError(f"Unknown difficulty: {difficulty!r}")

    puzzle = copy.deepcopy(solution)
    cells_to_remove = CELLS_TO_REMOVE[difficulty]
    # Removing more cells only adds solutions, so a rejected cell stays rejected
    essential = set()
    attempts = 0

    while cells_to_remove > 0 and attempts < max_attempts:
        if len(essential) == sum(1 for row in puzzle for v in row if v != 0):
            break

        row, col = random.randint(0, 8), random.randint(0, 8)

        # Skip if already empty or known to be needed
        if puzzle[row][col] == 0 or (row, col) in essential:
            attempts += 1
            continue

        backup = puzzle[row][col]
        puzzle[row][col] = 0

        if count_solutions(puzzle) != 1:
            puzzle[row][col] = backup
            essential.add((row, col))
            attempts += 1
        else:
            cells_to_remove -= 1
            attempts = 0

    if cells_to_remove > 0:
        logger.warning(
            f"Carving for {difficulty} stopped {cells_to_remove} cells short of "
            f"{CELLS_TO_REMOVE[difficulty]}"
        )

    return puzzle


def generate_sudoku(difficulty='medium', max_attempts=DEFAULT_MAX_ATTEMPTS):
    """
    Generate a Sudoku puzzle of the specified difficulty.
    Returns a tuple of (puzzle, solution)
    """
    solution = generate_solved_board()
    puzzle = create_puzzle(solution, difficulty, max_attempts)

    if not has_unique_solution(puzzle):
        raise GenerationError("Carved puzzle lost its unique solution")

    return puzzle, solution


def is_solved_board(board):
    """Every row, column and box is a permutation of 1-9."""
    target = set(DIGITS)
    for i in range(9):
        if set(board[i]) != target:
            return False
        if {board[r][i] for r in range(9)} != target:
            return False
        start_row, start_col = 3 * (i // 3), 3 * (i % 3)
        box = {board[r][c] for r in range(start_row, start_row + 3)
               for c in range(start_col, start_col + 3)}
        if box != target:
            return False
    return True
