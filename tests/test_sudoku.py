# tests/test_sudoku.py
import copy
import random

import pytest

from game.sudoku import (
    CELLS_TO_REMOVE,
    count_solutions,
    create_puzzle,
    fill_diagonal_boxes,
    generate_solved_board,
    generate_sudoku,
    has_unique_solution,
    is_solved_board,
    is_valid_move,
    solve_sudoku,
)
from tests.conftest import blank


def test_is_valid_move_checks_row_column_and_box(solved):
    board = blank(solved, [(0, 0)])
    assert is_valid_move(board, 5, 0, 0)
    # 3 is already in row 0, 6 in column 0, 9 in the top-left box
    assert not is_valid_move(board, 3, 0, 0)
    assert not is_valid_move(board, 6, 0, 0)
    assert not is_valid_move(board, 9, 0, 0)


def test_is_valid_move_on_empty_board():
    board = [[0] * 9 for _ in range(9)]
    assert all(is_valid_move(board, num, 4, 4) for num in range(1, 10))


def test_diagonal_boxes_are_permutations():
    random.seed(3)
    board = [[0] * 9 for _ in range(9)]
    fill_diagonal_boxes(board)
    for start in (0, 3, 6):
        box = [board[start + i][start + j] for i in range(3) for j in range(3)]
        assert sorted(box) == list(range(1, 10))
    # Off-diagonal boxes stay empty
    assert board[0][3] == 0 and board[3][0] == 0 and board[6][3] == 0


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_generated_board_is_solved(seed):
    random.seed(seed)
    board = generate_solved_board()
    assert is_solved_board(board)


def test_solve_sudoku_completes_a_puzzle(solved):
    board = blank(solved, [(0, 0), (4, 4), (8, 8), (2, 7)])
    assert solve_sudoku(board)
    assert board == solved


def test_is_solved_board_rejects_duplicates(solved):
    solved[0][0], solved[0][1] = solved[0][1], solved[0][0]
    assert not is_solved_board(solved)


def test_count_solutions_on_solved_board(solved):
    assert count_solutions(solved) == 1


def test_count_solutions_caps_at_two():
    empty = [[0] * 9 for _ in range(9)]
    assert count_solutions(empty) == 2
    assert count_solutions(empty, cap=3) == 3


def test_count_solutions_detects_ambiguity(solved):
    # Rows 0 and 1 share a band, so swapping them gives a second solution
    board = blank(solved, [(r, c) for r in (0, 1) for c in range(9)])
    assert count_solutions(board) == 2
    assert count_solutions(board, cap=1) == 1


def test_count_solutions_with_conflicting_givens(solved):
    board = blank(solved, [(0, 0)])
    board[0][1] = board[0][2]
    assert count_solutions(board) == 0


def test_count_solutions_does_not_mutate(solved):
    board = blank(solved, [(r, c) for r in range(0, 9, 2) for c in range(9)])
    before = copy.deepcopy(board)
    count_solutions(board)
    assert board == before


def test_create_puzzle_easy_removes_exact_count(solved):
    random.seed(11)
    puzzle = create_puzzle(solved, 'easy')
    empty = sum(1 for row in puzzle for v in row if v == 0)
    assert empty == CELLS_TO_REMOVE['easy']
    assert has_unique_solution(puzzle)


def test_create_puzzle_keeps_givens_from_solution(solved):
    random.seed(5)
    puzzle = create_puzzle(solved, 'medium')
    for r in range(9):
        for c in range(9):
            assert puzzle[r][c] in (0, solved[r][c])
    assert count_solutions(puzzle) == 1
    # The solution passed in is left alone
    assert is_solved_board(solved)


def test_create_puzzle_hard_stays_unique_when_it_falls_short(solved):
    random.seed(8)
    puzzle = create_puzzle(solved, 'hard', max_attempts=50)
    empty = sum(1 for row in puzzle for v in row if v == 0)
    assert 0 < empty <= CELLS_TO_REMOVE['hard']
    assert count_solutions(puzzle) == 1


def test_create_puzzle_unknown_difficulty(solved):
    with pytest.raises(ValueError):
        create_puzzle(solved, 'expert')


@pytest.mark.parametrize("difficulty", ["easy", "medium", "hard"])
def test_generate_sudoku_returns_unique_puzzle(difficulty):
    random.seed(42)
    puzzle, solution = generate_sudoku(difficulty)
    assert is_solved_board(solution)
    assert count_solutions(puzzle) == 1
    assert all(puzzle[r][c] in (0, solution[r][c]) for r in range(9) for c in range(9))


def test_repeated_carving_always_unique(solved):
    random.seed(21)
    for _ in range(3):
        assert has_unique_solution(create_puzzle(solved, 'easy'))
