# tests/conftest.py
import copy
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to sys.path so "app", "database" and "game" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# app.py creates its tables on import; keep that database out of the project root
os.environ["DB_PATH"] = os.path.join(tempfile.mkdtemp(prefix="sudoku-tests-"), "sudoku.db")
os.environ.pop("DATABASE_URL", None)

SOLVED = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]


def blank(board, cells):
    """Copy of board with the given cells emptied."""
    puzzle = copy.deepcopy(board)
    for r, c in cells:
        puzzle[r][c] = 0
    return puzzle


@pytest.fixture
def solved():
    return copy.deepcopy(SOLVED)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    import database

    path = tmp_path / "sudoku.db"
    monkeypatch.setenv("DB_PATH", str(path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    database.init_db()
    return path


@pytest.fixture
def client(db_path):
    import app as app_module

    app_module.app.config['TESTING'] = True
    app_module.GAMES.clear()
    with app_module.app.test_client() as client:
        yield client
    app_module.GAMES.clear()
