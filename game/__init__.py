# game/__init__.py
from .sudoku import generate_sudoku, count_solutions, GenerationError
from .moves import apply_move, MoveResult
from .hints import explain_hint, HintResult
from .session import GameSession
from .pdf_utils import generate_best_times_pdf, format_time

__all__ = [
    'generate_sudoku', 'count_solutions', 'GenerationError',
    'apply_move', 'MoveResult',
    'explain_hint', 'HintResult',
    'GameSession',
    'generate_best_times_pdf', 'format_time',
]
