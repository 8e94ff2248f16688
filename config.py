import os

from dotenv import load_dotenv

# Load environment variables before the class body reads them
load_dotenv()

class Config:
    # Base directory
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    DB_PATH = os.environ.get("DB_PATH") or os.path.join(BASE_DIR, "sudoku.db")
    DATABASE_URL = os.environ.get("DATABASE_URL", "")

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me-please")
    SESSION_COOKIE_NAME = "sudoku_session"

    # Logging
    LOG_FILE = os.environ.get("LOG_FILE", "app.log")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Game rules
    DEFAULT_DIFFICULTY = os.environ.get("DEFAULT_DIFFICULTY", "medium")
    HINTS_PER_GAME = int(os.environ.get("HINTS_PER_GAME", "3"))
    MAX_WRONG_ATTEMPTS = int(os.environ.get("MAX_WRONG_ATTEMPTS", "3"))

    # Consecutive failed picks allowed before the carver settles for fewer removals
    CARVE_MAX_ATTEMPTS = int(os.environ.get("CARVE_MAX_ATTEMPTS", "200"))

    # Games held in memory at once; finished games are evicted first, then the least recently used
    MAX_ACTIVE_GAMES = int(os.environ.get("MAX_ACTIVE_GAMES", "500"))

    # Branding
    BRAND = os.environ.get("BRAND", "Geezy Sudoku")
