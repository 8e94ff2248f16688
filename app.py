from flask import Flask, request, session, jsonify, send_file
import io, os, uuid, logging
from collections import OrderedDict
from logging.handlers import RotatingFileHandler

from config import Config
from database import init_db, create_player, get_best_time, get_best_times, save_best_time
from game import GameSession, GenerationError, generate_best_times_pdf
from game.session import COMPLETED, FAILED

app = Flask(__name__)
app.config.from_object(Config)
app.secret_key = app.config['SECRET_KEY']

# Games in progress, keyed by the id kept in the session cookie, least recently used first
GAMES = OrderedDict()

# Configure logging
def setup_logging():
    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))
    handler = RotatingFileHandler(app.config.get('LOG_FILE', 'app.log'), maxBytes=10000, backupCount=3)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)

def setup_database():
    try:
        init_db()
        app.logger.info("Database initialized successfully")
        return True
    except Exception as e:
        app.logger.error(f"Database initialization failed: {e}")
        return False

# Tables are created on import so `flask run` and WSGI servers get them too
setup_database()

def make_game():
    """Create a GameSession for the current player."""
    player = session.get('player')
    return GameSession(
        player=player,
        load_best_time=get_best_time if player else None,
        save_best_time=save_best_time if player else None,
        hints_per_game=app.config['HINTS_PER_GAME'],
        max_wrong_attempts=app.config['MAX_WRONG_ATTEMPTS'],
        max_carve_attempts=app.config['CARVE_MAX_ATTEMPTS'],
    )

def evict_games(limit):
    """Shrink the registry below limit, dropping finished games before live ones."""
    if len(GAMES) < limit:
        return
    for game_id in [gid for gid, g in GAMES.items() if g.status in (COMPLETED, FAILED)]:
        del GAMES[game_id]
        if len(GAMES) < limit:
            return
    while GAMES and len(GAMES) >= limit:
        game_id, _ = GAMES.popitem(last=False)
        app.logger.info(f"Evicted idle game {game_id}")

def register_game(game):
    game_id = uuid.uuid4().hex
    old_id = session.get('game_id')
    if old_id:
        GAMES.pop(old_id, None)
    evict_games(app.config['MAX_ACTIVE_GAMES'])
    GAMES[game_id] = game
    session['game_id'] = game_id

def current_game():
    game_id = session.get('game_id')
    game = GAMES.get(game_id)
    if game is not None:
        GAMES.move_to_end(game_id)
    return game

def no_game():
    return jsonify({'error': 'No active puzzle'}), 400

def json_int(data, key):
    value = data.get(key)
    if value is None:
        return None
    return int(value)

@app.route('/')
def index():
    return jsonify({
        'name': app.config['BRAND'],
        'player': session.get('player'),
        'playing': current_game() is not None,
    })

@app.route('/api/profile', methods=['POST'])
def api_profile():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()

    if not name:
        return jsonify({'error': 'Player name is required'}), 400

    try:
        create_player(name)
        session['player'] = name
        app.logger.info(f"Profile active: {name}")
        return jsonify({'player': name, 'best_times': get_best_times(name)})

    except Exception as e:
        app.logger.error(f"Profile error: {e}")
        return jsonify({'error': 'Failed to create profile'}), 500

@app.route('/api/best_times')
def api_best_times():
    player = session.get('player')
    if not player:
        return jsonify({'error': 'No player profile'}), 403

    try:
        return jsonify({'player': player, 'best_times': get_best_times(player)})
    except Exception as e:
        app.logger.error(f"Best times error: {e}")
        return jsonify({'error': 'Failed to load best times'}), 500

@app.route('/api/new_puzzle')
def api_new_puzzle():
    diff = request.args.get('difficulty', app.config['DEFAULT_DIFFICULTY'])

    try:
        game = make_game()
        state = game.new_game(diff)
        register_game(game)
        app.logger.info(f"New puzzle generated for {session.get('player', 'guest')} with difficulty {diff}")
        return jsonify(state)

    except ValueError as e:
        app.logger.warning(f"New puzzle rejected: {e}")
        return jsonify({'error': str(e)}), 400

    except GenerationError as e:
        app.logger.error(f"New puzzle error: {e}")
        return jsonify({'error': 'Failed to generate puzzle'}), 500

@app.route('/api/state')
def api_state():
    game = current_game()
    if not game:
        return no_game()
    return jsonify(game.state())

@app.route('/api/select', methods=['POST'])
def api_select():
    game = current_game()
    if not game:
        return no_game()

    data = request.get_json(silent=True) or {}
    try:
        ok = game.select(json_int(data, 'row'), json_int(data, 'col'))
    except (TypeError, ValueError) as e:
        return jsonify({'error': f'Invalid cell: {e}'}), 400

    return jsonify({'selected': ok, 'state': game.state()})

@app.route('/api/navigate', methods=['POST'])
def api_navigate():
    game = current_game()
    if not game:
        return no_game()

    data = request.get_json(silent=True) or {}
    try:
        moved = game.move_selection(data.get('direction', ''))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'moved': moved, 'selected': game.state()['selected']})

@app.route('/api/input', methods=['POST'])
def api_input():
    game = current_game()
    if not game:
        return no_game()

    data = request.get_json(silent=True) or {}
    if data.get('digit') is None:
        return jsonify({'error': 'digit is required (0 erases)'}), 400

    try:
        if data.get('row') is not None and data.get('col') is not None:
            if not game.select(json_int(data, 'row'), json_int(data, 'col')):
                return jsonify({'error': 'Cell is not editable or game not in progress'}), 409
        result = game.input(json_int(data, 'digit'))
    except (TypeError, ValueError) as e:
        return jsonify({'error': f'Invalid move: {e}'}), 400

    if result is None:
        return jsonify({'error': 'No cell selected or game not in progress'}), 409

    if not result.committed:
        app.logger.warning(f"Move rejected for {session.get('player', 'guest')}: {result.reason}")
    if result.board_complete:
        app.logger.info(f"Puzzle completed by {session.get('player', 'guest')} in {game.elapsed}s")

    return jsonify({'result': result.to_dict(), 'state': game.state()})

@app.route('/api/hint', methods=['POST'])
def api_hint():
    game = current_game()
    if not game:
        return no_game()

    data = request.get_json(silent=True) or {}
    try:
        result = game.hint(json_int(data, 'row'), json_int(data, 'col'))
    except (TypeError, ValueError) as e:
        return jsonify({'error': f'Invalid cell: {e}'}), 400

    app.logger.info(f"Hint requested by {session.get('player', 'guest')}: {result.status}. Hints left: {result.hints_remaining}")
    return jsonify(result.to_dict())

@app.route('/api/pause', methods=['POST'])
def api_pause():
    game = current_game()
    if not game:
        return no_game()
    return jsonify({'paused': game.pause(), 'status': game.status})

@app.route('/api/resume', methods=['POST'])
def api_resume():
    game = current_game()
    if not game:
        return no_game()
    return jsonify({'resumed': game.resume(), 'status': game.status})

@app.route('/api/tick', methods=['POST'])
def api_tick():
    game = current_game()
    if not game:
        return no_game()

    data = request.get_json(silent=True) or {}
    try:
        seconds = int(data.get('seconds', 1))
    except (TypeError, ValueError):
        return jsonify({'error': 'invalid seconds'}), 400
    if seconds <= 0:
        return jsonify({'error': 'invalid seconds'}), 400

    return jsonify({'elapsed': game.tick(seconds), 'status': game.status})

@app.route('/download_best_times')
def download_best_times():
    player = session.get('player')
    if not player:
        return jsonify({'error': 'No player profile'}), 403

    try:
        buf = io.BytesIO()
        generate_best_times_pdf(player, get_best_times(player), buf, brand=app.config['BRAND'])
        buf.seek(0)

        app.logger.info(f"Best times downloaded by {player}")
        return send_file(buf, as_attachment=True, download_name='sudoku_best_times.pdf', mimetype='application/pdf')

    except Exception as e:
        app.logger.error(f"Download best times error: {e}")
        return jsonify({'error': 'Failed to generate download'}), 500

@app.errorhandler(404)
def not_found(error):
    app.logger.warning(f"404 error: {error}")
    return jsonify({'error': 'Not found'}), 404

@app.errorhandler(500)
def internal_error(error):
    app.logger.error(f"500 error: {error}")
    return jsonify({'error': 'Internal server error'}), 500

if __name__ == '__main__':
    setup_logging()
    app.logger.info("Starting Sudoku application...")
    app.run(debug=os.environ.get('DEBUG', False), host='0.0.0.0', port=5000)
