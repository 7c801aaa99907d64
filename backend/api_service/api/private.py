from flask import Blueprint, jsonify, request, current_app
from api_service.services import scores
from api_service.services.pokemon import PokemonLookupError, get_pokemon


private = Blueprint('private', __name__)


def _error_status(exc: scores.ScoreStoreError) -> int:
    if isinstance(exc, scores.InvalidIdentifierError):
        return 400
    if isinstance(exc, (scores.TableNotFoundError, scores.UserNotFoundError)):
        return 404
    if isinstance(exc, (scores.DuplicateUserError, scores.TableConflictError)):
        return 409
    return 500


def _store_error(exc: scores.ScoreStoreError):
    status = _error_status(exc)
    current_app.logger.warning(f"[score-store] status={status} path={request.path} error={exc}")
    return jsonify({'error': str(exc)}), status


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@private.route('/hello', methods=['GET'])
def hello():
    return jsonify({'hello': 'Hello world!'})


@private.route('/list_tables', methods=['GET'])
def list_tables():
    try:
        tables = scores.list_tables()
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    current_app.logger.info(f"[list_tables] tables={tables} remote={request.remote_addr}")
    return jsonify({'tables': tables})


@private.route('/create_table', methods=['POST'])
def create_table():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid request body'}), 400
    try:
        message = scores.create_table(data.get('table_name'))
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    current_app.logger.info(f"[create_table] {message} remote={request.remote_addr}")
    return jsonify({'table_created': data['table_name']})


@private.route('/delete_table', methods=['DELETE'])
def delete_table():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid request body'}), 400
    try:
        message = scores.delete_table(data.get('table_name'))
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    current_app.logger.info(f"[delete_table] {message} remote={request.remote_addr}")
    return jsonify({'table_deleted': data['table_name']})


@private.route('/update_table_with_user', methods=['PUT'])
def update_table_with_user():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid request body'}), 400
    username = data.get('username')
    try:
        scores.add_user(data.get('table_name'), username)
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    return jsonify({'added_user': username})


@private.route('/get_current_score', methods=['GET'])
def get_current_score():
    table_name = request.args.get('tablename', '')
    username = request.args.get('username', '')
    if not table_name or not username:
        return jsonify({'error': 'tablename or username required'}), 400
    try:
        score = scores.get_current_score(table_name, username)
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    return f"Score for {username}: {score}\n", 200, {'Content-Type': 'text/plain'}


@private.route('/update_user_score', methods=['POST'])
def update_user_score():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid request body'}), 400
    try:
        score = int(data.get('score', 0))
    except (TypeError, ValueError):
        return jsonify({'error': 'score must be an integer'}), 400
    try:
        message = scores.update_score_for_user(
            data.get('table_name'),
            data.get('username'),
            score,
            data.get('column') or 'score',
        )
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    return jsonify({'update_answer': message})


@private.route('/get_pokemon', methods=['GET'])
def pokemon():
    try:
        offset = int(request.args.get('offset', 0))
    except ValueError:
        return jsonify({'error': 'offset must be an integer'}), 400
    cfg = current_app.config
    try:
        name = get_pokemon(cfg['POKEAPI_URL'], offset=offset, timeout=cfg.get('POKEAPI_TIMEOUT'))
    except PokemonLookupError as exc:
        current_app.logger.error(f"[get_pokemon] offset={offset} error={exc}")
        return jsonify({'error': f'there was an error finding your pokemon, {exc}'}), 500
    current_app.logger.info(f"[get_pokemon] pokemon={name}")
    return f"{name}\n", 200, {'Content-Type': 'text/plain'}


@private.route('/put_answer', methods=['POST'])
def put_answer():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Invalid request body'}), 400
    try:
        num_in_array = int(data.get('numinarray', 0))
    except (TypeError, ValueError):
        return jsonify({'error': 'numinarray must be an integer'}), 400
    try:
        answer = scores.put_answer(
            data.get('table_name'),
            data.get('answer'),
            data.get('column'),
            data.get('second_column'),
            num_in_array,
        )
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    return jsonify({'answer': answer})


@private.route('/get_answer', methods=['GET'])
def get_answer():
    table_name = request.args.get('tablename', '')
    column = request.args.get('column', '')
    if not table_name or not column:
        return jsonify({'error': 'tablename or column required'}), 400
    try:
        answer = scores.read_answer(table_name, column)
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    current_app.logger.info(f"[get_answer] table={table_name} column={column} remote={request.remote_addr}")
    return answer, 200, {'Content-Type': 'text/plain'}


@private.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    table_name = request.args.get('tablename', '')
    if not table_name:
        return jsonify({'error': 'tablename required'}), 400
    try:
        board = scores.leaderboard(table_name)
    except scores.ScoreStoreError as exc:
        return _store_error(exc)
    return f"Leaderboard:\n{board}", 200, {'Content-Type': 'text/plain'}
