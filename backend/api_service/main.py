from flask import Blueprint, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from api_service.services import scores

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the api-service!'})

@main.route('/hello')
def hello():
    return jsonify({'hello': 'Hello world!'})

@main.route('/health')
def health():
    try:
        scores.ping()
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[health] status=unhealthy database error: {exc}")
        return jsonify({'status': 'unhealthy', 'error': 'Database connection failed'}), 503
    return jsonify({'status': 'healthy'})
