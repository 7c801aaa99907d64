from flask import Blueprint, jsonify, request, current_app
from api_service.services.deluge import (
    DelugeError,
    InvalidRequestError,
    TorrentAcquisition,
    session_client_for,
    translate,
)

torrents = Blueprint('torrents', __name__)


def _torrent_url(data):
    """Pull the URL out of ``{"parameters": {"url": ...}}``."""
    if not isinstance(data, dict):
        raise InvalidRequestError('Invalid request body')
    parameters = data.get('parameters')
    if not isinstance(parameters, dict):
        raise InvalidRequestError('Torrent URL is required')
    return parameters.get('url')


@torrents.route('/add_torrent', methods=['POST'])
def add_torrent():
    data = request.get_json(silent=True)
    current_app.logger.info(f"[add_torrent] received body={data!r}")

    config = current_app.config
    client = None
    try:
        url = _torrent_url(data)
        client = session_client_for(current_app)
        workflow = TorrentAcquisition(client, file_slots=int(config.get('DELUGE_FILE_SLOTS', 5)))
        job = workflow.run(url)
    except DelugeError as exc:
        failure = translate(exc)
        current_app.logger.error(f"[add_torrent] status={failure.status} kind={type(exc).__name__} cause={failure.cause}")
        return jsonify({'error': failure.message, 'detail': str(failure.cause)}), failure.status
    finally:
        if client is not None and config.get('DELUGE_SESSION_SCOPE', 'request') != 'process':
            client.close()

    current_app.logger.info(f"[add_torrent] registered url={url} job={job!r}")
    return jsonify(job)
