"""Client for the Deluge web JSON-RPC endpoint.

Only the one workflow the service needs is implemented: log in, have the
daemon download a .torrent from a URL, then register the staged file.
"""

from .errors import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    DelugeError,
    DownloadError,
    InvalidRequestError,
    ProtocolError,
    RegistrationError,
    TransportError,
)
from .rpc import RpcCall, RpcResult
from .session import SessionClient
from .translate import Failure, translate
from .workflow import Credentials, State, TorrentAcquisition, add_torrent, placement_options


def build_session_client(config) -> SessionClient:
    """Create a session client from a Flask config mapping."""
    return SessionClient(config['DELUGE_URL'], timeout=config.get('DELUGE_TIMEOUT'))


def session_client_for(app) -> SessionClient:
    """Return the client a request should use, honouring DELUGE_SESSION_SCOPE.

    ``request`` scope builds a fresh client (and daemon session) every time;
    ``process`` scope keeps a single client in ``app.extensions``; create_app
    builds it up front, the fallback here only covers apps configured later.
    """
    if app.config.get('DELUGE_SESSION_SCOPE', 'request') != 'process':
        return build_session_client(app.config)
    client = app.extensions.get('deluge_session')
    if client is None:
        client = app.extensions['deluge_session'] = build_session_client(app.config)
    return client
