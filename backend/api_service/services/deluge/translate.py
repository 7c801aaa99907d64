from typing import NamedTuple

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


class Failure(NamedTuple):
    status: int
    message: str
    cause: DelugeError


# Checked in order; every entry is a leaf of the DelugeError hierarchy
_MESSAGES = (
    (InvalidRequestError, 400, 'Torrent URL is required'),
    (ConfigurationError, 500, 'Torrent daemon credentials are not configured'),
    (AuthenticationError, 500, 'Could not authenticate with the torrent daemon'),
    (TransportError, 500, 'Could not reach the torrent daemon'),
    (DecodeError, 500, 'The torrent daemon sent an unreadable response'),
    (DownloadError, 500, 'The torrent daemon could not download the torrent'),
    (ProtocolError, 500, 'The torrent daemon sent an unexpected response'),
    (RegistrationError, 500, 'The torrent daemon rejected the torrent'),
)


def translate(exc: DelugeError) -> Failure:
    """Map a workflow failure to the status and message shown to HTTP callers."""
    for kind, status, message in _MESSAGES:
        if isinstance(exc, kind):
            return Failure(status, message, exc)
    return Failure(500, 'Error downloading torrent', exc)
