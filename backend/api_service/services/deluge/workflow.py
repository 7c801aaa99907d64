"""Authenticate -> fetch -> register against the Deluge web daemon.

Each step feeds the next: the login cookie is replayed by the session client
and the staged path returned by the fetch step is what gets registered. The
first failure ends the run; nothing is retried.
"""

import enum
import itertools
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    DelugeError,
    DownloadError,
    InvalidRequestError,
    RegistrationError,
    TransportError,
)
from .rpc import add_torrents_call, download_call, expect_staged_path, login_call
from .session import SessionClient

logger = logging.getLogger(__name__)

USERNAME_ENV = 'DELUGE_USERNAME'
PASSWORD_ENV = 'DELUGE_PASSWORD'

DEFAULT_FILE_SLOTS = 5
FILE_PRIORITY = 1


class State(enum.Enum):
    INIT = 'init'
    AUTHENTICATED = 'authenticated'
    FETCHED = 'fetched'
    REGISTERED = 'registered'
    FAILED = 'failed'


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'Credentials':
        env = os.environ if environ is None else environ
        username = env.get(USERNAME_ENV, '')
        password = env.get(PASSWORD_ENV, '')
        if not username or not password:
            missing = [name for name, value in ((USERNAME_ENV, username), (PASSWORD_ENV, password)) if not value]
            raise ConfigurationError(f"{' and '.join(missing)} not set")
        return cls(username=username, password=password)


def placement_options(file_slots: int = DEFAULT_FILE_SLOTS) -> Dict[str, Any]:
    priorities: List[int] = [FILE_PRIORITY] * file_slots
    return {'file_priorities': priorities, 'add_paused': False}


class TorrentAcquisition:
    """One run of the three-call sequence for a single torrent URL."""

    def __init__(self, client: SessionClient, file_slots: int = DEFAULT_FILE_SLOTS,
                 environ: Optional[Mapping[str, str]] = None):
        self.client = client
        self.file_slots = file_slots
        self.environ = environ
        self.state = State.INIT
        self.staged_path: Optional[str] = None
        self.error: Optional[DelugeError] = None
        self._ids = itertools.count(1)

    def run(self, url: str) -> Any:
        if self.state is not State.INIT:
            raise RuntimeError(f'workflow already ran (state={self.state.value})')
        try:
            url = validate_url(url)
            credentials = Credentials.from_environ(self.environ)
            self._authenticate(credentials)
            staged_path = self._fetch(url)
            job = self._register(staged_path, credentials)
        except DelugeError as exc:
            self.state = State.FAILED
            self.error = exc
            logger.warning(f"[torrent-failed] url={url!r} kind={type(exc).__name__} error={exc}")
            raise
        logger.info(f"[torrent-added] url={url} staged_path={staged_path}")
        return job

    def _authenticate(self, credentials: Credentials) -> None:
        call = login_call(credentials.password, next(self._ids))
        try:
            result = self.client.call(call)
        except (TransportError, DecodeError) as exc:
            raise AuthenticationError('could not log in to the daemon', exc) from exc
        if result.failed:
            raise AuthenticationError(f'daemon rejected login: {result.error_message()}')
        if result.result is False:
            raise AuthenticationError('daemon rejected login: invalid credentials')
        self.client.authenticated = True
        self.state = State.AUTHENTICATED

    def _fetch(self, url: str) -> str:
        result = self.client.call(download_call(url, next(self._ids)))
        if result.failed:
            raise DownloadError(f'daemon could not download {url}: {result.error_message()}')
        self.staged_path = expect_staged_path(result)
        self.state = State.FETCHED
        return self.staged_path

    def _register(self, staged_path: str, credentials: Credentials) -> Any:
        call = add_torrents_call(
            staged_path,
            placement_options(self.file_slots),
            next(self._ids),
            username=credentials.username,
            password=credentials.password,
        )
        result = self.client.call(call)
        if result.failed:
            raise RegistrationError(f'daemon rejected {staged_path}: {result.error_message()}')
        self.state = State.REGISTERED
        return result.result


def validate_url(url: Any) -> str:
    if not isinstance(url, str) or not url.strip():
        raise InvalidRequestError('Torrent URL is required')
    return url.strip()


def add_torrent(client: SessionClient, url: str, file_slots: int = DEFAULT_FILE_SLOTS,
                environ: Optional[Mapping[str, str]] = None) -> Any:
    """Run a fresh acquisition for ``url`` and return the daemon's job descriptor."""
    return TorrentAcquisition(client, file_slots=file_slots, environ=environ).run(url)
