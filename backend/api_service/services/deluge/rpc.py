"""JSON-RPC envelope used by the Deluge web UI endpoint.

The daemon answers every call with ``{"result": ..., "error": ..., "id": N}``.
Neither field has a fixed shape, so decoding keeps them as plain JSON values
and the workflow asks for the shape it expects at each step.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import DecodeError, ProtocolError

PROTOCOL_VERSION = '2.0'

AUTH_LOGIN = 'auth.login'
DOWNLOAD_TORRENT_FROM_URL = 'web.download_torrent_from_url'
ADD_TORRENTS = 'web.add_torrents'


@dataclass
class RpcCall:
    method: str
    params: List[Any]
    id: int
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'jsonrpc': PROTOCOL_VERSION,
            'method': self.method,
            'params': self.params,
            'id': self.id,
        }
        # The daemon treats these as optional; an empty string is not the same as absent
        if self.username:
            payload['username'] = self.username
        if self.password:
            payload['password'] = self.password
        return payload

    def redacted(self) -> Dict[str, Any]:
        """Envelope safe to write to logs."""
        payload = self.to_dict()
        if 'password' in payload:
            payload['password'] = '***'
        if self.method == AUTH_LOGIN:
            payload['params'] = ['***' for _ in self.params]
        return payload


@dataclass
class RpcResult:
    result: Any = None
    error: Any = None
    id: Optional[int] = None

    @property
    def failed(self) -> bool:
        # Any non-empty error wins, whatever sits in ``result``
        return self.error is not None and self.error not in ('', {}, [])

    def error_message(self) -> str:
        return format_error(self.error)

    @classmethod
    def from_body(cls, body: bytes | str) -> 'RpcResult':
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError('response body is not valid JSON', exc) from exc
        if not isinstance(payload, dict):
            raise DecodeError(f'expected a JSON object, got {type(payload).__name__}')
        call_id = payload.get('id')
        if call_id is not None and not isinstance(call_id, int):
            raise DecodeError(f'response id must be an integer, got {call_id!r}')
        return cls(result=payload.get('result'), error=payload.get('error'), id=call_id)


def format_error(error: Any) -> str:
    """Fold a daemon error payload of unknown shape into one string."""
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        message = error.get('message')
        code = error.get('code')
        if message and code is not None:
            return f'{message} (code {code})'
        if message:
            return str(message)
    try:
        return json.dumps(error, sort_keys=True)
    except (TypeError, ValueError):
        return repr(error)


def expect_staged_path(result: RpcResult) -> str:
    """The fetch step must hand back the server-side path of the .torrent file."""
    if not isinstance(result.result, str):
        raise ProtocolError(
            f'unexpected result shape: expected a staged file path, got {type(result.result).__name__}'
        )
    if not result.result:
        raise ProtocolError('unexpected result shape: staged file path is empty')
    return result.result


def login_call(password: str, call_id: int) -> RpcCall:
    return RpcCall(method=AUTH_LOGIN, params=[password], id=call_id)


def download_call(url: str, call_id: int) -> RpcCall:
    return RpcCall(method=DOWNLOAD_TORRENT_FROM_URL, params=[url], id=call_id)


def add_torrents_call(staged_path: str, options: Dict[str, Any], call_id: int,
                      username: str, password: str) -> RpcCall:
    torrents = [{'path': staged_path, 'options': options}]
    return RpcCall(
        method=ADD_TORRENTS,
        params=[torrents],
        id=call_id,
        username=username,
        password=password,
    )
