import logging

import requests

from .errors import DecodeError, TransportError
from .rpc import RpcCall, RpcResult

logger = logging.getLogger(__name__)


class SessionClient:
    """Posts RPC envelopes to one Deluge web endpoint.

    The underlying ``requests.Session`` keeps whatever cookie the daemon sets
    on login and sends it back on every later call made through this
    instance. Each call is attempted exactly once.
    """

    def __init__(self, url, timeout=None, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.authenticated = False

    def call(self, rpc_call: RpcCall) -> RpcResult:
        logger.debug(f"[rpc-send] url={self.url} call={rpc_call.redacted()}")
        try:
            resp = self.session.post(
                self.url,
                json=rpc_call.to_dict(),
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
            body = resp.content
        except requests.RequestException as exc:
            raise TransportError(f'{rpc_call.method} request to {self.url} failed', exc) from exc

        logger.debug(f"[rpc-recv] method={rpc_call.method} id={rpc_call.id} status={resp.status_code}")
        try:
            return RpcResult.from_body(body)
        except DecodeError as exc:
            raise DecodeError(
                f'{rpc_call.method} returned an undecodable response (HTTP {resp.status_code})',
                exc.cause or exc,
            ) from exc

    def reset(self) -> None:
        """Forget the daemon session; the next workflow run logs in again."""
        self.session.cookies.clear()
        self.authenticated = False

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
