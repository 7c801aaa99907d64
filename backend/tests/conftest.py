import http.client
import json
import os
import sys
from types import SimpleNamespace

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

# Ensure the backend root (containing the `api_service` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from api_service import create_app, db
from api_service.services.deluge import SessionClient

DELUGE_URL = 'http://deluge.example.com/json'
SESSION_COOKIE = '_session_id=abc123; Path=/'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DELUGE_URL = DELUGE_URL
    DELUGE_TIMEOUT = None
    DELUGE_FILE_SLOTS = 5
    DELUGE_SESSION_SCOPE = 'process'
    POKEAPI_URL = 'http://pokeapi.example.com/api/v2'
    POKEAPI_TIMEOUT = 1


class FakeDeluge(BaseAdapter):
    """Transport adapter that plays the Deluge web endpoint.

    Replies are consumed in order, one per request. A reply may be a dict
    (sent as JSON), raw bytes, or an exception to raise instead of answering.
    The login call gets a Set-Cookie header so the session's cookie jar is
    exercised the same way a real daemon would exercise it.
    """

    def __init__(self, replies, cookie=SESSION_COOKIE):
        super().__init__()
        self.replies = list(replies)
        self.cookie = cookie
        self.calls = []

    def send(self, request, **kwargs):
        body = json.loads(request.body)
        self.calls.append(SimpleNamespace(
            body=body,
            method=body.get('method'),
            cookie=request.headers.get('Cookie'),
            content_type=request.headers.get('Content-Type'),
            http_method=request.method,
            url=request.url,
        ))
        if not self.replies:
            raise AssertionError(f'unexpected call to {body.get("method")}')
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply

        msg = http.client.HTTPMessage()
        msg['Content-Type'] = 'application/json'
        if body.get('method') == 'auth.login' and self.cookie:
            msg['Set-Cookie'] = self.cookie

        resp = requests.Response()
        resp.status_code = 200
        resp.url = request.url
        resp.request = request
        resp.headers = CaseInsensitiveDict(msg.items())
        resp._content = reply if isinstance(reply, bytes) else json.dumps(reply).encode()
        # requests reads Set-Cookie from the underlying http.client response
        resp.raw = SimpleNamespace(_original_response=SimpleNamespace(msg=msg))
        return resp

    def close(self):
        pass


@pytest.fixture()
def deluge_credentials(monkeypatch):
    monkeypatch.setenv('DELUGE_USERNAME', 'deluge-user')
    monkeypatch.setenv('DELUGE_PASSWORD', 'deluge-pass')


@pytest.fixture()
def fake_deluge():
    """Build a SessionClient wired to a FakeDeluge with the given replies."""
    def build(*replies, cookie=SESSION_COOKIE):
        daemon = FakeDeluge(replies, cookie=cookie)
        session = requests.Session()
        session.mount('http://deluge.example.com', daemon)
        return SessionClient(DELUGE_URL, session=session), daemon
    return build


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        db.session.remove()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()
