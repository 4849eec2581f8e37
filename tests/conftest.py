import os
import sys
import asyncio
import json
from urllib.parse import urlencode

import pytest

sys.path.append(os.path.abspath("."))

from contacts_api.auth import get_password_hash
from contacts_api.core import Settings
from contacts_api.database import get_db
from contacts_api.models import Contact, User
from contacts_api.web import create_app


TEST_TOKEN = "test"
TEST_PASSWORD = "rahasia"


# One event loop for the WHOLE pytest session
@pytest.fixture(scope="session")
def session_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


# Fresh application over its own in-memory SQLite database per test
@pytest.fixture()
def app():
    settings = Settings(DATABASE_URL="sqlite:///:memory:", LOG_LEVEL="WARNING")
    application = create_app(settings)
    yield application
    application.state.database.dispose()


@pytest.fixture()
def db_session(app):
    session = app.state.database.session()
    try:
        yield session
    finally:
        session.close()


# Simple ASGI response/client
class SimpleResponse:
    def __init__(
        self, status_code: int, body: bytes, headers: list[tuple[bytes, bytes]]
    ):
        self.status_code = status_code
        self._body = body
        self.headers = {k.decode(): v.decode() for k, v in headers}

    def json(self):
        return json.loads(self._body.decode())


class SimpleClient:
    """
    In-process ASGI client running every request on the shared session loop.

    With ``raise_server_exceptions=False`` an error re-raised by the server
    error middleware is swallowed and the 500 response it already sent is
    returned.
    """

    def __init__(self, app, loop, raise_server_exceptions=True):
        self.app = app
        self.loop = loop
        self.raise_server_exceptions = raise_server_exceptions

    def close(self):
        # the session_loop fixture owns the loop
        pass

    def request(self, method: str, path: str, json_body=None, params=None, headers=None):
        headers = dict(headers or {})
        body_bytes = b""

        if json_body is not None:
            body_bytes = json.dumps(json_body).encode()
            headers.setdefault("content-type", "application/json")

        query_string = urlencode(params or {}, doseq=True).encode()
        raw_headers = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
        scope = {
            "type": "http",
            "method": method.upper(),
            "path": path,
            "headers": raw_headers,
            "query_string": query_string,
            "client": ("testclient", 5000),
        }

        async def receive():
            nonlocal body_bytes
            chunk, body_bytes = body_bytes, b""
            return {"type": "http.request", "body": chunk, "more_body": False}

        response_body = bytearray()
        response_status = 500
        response_headers: list[tuple[bytes, bytes]] = []

        async def send(message):
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = message.get("headers", [])
            elif message["type"] == "http.response.body":
                response_body.extend(message.get("body", b""))

        # ensure the loop is the current one
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_until_complete(self.app(scope, receive, send))
        except Exception:
            if self.raise_server_exceptions:
                raise
        return SimpleResponse(response_status, bytes(response_body), response_headers)

    def get(self, path: str, params=None, headers=None):
        return self.request("GET", path, params=params, headers=headers)

    def post(self, path: str, json=None, headers=None):
        return self.request("POST", path, json_body=json, headers=headers)

    def put(self, path: str, json=None, headers=None):
        return self.request("PUT", path, json_body=json, headers=headers)

    def patch(self, path: str, json=None, headers=None):
        return self.request("PATCH", path, json_body=json, headers=headers)

    def delete(self, path: str, headers=None):
        return self.request("DELETE", path, headers=headers)


# Client fixture: route every request through the test session
@pytest.fixture()
def client(app, db_session, session_loop):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    c = SimpleClient(app, loop=session_loop)
    try:
        yield c
    finally:
        app.dependency_overrides.clear()
        c.close()


def create_test_user(db_session, username="test", name="test", token=TEST_TOKEN):
    """Insert a user that is already logged in with ``token``."""
    user = User(
        username=username,
        password=get_password_hash(TEST_PASSWORD),
        name=name,
        token=token,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def create_test_contact(db_session, owner, **fields):
    values = {
        "first_name": "test",
        "last_name": "test",
        "email": "test@pzn.com",
        "phone": "080900000",
    }
    values.update(fields)
    contact = Contact(owner_id=owner.id, **values)
    db_session.add(contact)
    db_session.commit()
    db_session.refresh(contact)
    return contact


def create_many_test_contacts(db_session, owner, count=15):
    for i in range(count):
        create_test_contact(
            db_session,
            owner,
            first_name=f"test {i}",
            last_name=f"test {i}",
            email=f"test{i}@pzn.com",
            phone=f"0813324821{i}",
        )


def auth_headers(token=TEST_TOKEN):
    return {"Authorization": token}


@pytest.fixture()
def test_user(db_session):
    return create_test_user(db_session)


@pytest.fixture()
def test_contact(db_session, test_user):
    return create_test_contact(db_session, test_user)


@pytest.fixture()
def many_contacts(db_session, test_user):
    create_many_test_contacts(db_session, test_user)
