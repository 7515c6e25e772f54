"""
Tests for caller identity and response hardening.

Covers:
- JWT decoding and ``sub`` resolution
- Expired, tampered and malformed tokens
- Bearer header vs session cookie precedence
- WebSocket token resolution
- Security headers and request-id middleware
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import MagicMock

import jwt
import pytest
import structlog
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.core.auth import (
    SESSION_COOKIE,
    decode_jwt,
    get_current_user_id,
    get_current_user_id_ws,
    user_id_from_token,
)
from app.core.config import get_settings
from app.core.errors import Unauthorized, register_error_handlers
from app.core.middleware import (
    REQUEST_ID_HEADER,
    SECURITY_HEADERS,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)
from tests.conftest import make_token


# ---------------------------------------------------------------------------
# Unit Tests: JWT
# ---------------------------------------------------------------------------

class TestJWT:
    def test_decode_roundtrip(self):
        uid = uuid.uuid4()
        payload = decode_jwt(make_token(uid))
        assert payload["sub"] == str(uid)

    def test_user_id_from_token(self):
        uid = uuid.uuid4()
        assert user_id_from_token(make_token(uid)) == uid

    def test_expired_token(self):
        token = make_token(uuid.uuid4(), expires_in=timedelta(seconds=-10))
        with pytest.raises(Unauthorized, match="expired"):
            user_id_from_token(token)

    def test_tampered_token(self):
        token = make_token(uuid.uuid4())
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
        with pytest.raises(Unauthorized, match="Invalid token"):
            user_id_from_token(tampered)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "some-other-secret-of-adequate-length!!", algorithm="HS256")
        with pytest.raises(Unauthorized):
            user_id_from_token(token)

    def test_missing_sub(self):
        settings = get_settings()
        token = jwt.encode({"name": "Jane"}, settings.secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(Unauthorized):
            user_id_from_token(token)

    def test_sub_is_not_a_uuid(self):
        settings = get_settings()
        token = jwt.encode({"sub": "jane"}, settings.secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(Unauthorized):
            user_id_from_token(token)


# ---------------------------------------------------------------------------
# HTTP dependency
# ---------------------------------------------------------------------------

class TestCurrentUserDependency:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        register_error_handlers(app)

        @app.get("/whoami")
        async def whoami(user_id: uuid.UUID = Depends(get_current_user_id)):
            return {"user_id": str(user_id)}

        return app

    def test_bearer_header(self):
        uid = uuid.uuid4()
        client = TestClient(self._make_app())
        resp = client.get("/whoami", headers={"Authorization": f"Bearer {make_token(uid)}"})
        assert resp.status_code == 200
        assert resp.json() == {"user_id": str(uid)}

    def test_session_cookie(self):
        uid = uuid.uuid4()
        client = TestClient(self._make_app(), cookies={SESSION_COOKIE: make_token(uid)})
        resp = client.get("/whoami")
        assert resp.json() == {"user_id": str(uid)}

    def test_header_wins_over_cookie(self):
        header_user, cookie_user = uuid.uuid4(), uuid.uuid4()
        client = TestClient(self._make_app(), cookies={SESSION_COOKIE: make_token(cookie_user)})
        resp = client.get("/whoami", headers={"Authorization": f"Bearer {make_token(header_user)}"})
        assert resp.json() == {"user_id": str(header_user)}

    def test_non_bearer_scheme_is_ignored(self):
        client = TestClient(self._make_app())
        resp = client.get("/whoami", headers={"Authorization": f"Basic {make_token(uuid.uuid4())}"})
        assert resp.status_code == 401

    def test_missing_credentials(self):
        client = TestClient(self._make_app())
        resp = client.get("/whoami")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"


class TestWebSocketIdentity:
    def test_query_token(self):
        uid = uuid.uuid4()
        ws = MagicMock(cookies={})
        assert get_current_user_id_ws(ws, make_token(uid)) == uid

    def test_cookie_fallback(self):
        uid = uuid.uuid4()
        ws = MagicMock(cookies={SESSION_COOKIE: make_token(uid)})
        assert get_current_user_id_ws(ws, None) == uid

    def test_no_token(self):
        with pytest.raises(Unauthorized):
            get_current_user_id_ws(MagicMock(cookies={}), None)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class TestSecurityHeadersMiddleware:
    def test_headers_present(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        client = TestClient(app)
        resp = client.get("/test")
        assert resp.status_code == 200
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers.get(header) == value


class TestRequestContextMiddleware:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(RequestContextMiddleware)

        @app.get("/context")
        async def context_endpoint():
            return structlog.contextvars.get_contextvars()

        return app

    def test_generates_request_id(self):
        client = TestClient(self._make_app())
        resp = client.get("/context")
        request_id = resp.headers[REQUEST_ID_HEADER]
        assert len(request_id) == 32
        assert resp.json() == {"request_id": request_id, "method": "GET", "path": "/context"}

    def test_echoes_client_request_id(self):
        client = TestClient(self._make_app())
        resp = client.get("/context", headers={REQUEST_ID_HEADER: "abc-123"})
        assert resp.headers[REQUEST_ID_HEADER] == "abc-123"
        assert resp.json()["request_id"] == "abc-123"
