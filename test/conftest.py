"""
Shared fixtures: an in-memory fake of the remote store (REST data API and
auth API) mounted on httpx.MockTransport.
"""
import asyncio
import itertools
import json
import uuid

import httpx
import pytest

from src.store.client import StoreClient
from src.store.auth import AuthClient
from src.store.config import StoreConfig

STORE_URL = "http://store.test"
API_KEY = "test-key"


class FakeStore:
    """PostgREST/auth look-alike keeping rows in dicts."""

    def __init__(self):
        self.tables = {"items": [], "users": []}
        self.accounts = {}
        self.tokens = {}
        self.calls = []
        self._ids = itertools.count(1)

        # behaviour switches
        self.offline = False
        self.status_override = None
        self.reject_writes = None
        self.empty_writes = set()

    # ---------- helpers ----------

    def seed(self, collection, **fields):
        row = {"id": next(self._ids), **fields}
        self.tables.setdefault(collection, []).append(row)
        return row

    def data_calls(self):
        return [c for c in self.calls if c[1].startswith("/rest/v1/") and c[1] != "/rest/v1/"]

    @staticmethod
    def _json(status, body):
        return httpx.Response(status, content=json.dumps(body).encode(), headers={"content-type": "application/json"})

    # ---------- transport ----------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))

        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if self.status_override:
            return self._json(self.status_override, {"message": "store says no"})

        path = request.url.path
        if path.startswith("/auth/v1/"):
            return self._auth(request, path[len("/auth/v1/"):])
        if path.startswith("/rest/v1/"):
            assert request.headers["apikey"] == API_KEY
            return self._rest(request, path[len("/rest/v1/"):])
        return self._json(404, {"message": "no route"})

    def _rest(self, request, collection):
        if not collection:
            return self._json(200, {"swagger": "2.0"})
        rows = self.tables.setdefault(collection, [])
        filters = {
            k: v[len("eq."):] for k, v in request.url.params.items()
            if k != "select" and v.startswith("eq.")
        }
        if "id" in filters and not filters["id"].isdigit():
            # bigint id column
            return self._json(400, {"code": "22P02", "message": f'invalid input syntax for type bigint: "{filters["id"]}"'})
        matching = [r for r in rows if all(str(r.get(k)) == v for k, v in filters.items())]

        method = request.method
        if method in ("POST", "PATCH") and self.reject_writes:
            return self._json(self.reject_writes, {"message": "duplicate key value violates unique constraint", "details": "Key (name) already exists."})

        if method == "GET":
            return self._json(200, matching)

        if method == "POST":
            row = {"id": next(self._ids), **json.loads(request.content)}
            rows.append(row)
            if "POST" in self.empty_writes:
                return httpx.Response(201)
            return self._json(201, [row])

        if method == "PATCH":
            changes = json.loads(request.content)
            for row in matching:
                row.update(changes)
            if "PATCH" in self.empty_writes:
                return httpx.Response(200)
            return self._json(200, matching)

        if method == "DELETE":
            for row in matching:
                rows.remove(row)
            if "DELETE" in self.empty_writes:
                return httpx.Response(204)
            return self._json(200, matching)

        return self._json(405, {"message": "method not allowed"})

    def _auth(self, request, action):
        if action == "signup":
            body = json.loads(request.content)
            if body["email"] in self.accounts:
                return self._json(422, {"code": 422, "error_code": "user_already_exists", "msg": "User already registered"})
            user = {"id": str(uuid.uuid4()), "email": body["email"]}
            self.accounts[body["email"]] = (body["password"], user)
            return self._json(200, user)

        if action == "token":
            body = json.loads(request.content)
            known = self.accounts.get(body["email"])
            if known is None or known[0] != body["password"]:
                return self._json(400, {"error": "invalid_grant", "error_description": "Invalid login credentials"})
            token = uuid.uuid4().hex
            self.tokens[token] = known[1]
            return self._json(200, {"access_token": token, "token_type": "bearer", "expires_in": 3600, "user": known[1]})

        if action == "user":
            token = request.headers.get("Authorization", "").partition(" ")[2]
            user = self.tokens.get(token)
            if user is None:
                return self._json(401, {"msg": "invalid JWT"})
            return self._json(200, user)

        return self._json(404, {"msg": "no route"})


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def transport(fake_store):
    return httpx.MockTransport(fake_store.handler)


@pytest.fixture
def store_client(transport):
    return StoreClient(STORE_URL, API_KEY, httpx.AsyncClient(transport=transport))


@pytest.fixture
def auth_client(transport):
    return AuthClient(STORE_URL, API_KEY, httpx.AsyncClient(transport=transport))


@pytest.fixture
def app_config():
    return StoreConfig(store_url=STORE_URL, store_api_key=API_KEY)


@pytest.fixture
def run():
    """Drive a coroutine to completion from a sync test."""
    return asyncio.run
