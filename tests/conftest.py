import os
import uuid

os.environ["LOGGING_URL"] = ""
os.environ["METRICS_URL"] = ""
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from db.db_operation import mongo_conn
from main import app
from services import factory_client
from services.factory_client import FactoryResult, FACTORY_FAILURE_MESSAGE
from services.metrics_service import metrics
from core.exceptions import UpstreamFailure
from settings.config import settings

PWD = "toomanysecrets"

@pytest.fixture
def client():
    mongo_conn.bind(AsyncMongoMockClient(), "pizza_test")
    metrics.reset()
    with TestClient(app) as c:
        yield c

def rand() -> str:
    return uuid.uuid4().hex[:8]

def email_for(label: str) -> str:
    return f"{label}-{rand()}@jwt.com"

def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}

def register(client, name=None, email=None, password=PWD):
    res = client.post("/api/auth", json={
        "name": name or f"u-{rand()}",
        "email": email or email_for("user"),
        "password": password,
    })
    assert res.status_code == 200, res.text
    return res.json()

def login(client, email, password=PWD):
    return client.put("/api/auth", json={"email": email, "password": password})

@pytest.fixture
def admin_token(client):
    res = login(client, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
    assert res.status_code == 200, res.text
    return res.json()["token"]

@pytest.fixture
def diner(client):
    """A freshly registered diner: {user, token}."""
    return register(client)

@pytest.fixture
def factory_ok(monkeypatch):
    calls = []

    async def fake_submit(diner, order):
        calls.append({"diner": diner, "order": order})
        return FactoryResult(jwt="factory-jwt", report_url="https://factory.example/report/1")

    monkeypatch.setattr(factory_client, "submit_order", fake_submit)
    return calls

@pytest.fixture
def factory_down(monkeypatch):
    async def fake_submit(diner, order):
        raise UpstreamFailure(FACTORY_FAILURE_MESSAGE, report_url="https://factory.example/chaos")

    monkeypatch.setattr(factory_client, "submit_order", fake_submit)
