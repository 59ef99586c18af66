from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import mongomock
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

os.environ.setdefault("SESSION_SECRET", "test-secret")

import main
from auth import issue_token
from database import ensure_indexes, get_db
from settings import Settings, get_settings

TEST_SETTINGS = Settings(
    session_secret="test-secret",
    image_upload_url="https://images.test/upload",
    image_destroy_url="https://images.test/destroy",
    image_upload_preset="fleet-test",
    image_folder="fleet-test",
)


@pytest.fixture()
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture()
def db():
    database = mongomock.MongoClient()["fleet_test"]
    ensure_indexes(database)
    return database


@pytest.fixture()
def client(db):
    main.app.dependency_overrides[get_db] = lambda: db
    main.app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture()
def headers() -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user_id, TEST_SETTINGS)}"}

    return _headers


@pytest.fixture()
def create_vehicle(client, headers):
    def _create(user_id: str = "user_1", **overrides) -> str:
        payload = {"name": "Truck A", "ownerName": "Ravi Kumar", "vehicleNumber": "KA01AB1234"}
        payload.update(overrides)
        response = client.post("/vehicles", json=payload, headers=headers(user_id))
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create
