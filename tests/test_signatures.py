from __future__ import annotations

import main
import signatures
from schemas import SignatureSave


class RecordingImageHost:
    def __init__(self) -> None:
        self.destroyed: list[str] = []

    def destroy(self, url: str) -> bool:
        self.destroyed.append(url)
        return True


def _save(client, headers, user_id="user_1", **fields):
    payload = {"name": "Fleet Manager", "signatureUrl": "https://img.test/fleet-test/sig1.png"}
    payload.update(fields)
    return client.post("/signature", json=payload, headers=headers(user_id))


def test_second_save_updates_in_place(client, headers, db) -> None:
    first = _save(client, headers).json()["id"]
    second = _save(client, headers, signatureUrl="https://img.test/fleet-test/sig2.png").json()["id"]

    assert first == second
    assert db["signatures"].count_documents({"userId": "user_1"}) == 1
    current = client.get("/signature", headers=headers("user_1")).json()
    assert current["signatureUrl"] == "https://img.test/fleet-test/sig2.png"


def test_each_user_has_own_signature(client, headers) -> None:
    mine = _save(client, headers, "user_1").json()["id"]
    theirs = _save(client, headers, "user_2", name="Other").json()["id"]
    assert mine != theirs
    assert client.get("/signature", headers=headers("user_2")).json()["name"] == "Other"


def test_no_signature_yet(client, headers) -> None:
    response = client.get("/signature", headers=headers("user_1"))
    assert response.status_code == 200
    assert response.json() is None


def test_update_signature_guarded(client, headers) -> None:
    signature_id = _save(client, headers).json()["id"]
    payload = {"name": "Changed", "signatureUrl": "https://img.test/fleet-test/sig3.png"}

    assert client.put(f"/signature/{signature_id}", json=payload, headers=headers("user_2")).status_code == 403
    response = client.put(f"/signature/{signature_id}", json=payload, headers=headers("user_1"))
    assert response.status_code == 200
    assert response.json()["name"] == "Changed"


def test_delete_signature_removes_image(client, headers, db) -> None:
    host = RecordingImageHost()
    main.app.dependency_overrides[main.get_images] = lambda: host
    signature_id = _save(client, headers).json()["id"]

    assert client.delete(f"/signature/{signature_id}", headers=headers("user_2")).status_code == 403
    assert host.destroyed == []

    assert client.delete(f"/signature/{signature_id}", headers=headers("user_1")).status_code == 200
    assert host.destroyed == ["https://img.test/fleet-test/sig1.png"]
    assert db["signatures"].count_documents({}) == 0


def test_store_upsert(db) -> None:
    first = signatures.save_signature(db, "user_1", SignatureSave(name="A", signatureUrl="https://img.test/a.png"))
    second = signatures.save_signature(db, "user_1", SignatureSave(name="B", signatureUrl="https://img.test/b.png"))
    assert first == second
    stored = signatures.get_signature(db, "user_1")
    assert stored["name"] == "B"
    assert stored["_id"] == first
