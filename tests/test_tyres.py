from __future__ import annotations


def _add_tyre(client, headers, vehicle_id, user_id="user_1", **fields):
    payload = {"tyreNumber": "MRF-001", "description": "Front left, new", "installedDate": "2024-04-10"}
    payload.update(fields)
    return client.post(f"/vehicles/{vehicle_id}/tyres", json=payload, headers=headers(user_id))


def _tyres(client, headers, vehicle_id):
    return client.get(f"/vehicles/{vehicle_id}", headers=headers("user_1")).json()["tyres"]


def test_add_tyre(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle()
    response = _add_tyre(client, headers, vehicle_id)
    assert response.status_code == 201
    tyre = response.json()
    assert tyre["tyreNumber"] == "MRF-001"
    assert _tyres(client, headers, vehicle_id) == [tyre]


def test_update_tyre_is_partial_and_targets_one_tyre(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle()
    first = _add_tyre(client, headers, vehicle_id).json()
    second = _add_tyre(client, headers, vehicle_id, tyreNumber="MRF-002", description="Front right").json()

    response = client.put(
        f"/vehicles/{vehicle_id}/tyres/{first['_id']}",
        json={"description": "Front left, retreaded"},
        headers=headers("user_1"),
    )
    assert response.status_code == 200
    assert response.json() == {**first, "description": "Front left, retreaded"}

    tyres = {tyre["_id"]: tyre for tyre in _tyres(client, headers, vehicle_id)}
    assert tyres[second["_id"]] == second


def test_remove_tyre(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle()
    first = _add_tyre(client, headers, vehicle_id).json()
    second = _add_tyre(client, headers, vehicle_id, tyreNumber="MRF-002").json()

    response = client.delete(f"/vehicles/{vehicle_id}/tyres/{first['_id']}", headers=headers("user_1"))
    assert response.status_code == 200
    assert _tyres(client, headers, vehicle_id) == [second]


def test_missing_tyre_is_not_found(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle()
    tyre_id = "b" * 24
    assert client.delete(f"/vehicles/{vehicle_id}/tyres/{tyre_id}", headers=headers("user_1")).status_code == 404
    assert (
        client.put(
            f"/vehicles/{vehicle_id}/tyres/{tyre_id}", json={"description": "x"}, headers=headers("user_1")
        ).status_code
        == 404
    )


def test_malformed_tyre_id(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle()
    response = client.delete(f"/vehicles/{vehicle_id}/tyres/nope", headers=headers("user_1"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid tyre ID"


def test_tyre_validation(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle()
    assert _add_tyre(client, headers, vehicle_id, tyreNumber="X").status_code == 400
    assert _add_tyre(client, headers, vehicle_id, description="").status_code == 400


def test_other_user_cannot_change_tyres(client, headers, create_vehicle) -> None:
    vehicle_id = create_vehicle("user_1")
    tyre = _add_tyre(client, headers, vehicle_id).json()
    assert _add_tyre(client, headers, vehicle_id, user_id="user_2").status_code == 403
    response = client.delete(f"/vehicles/{vehicle_id}/tyres/{tyre['_id']}", headers=headers("user_2"))
    assert response.status_code == 403
    assert len(_tyres(client, headers, vehicle_id)) == 1


def test_installed_date_must_be_a_date(client, headers, create_vehicle, db) -> None:
    vehicle_id = create_vehicle()
    assert _add_tyre(client, headers, vehicle_id, installedDate="not a date").status_code == 400
    assert _add_tyre(client, headers, vehicle_id, installedDate="2024-02-30").status_code == 400
    assert _tyres(client, headers, vehicle_id) == []

    tyre = _add_tyre(client, headers, vehicle_id).json()
    response = client.put(
        f"/vehicles/{vehicle_id}/tyres/{tyre['_id']}",
        json={"installedDate": "soon"},
        headers=headers("user_1"),
    )
    assert response.status_code == 400
    assert db["vehicles"].find_one()["tyres"][0]["installedDate"] == "2024-04-10"
