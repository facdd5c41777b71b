import pytest


@pytest.fixture()
def garage(client, auth_headers):
    r = client.post("/clients", headers=auth_headers, json={
        "name": "Garage Martin", "location": "Lyon", "contact_name": "M. Martin", "phone": "04 78 12 34 56",
    })
    assert r.status_code == 201
    return r.json()


def add_equipment(client, headers, client_id, material_id, number, commissioning_date, **extra):
    r = client.post(f"/clients/{client_id}/equipments", headers=headers, json={
        "material_id": material_id, "number": number, "commissioning_date": commissioning_date, **extra,
    })
    assert r.status_code == 201, r.text
    return r.json()


def test_create_client(garage):
    assert garage["name"] == "Garage Martin"
    assert garage["phone"] == "04 78 12 34 56"
    assert garage["equipments"] == []


def test_duplicate_name_and_location(client, auth_headers, garage):
    r = client.post("/clients", headers=auth_headers, json={
        "name": "Garage Martin", "location": "Lyon", "contact_name": "Autre",
    })
    assert r.status_code == 409

    r = client.post("/clients", headers=auth_headers, json={
        "name": "Garage Martin", "location": "Villeurbanne", "contact_name": "Autre",
    })
    assert r.status_code == 201


@pytest.mark.parametrize("phone", ["12345", "06 12 34 56", "+44 7911 123456"])
def test_invalid_phone(client, auth_headers, phone):
    r = client.post("/clients", headers=auth_headers, json={
        "name": "Tabac", "location": "Nice", "contact_name": "M. Roux", "phone": phone,
    })
    assert r.status_code == 422


def test_list_newest_first(client, auth_headers, garage):
    client.post("/clients", headers=auth_headers, json={
        "name": "Pharmacie", "location": "Lyon", "contact_name": "Mme Durand",
    })
    names = [c["name"] for c in client.get("/clients", headers=auth_headers).json()]
    assert names == ["Pharmacie", "Garage Martin"]


def test_search_by_name_contact_or_location(client, auth_headers, garage):
    client.post("/clients", headers=auth_headers, json={
        "name": "Pharmacie Centrale", "location": "Grenoble", "contact_name": "Mme Durand",
    })

    def names(term):
        r = client.get("/clients", params={"search": term}, headers=auth_headers)
        assert r.status_code == 200
        return sorted(c["name"] for c in r.json())

    assert names("garage") == ["Garage Martin"]
    assert names("DURAND") == ["Pharmacie Centrale"]
    assert names("lyon") == ["Garage Martin"]
    assert names("   ") == ["Garage Martin", "Pharmacie Centrale"]
    assert names("Bordeaux") == []


def test_update_client(client, auth_headers, garage):
    r = client.put(f"/clients/{garage['id']}", headers=auth_headers, json={"contact_name": " Mme Martin "})
    assert r.status_code == 200
    assert r.json()["contact_name"] == "Mme Martin"
    assert r.json()["location"] == "Lyon"


def test_update_to_existing_pair_conflicts(client, auth_headers, garage):
    other = client.post("/clients", headers=auth_headers, json={
        "name": "Garage Martin", "location": "Bron", "contact_name": "M. Martin",
    }).json()
    r = client.put(f"/clients/{other['id']}", headers=auth_headers, json={"location": "Lyon"})
    assert r.status_code == 409


def test_unknown_client(client, auth_headers):
    assert client.get("/clients/999", headers=auth_headers).status_code == 404


def test_detail_includes_status(client, auth_headers, garage, materials):
    add_equipment(client, auth_headers, garage["id"], materials["PA"].id, 1, "2024-04-01")

    detail = client.get(f"/clients/{garage['id']}", headers=auth_headers).json()

    (equipment,) = detail["equipments"]
    status = equipment["status"]
    assert status["severity"] == "important"
    assert status["status_type"] == "recharge-expired"
    assert status["recharge"]["applicable"] is True
    assert status["recharge"]["days_overdue"] == 5
    assert detail["stats"] == {"total": 1, "validity_expired": 0, "control_expired": 0, "recharge_expired": 1}


def test_delete_refused_while_equipment_remains(client, auth_headers, garage, materials):
    add_equipment(client, auth_headers, garage["id"], materials["PP"].id, 1, "2024-01-01")

    r = client.delete(f"/clients/{garage['id']}", headers=auth_headers)
    assert r.status_code == 409
    assert client.get(f"/clients/{garage['id']}", headers=auth_headers).status_code == 200


def test_delete_client(client, auth_headers, garage):
    assert client.delete(f"/clients/{garage['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/clients/{garage['id']}", headers=auth_headers).status_code == 404


def test_verification_visit(client, auth_headers, garage, materials):
    add_equipment(client, auth_headers, garage["id"], materials["PA"].id, 1, "2024-04-01")
    add_equipment(client, auth_headers, garage["id"], materials["PP"].id, 2, "2023-01-01")

    r = client.post(f"/clients/{garage['id']}/verification", headers=auth_headers, json={
        "verification_date": "2024-07-01",
        "recharges": [{"equipment_number": 1, "recharge_date": "2024-07-01"}],
    })
    assert r.status_code == 200

    assert r.json()["stats"]["recharge_expired"] == 0
    pa, pp = r.json()["equipments"]
    assert pa["last_verification_date"] == "2024-07-01"
    assert pa["last_recharge_date"] == "2024-07-01"
    assert pa["status"]["severity"] == "normal"
    assert pp["last_verification_date"] == "2024-07-01"
    assert pp["last_recharge_date"] is None
    assert pp["status"]["recharge"] == {"applicable": False}


def test_verification_defaults_to_today(client, auth_headers, garage, materials):
    add_equipment(client, auth_headers, garage["id"], materials["PP"].id, 1, "2023-01-01")

    r = client.post(f"/clients/{garage['id']}/verification", headers=auth_headers, json={})
    assert r.status_code == 200
    assert r.json()["equipments"][0]["last_verification_date"] == "2024-07-05"


def test_verification_rejects_bad_recharges(client, auth_headers, garage, materials):
    add_equipment(client, auth_headers, garage["id"], materials["PP"].id, 2, "2023-01-01")
    url = f"/clients/{garage['id']}/verification"

    r = client.post(url, headers=auth_headers, json={"recharges": [{"equipment_number": 2, "recharge_date": "2024-07-01"}]})
    assert r.status_code == 400

    r = client.post(url, headers=auth_headers, json={"recharges": [{"equipment_number": 99, "recharge_date": "2024-07-01"}]})
    assert r.status_code == 404

    # rien n'a été enregistré
    detail = client.get(f"/clients/{garage['id']}", headers=auth_headers).json()
    assert detail["equipments"][0]["last_verification_date"] is None
