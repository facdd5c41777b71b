import pytest


@pytest.fixture()
def fleet(client, auth_headers, materials):
    c = client.post("/clients", headers=auth_headers, json={
        "name": "Restaurant Le Phare", "location": "Marseille", "contact_name": "M. Costa",
    }).json()
    url = f"/clients/{c['id']}/equipments"
    # recharge en retard depuis le 2024-06-30
    client.post(url, headers=auth_headers, json={
        "material_id": materials["PA"].id, "number": 1, "commissioning_date": "2024-04-01",
    })
    # contrôle dû le 2024-08-20
    client.post(url, headers=auth_headers, json={
        "material_id": materials["PP"].id, "number": 2, "commissioning_date": "2023-08-21",
    })
    return c


def test_calendar_defaults_to_current_month(client, auth_headers, fleet):
    body = client.get("/calendar", headers=auth_headers).json()

    assert (body["month"], body["year"]) == (7, 2024)
    assert len(body["months"]) == 12
    assert body["available_years"] == [2022, 2023, 2024, 2025, 2026, 2027]
    assert body["total_actions"] == 1

    (entry,) = body["clients"]
    assert entry["client_name"] == "Restaurant Le Phare"
    assert entry["has_overdue"] is True
    assert entry["actions"][0]["action_label"] == "Première recharge"
    assert entry["actions"][0]["days_difference"] == 5


def test_calendar_future_month(client, auth_headers, fleet):
    body = client.get("/calendar", params={"month": 8, "year": 2024}, headers=auth_headers).json()

    assert body["total_actions"] == 1
    (action,) = body["clients"][0]["actions"]
    assert action["action_type"] == "control"
    assert action["is_overdue"] is False
    assert body["clients"][0]["has_overdue"] is False


def test_calendar_rejects_bad_month(client, auth_headers):
    assert client.get("/calendar", params={"month": 13}, headers=auth_headers).status_code == 422


def test_dashboard_stats(client, auth_headers, fleet):
    stats = client.get("/dashboard/stats", headers=auth_headers).json()

    assert stats["clients"]["total"] == 1
    assert stats["equipments"]["total"] == 2
    assert stats["equipments"]["recharges_overdue"] == 1
    assert stats["equipments"]["by_severity"]["important"] == 1
    assert stats["materials"]["total"] == 3
    assert [u["equipment_number"] for u in stats["urgent"]] == [1]
