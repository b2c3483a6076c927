import pytest

from services.leave_status import derive_status


@pytest.mark.parametrize("approve1, approve2, has_manager2, expected", [
    (False, None, True, "refused"),
    (None, False, True, "refused"),
    (True, False, True, "refused"),
    (False, True, True, "refused"),
    (False, None, False, "refused"),
    (True, True, True, "approved"),
    (True, None, False, "approved"),
    (True, None, True, "pending"),
    (None, True, True, "pending"),
    (None, None, True, "pending"),
    (None, None, False, "pending"),
])
def test_derive_status(approve1, approve2, has_manager2, expected):
    assert derive_status(approve1, approve2, has_manager2) == expected


def _create(client, headers, employee, **extra):
    body = {
        "employe_id": employee.id,
        "type_demande": "leave",
        "titre": "Conge annuel",
        "type_conge": "annuel",
        "date_depart": "2025-07-01",
        "date_retour": "2025-07-10",
    }
    body.update(extra)
    return client.post("/api/demandes", headers=headers, json=body)


def test_create_demande_pending(client, auth_headers, make_employee):
    employee = make_employee()
    response = _create(client, auth_headers, employee)
    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["statut"] == "pending"
    assert data["nom"] == employee.last_name


def test_create_demande_return_before_start(client, auth_headers, make_employee):
    employee = make_employee()
    response = _create(client, auth_headers, employee, date_retour="2025-06-01")
    assert response.status_code == 400


def test_create_demande_unknown_type(client, auth_headers, make_employee):
    employee = make_employee()
    response = _create(client, auth_headers, employee, type_demande="vacances")
    assert response.status_code == 400


def test_create_demande_unknown_employee(client, auth_headers):
    response = client.post("/api/demandes", headers=auth_headers,
                           json={"employe_id": 999, "type_demande": "absence"})
    assert response.status_code == 404


def test_first_approval_without_second_manager_approves(client, auth_headers, make_employee):
    employee = make_employee(manager2_email=None)
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]

    response = client.patch(f"/api/demandes/{demande_id}/approval", headers=auth_headers,
                            json={"manager": 1, "approved": True})
    assert response.status_code == 200
    assert response.get_json()["data"]["statut"] == "approved"


def test_two_managers_flow(client, auth_headers, make_employee):
    employee = make_employee(manager2_email="manager2@example.com")
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]

    first = client.patch(f"/api/demandes/{demande_id}/approval", headers=auth_headers,
                         json={"manager": 1, "approved": True})
    assert first.get_json()["data"]["statut"] == "pending"

    second = client.patch(f"/api/demandes/{demande_id}/approval", headers=auth_headers,
                          json={"manager": 2, "approved": True})
    assert second.get_json()["data"]["statut"] == "approved"


def test_refusal_wins(client, auth_headers, make_employee):
    employee = make_employee(manager2_email="manager2@example.com")
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]

    client.patch(f"/api/demandes/{demande_id}/approval", headers=auth_headers,
                 json={"manager": 1, "approved": True})
    response = client.patch(f"/api/demandes/{demande_id}/approval", headers=auth_headers,
                            json={"manager": 2, "approved": False, "comment": "Periode chargee"})
    data = response.get_json()["data"]
    assert data["statut"] == "refused"
    assert data["commentaire_refus"] == "Periode chargee"


def test_second_manager_decision_without_second_manager(client, auth_headers, make_employee):
    employee = make_employee(manager2_email=None)
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]
    response = client.patch(f"/api/demandes/{demande_id}/approval", headers=auth_headers,
                            json={"manager": 2, "approved": True})
    assert response.status_code == 400


def test_update_rederives_status(client, auth_headers, make_employee):
    employee = make_employee(manager2_email="manager2@example.com")
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]

    response = client.put(f"/api/demandes/{demande_id}", headers=auth_headers,
                          json={"approuve_responsable1": True, "approuve_responsable2": True})
    assert response.get_json()["data"]["statut"] == "approved"


def test_explicit_in_progress_status(client, auth_headers, make_employee):
    employee = make_employee()
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]
    response = client.put(f"/api/demandes/{demande_id}/statut", headers=auth_headers,
                          json={"statut": "in_progress"})
    assert response.get_json()["data"]["statut"] == "in_progress"


def test_list_filters_pagination_and_stats(client, auth_headers, make_employee):
    employee = make_employee()
    for _ in range(3):
        _create(client, auth_headers, employee)
    _create(client, auth_headers, employee, type_demande="absence")

    response = client.get("/api/demandes?type_demande=leave&page=1&limit=2", headers=auth_headers)
    data = response.get_json()["data"]
    assert len(data["demandes"]) == 2
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    stats = client.get("/api/demandes/stats/general", headers=auth_headers).get_json()["data"]
    assert stats["total"] == 4
    assert stats["par_type"]["leave"] == 3
    assert stats["par_type"]["absence"] == 1
    assert stats["par_statut"]["pending"] == 4


def test_delete_demande(client, auth_headers, make_employee):
    employee = make_employee()
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]
    assert client.delete(f"/api/demandes/{demande_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/demandes/{demande_id}", headers=auth_headers).status_code == 404


def test_null_request_type_rejected_by_name(client, auth_headers, make_employee):
    employee = make_employee()
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]
    response = client.put(f"/api/demandes/{demande_id}", headers=auth_headers, json={"type_demande": None})
    assert response.status_code == 400
    assert "type_demande" in response.get_json()["errors"]["fields"]
    assert client.get(f"/api/demandes/{demande_id}", headers=auth_headers).get_json()["data"]["type_demande"] == "leave"


def test_update_cannot_use_missing_second_manager(client, auth_headers, make_employee):
    employee = make_employee(manager2_email=None)
    demande_id = _create(client, auth_headers, employee).get_json()["data"]["id"]

    response = client.put(f"/api/demandes/{demande_id}", headers=auth_headers,
                          json={"approuve_responsable2": False})
    assert response.status_code == 400
    assert response.get_json()["errors"] == {"field": "approuve_responsable2"}

    data = client.get(f"/api/demandes/{demande_id}", headers=auth_headers).get_json()["data"]
    assert data["statut"] == "pending"
    assert data["approuve_responsable2"] is None


def test_create_cannot_use_missing_second_manager(client, auth_headers, make_employee):
    employee = make_employee(manager2_email=None)
    response = _create(client, auth_headers, employee, approuve_responsable2=False)
    assert response.status_code == 400
    assert response.get_json()["errors"] == {"field": "approuve_responsable2"}

    listing = client.get("/api/demandes", headers=auth_headers).get_json()["data"]
    assert listing["pagination"]["total"] == 0


def test_create_with_both_managers_decided(client, auth_headers, make_employee):
    employee = make_employee(manager2_email="manager2@example.com")
    response = _create(client, auth_headers, employee,
                       approuve_responsable1=True, approuve_responsable2=True)
    assert response.status_code == 201
    assert response.get_json()["data"]["statut"] == "approved"
