from models import db
from models.visa import VisaDocument, VisaDossier
from services.checklist import VISA_CHECKLIST


def _body(employee, **extra):
    body = {
        "employee_id": employee.id,
        "motif": "Salon professionnel",
        "departure_date": "2025-05-01",
        "return_date": "2025-05-08",
    }
    body.update(extra)
    return body


def test_create_dossier_seeds_checklist(client, auth_headers, make_employee, mailer):
    employee = make_employee()
    response = client.post("/api/visa-dossiers", headers=auth_headers, json=_body(employee))
    assert response.status_code == 201
    payload = response.get_json()
    assert payload["emailSent"] is True

    data = payload["data"]
    assert data["status"] == "created"
    assert [d["code"] for d in data["documents"]] == [item.code for item in VISA_CHECKLIST]
    assert all(d["status"] == "MISSING" for d in data["documents"])
    assert data["progress"] == {"completed": 0, "total": len(VISA_CHECKLIST)}

    assert mailer.sent[0]["to"] == employee.email
    assert "Passeport original" in mailer.sent[0]["body"]
    assert "Historique CNSS" in mailer.sent[0]["body"]


def test_return_before_departure_rejected_without_rows(client, auth_headers, make_employee):
    employee = make_employee()
    response = client.post("/api/visa-dossiers", headers=auth_headers,
                           json=_body(employee, return_date="2025-04-01"))
    assert response.status_code == 400
    assert VisaDossier.query.count() == 0
    assert VisaDocument.query.count() == 0


def test_email_failure_keeps_dossier(client, auth_headers, make_employee, mailer):
    mailer.fail = True
    employee = make_employee()
    response = client.post("/api/visa-dossiers", headers=auth_headers, json=_body(employee))
    assert response.status_code == 201
    assert response.get_json()["emailSent"] is False
    assert VisaDossier.query.count() == 1
    assert VisaDocument.query.count() == len(VISA_CHECKLIST)


def test_unknown_employee_404(client, auth_headers):
    response = client.post("/api/visa-dossiers", headers=auth_headers, json={
        "employee_id": 42, "motif": "x", "departure_date": "2025-05-01", "return_date": "2025-05-02",
    })
    assert response.status_code == 404


def test_archived_employee_rejected(client, auth_headers, make_employee):
    employee = make_employee(status="archived")
    response = client.post("/api/visa-dossiers", headers=auth_headers, json=_body(employee))
    assert response.status_code == 400


def test_list_and_get(client, auth_headers, dossier):
    listing = client.get(f"/api/visa-dossiers?employee_id={dossier['employee_id']}", headers=auth_headers)
    assert [d["id"] for d in listing.get_json()["data"]] == [dossier["id"]]

    response = client.get(f"/api/visa-dossiers/{dossier['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert len(response.get_json()["data"]["documents"]) == len(VISA_CHECKLIST)

    assert client.get("/api/visa-dossiers/999", headers=auth_headers).status_code == 404


def test_status_moves_forward_only(client, auth_headers, dossier):
    url = f"/api/visa-dossiers/{dossier['id']}/status"

    response = client.patch(url, headers=auth_headers, json={"status": "submitted"})
    assert response.get_json()["data"]["status"] == "submitted"

    back = client.patch(url, headers=auth_headers, json={"status": "documents_pending"})
    assert back.status_code == 400


def test_approval_records_visa_and_is_final(client, auth_headers, dossier):
    url = f"/api/visa-dossiers/{dossier['id']}/status"
    response = client.patch(url, headers=auth_headers, json={
        "status": "approved",
        "visa_number": "SCH-123",
        "visa_valid_from": "2025-04-25",
        "visa_valid_until": "2025-05-25",
    })
    data = response.get_json()["data"]
    assert data["status"] == "approved"
    assert data["visa_number"] == "SCH-123"

    again = client.patch(url, headers=auth_headers, json={"status": "rejected"})
    assert again.status_code == 400


def test_visa_fields_need_approval(client, auth_headers, dossier):
    response = client.patch(f"/api/visa-dossiers/{dossier['id']}/status", headers=auth_headers,
                            json={"status": "submitted", "visa_number": "X"})
    assert response.status_code == 400
    assert db.session.get(VisaDossier, dossier["id"]).status == "created"
