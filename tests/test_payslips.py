import io

from pypdf import PdfReader

from conftest import make_pdf
from models import db
from models.payslip import Payslip
from services.payslip_service import extract_matricule
from services.storage import NAMESPACE_PAYSLIPS

PATTERN = r"Matricule\s*[:\-]?\s*([A-Z0-9\-]+)"


def test_extract_matricule():
    assert extract_matricule("Bulletin de paie\nMatricule : m001\nNet", PATTERN) == "M001"
    assert extract_matricule("Matricule-A-77", PATTERN) == "A-77"
    assert extract_matricule("Aucun identifiant", PATTERN) is None


def _post(client, headers, pdf, **form):
    data = {"period": "2025-01", "payslipsFile": (io.BytesIO(pdf), "paie.pdf", "application/pdf")}
    data.update(form)
    return client.post("/api/payslips/distribute", headers=headers, data=data,
                       content_type="multipart/form-data")


def test_distribute_matches_pages(app, client, auth_headers, make_employee, mailer):
    first = make_employee(matricule="M001")
    second = make_employee(matricule="M002")
    pdf = make_pdf("Matricule : M002", "Matricule : X999", "Matricule : M001")

    response = _post(client, auth_headers, pdf)
    assert response.status_code == 200
    data = response.get_json()["data"]

    matched = {p["employee_id"]: p["page_number"] for p in data["matched"]}
    assert matched == {second.id: 1, first.id: 3}
    assert data["unmatched"] == [{"page": 2, "matricule": "X999"}]
    assert data["emailsSent"] == 0
    assert mailer.sent == []

    payslip = Payslip.query.filter_by(employee_id=first.id).one()
    content = app.extensions["storage"].read_bytes(NAMESPACE_PAYSLIPS, payslip.stored_filename)
    pages = PdfReader(io.BytesIO(content)).pages
    assert len(pages) == 1
    assert "M001" in pages[0].extract_text()


def test_distribute_with_email(client, auth_headers, make_employee, mailer):
    employee = make_employee(matricule="M001")
    response = _post(client, auth_headers, make_pdf("Matricule : M001"), send_email="true")
    assert response.get_json()["data"]["emailsSent"] == 1

    message = mailer.sent[0]
    assert message["to"] == employee.email
    filename, content = message["attachments"][0]
    assert filename == "fiche_paie_M001_2025-01.pdf"
    assert content.startswith(b"%PDF-")
    assert Payslip.query.one().emailed_at is not None


def test_distribute_rejects_bad_input(client, auth_headers):
    assert _post(client, auth_headers, make_pdf("x"), period="janvier").status_code == 400
    assert _post(client, auth_headers, b"plain text").status_code == 400

    response = client.post("/api/payslips/distribute", headers=auth_headers,
                           data={"period": "2025-01"}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["errors"] == {"field": "payslipsFile"}


def test_list_payslips(client, auth_headers, make_employee):
    employee = make_employee(matricule="M001")
    _post(client, auth_headers, make_pdf("Matricule : M001"))

    response = client.get(f"/api/payslips?employee_id={employee.id}&period=2025-01", headers=auth_headers)
    rows = response.get_json()["data"]
    assert len(rows) == 1
    assert rows[0]["file_url"].startswith("/files/payslips/")
    assert db.session.query(Payslip).count() == 1
