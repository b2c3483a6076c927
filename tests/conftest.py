import io
from datetime import date

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app import create_app
from models import db
from models.employee import Employee
from models.user import User
from utils.auth_utils import hash_password


class RecordingMailer:
    """Stands in for SmtpMailer; set `fail = True` to simulate a relay outage."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to_email, subject, body, attachments=None):
        if self.fail or not to_email:
            return False
        self.sent.append({
            "to": to_email,
            "subject": subject,
            "body": body,
            "attachments": list(attachments or ()),
        })
        return True


def make_pdf(*pages):
    """Build a small PDF, one page per text argument."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    for text in pages or ("page",):
        c.drawString(72, 750, text)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture(scope="function")
def app(tmp_path, mailer):
    """Isolated database and storage folder for each test."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SECRET_KEY": "test-secret-key",
        "STORAGE_FOLDER": str(tmp_path / "storage"),
        "LOG_FOLDER": str(tmp_path / "logs"),
        "BACKOFFICE_EMAIL": "backoffice@example.com",
        "HR_ALERT_EMAIL": "rh@example.com",
        "FRONTEND_URL": "http://frontend.test",
        "CONTRACT_ALERTS_ENABLED": False,
    }, mailer=mailer)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    u = User(email="admin@example.com", password=hash_password("secret123"))
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def auth_headers(client, user):
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "secret123"})
    token = response.get_json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_employee(app):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        data = dict(
            matricule=f"M{n:03d}",
            last_name=f"Nom{n}",
            first_name=f"Prenom{n}",
            cin=f"0000{n:04d}",
            birth_date=date(1990, 1, 1),
            passport_number=f"P{n:06d}",
            position="Developpeur",
            site="Tunis",
            contract_type="CDI",
            contract_start_date=date(2020, 1, 1),
            gross_salary=2500,
            email=f"employe{n}@example.com",
            manager1_email="manager1@example.com",
        )
        data.update(overrides)
        employee = Employee(**data)
        db.session.add(employee)
        db.session.commit()
        return employee

    return _make


@pytest.fixture
def dossier(client, auth_headers, make_employee):
    employee = make_employee()
    response = client.post("/api/visa-dossiers", headers=auth_headers, json={
        "employee_id": employee.id,
        "motif": "Mission client",
        "departure_date": "2025-03-01",
        "return_date": "2025-03-10",
    })
    assert response.status_code == 201
    return response.get_json()["data"]


def document_by_code(dossier_data, code):
    return next(d for d in dossier_data["documents"] if d["code"] == code)


def pdf_upload(content, filename="document.pdf", mimetype="application/pdf"):
    return {"pdfFile": (io.BytesIO(content), filename, mimetype)}
