from datetime import datetime
from models import db

STATUS_ACTIVE = "active"
STATUS_ARCHIVED = "archived"


class Employee(db.Model):
    __tablename__ = 'employees'
    id = db.Column(db.Integer, primary_key=True)
    matricule = db.Column(db.String(50), unique=True, nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    cin = db.Column(db.String(50), unique=True, nullable=False)
    birth_date = db.Column(db.Date)

    # Passport (needed for visa documents)
    passport_number = db.Column(db.String(100))
    passport_issue_date = db.Column(db.Date)
    passport_expiry_date = db.Column(db.Date)

    position = db.Column(db.String(100), nullable=False)
    site = db.Column(db.String(100), nullable=False)
    contract_type = db.Column(db.String(50), nullable=False)   # CDI / CDD / SIVP ...
    contract_start_date = db.Column(db.Date, nullable=False)
    contract_end_date = db.Column(db.Date)
    gross_salary = db.Column(db.Numeric(10, 2), nullable=False)

    email = db.Column(db.String(255), unique=True)
    manager1_email = db.Column(db.String(255))
    manager2_email = db.Column(db.String(255))

    photo = db.Column(db.String(500))
    hr_file = db.Column(db.String(500))

    status = db.Column(db.String(20), default=STATUS_ACTIVE)
    departure_date = db.Column(db.Date)
    exit_interview = db.Column(db.Text)

    # Stamped by the contract-end sweep (7 day de-duplication window)
    last_contract_alert = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    leave_requests = db.relationship('LeaveRequest', backref='employee', lazy=True)
    visa_dossiers = db.relationship('VisaDossier', backref='employee', lazy=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def has_second_manager(self):
        return bool((self.manager2_email or "").strip())

    def to_dict(self):
        return {
            "id": self.id,
            "matricule": self.matricule,
            "last_name": self.last_name,
            "first_name": self.first_name,
            "full_name": self.full_name,
            "cin": self.cin,
            "birth_date": _iso(self.birth_date),
            "passport_number": self.passport_number,
            "passport_issue_date": _iso(self.passport_issue_date),
            "passport_expiry_date": _iso(self.passport_expiry_date),
            "position": self.position,
            "site": self.site,
            "contract_type": self.contract_type,
            "contract_start_date": _iso(self.contract_start_date),
            "contract_end_date": _iso(self.contract_end_date),
            "gross_salary": float(self.gross_salary) if self.gross_salary is not None else None,
            "email": self.email,
            "manager1_email": self.manager1_email,
            "manager2_email": self.manager2_email,
            "photo": self.photo,
            "hr_file": self.hr_file,
            "status": self.status or STATUS_ACTIVE,
            "departure_date": _iso(self.departure_date),
            "exit_interview": self.exit_interview,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


def _iso(value):
    return value.isoformat() if value else None
