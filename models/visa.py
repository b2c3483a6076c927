from datetime import datetime
from models import db

# Dossier workflow, in order. approved / rejected are terminal.
DOSSIER_CREATED = "created"
DOSSIER_DOCUMENTS_PENDING = "documents_pending"
DOSSIER_SUBMITTED = "submitted"
DOSSIER_APPROVED = "approved"
DOSSIER_REJECTED = "rejected"

DOSSIER_STATUS_RANK = {
    DOSSIER_CREATED: 0,
    DOSSIER_DOCUMENTS_PENDING: 1,
    DOSSIER_SUBMITTED: 2,
    DOSSIER_APPROVED: 3,
    DOSSIER_REJECTED: 3,
}
DOSSIER_TERMINAL = {DOSSIER_APPROVED, DOSSIER_REJECTED}

# Checklist item modes
MODE_UPLOAD = "UPLOAD"
MODE_PHYSICAL = "PHYSICAL"

# Checklist item statuses
DOC_MISSING = "MISSING"
DOC_UPLOADED = "UPLOADED"
DOC_RECEIVED_PHYSICAL = "RECEIVED_PHYSICAL"

# Statuses each mode may reach besides MISSING
DOC_STATUS_FOR_MODE = {
    MODE_UPLOAD: DOC_UPLOADED,
    MODE_PHYSICAL: DOC_RECEIVED_PHYSICAL,
}


class VisaDossier(db.Model):
    __tablename__ = "visa_dossiers"
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    motif = db.Column(db.String(255), nullable=False)
    departure_date = db.Column(db.Date, nullable=False)
    return_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(30), nullable=False, default=DOSSIER_CREATED)

    # Set once a decision is made
    visa_number = db.Column(db.String(100))
    visa_valid_from = db.Column(db.Date)
    visa_valid_until = db.Column(db.Date)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    documents = db.relationship(
        "VisaDocument",
        backref="dossier",
        lazy=True,
        cascade="all, delete-orphan",
        order_by=lambda: [VisaDocument.created_at, VisaDocument.id],
    )

    __table_args__ = (
        db.CheckConstraint("return_date >= departure_date", name="ck_visa_dossier_dates"),
    )

    def to_dict(self, with_documents=False):
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "motif": self.motif,
            "departure_date": _iso(self.departure_date),
            "return_date": _iso(self.return_date),
            "status": self.status,
            "visa_number": self.visa_number,
            "visa_valid_from": _iso(self.visa_valid_from),
            "visa_valid_until": _iso(self.visa_valid_until),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if self.employee is not None:
            data["employee_name"] = self.employee.full_name
        if with_documents:
            data["documents"] = [d.to_dict() for d in self.documents]
        return data


class VisaDocument(db.Model):
    __tablename__ = "visa_documents"
    id = db.Column(db.Integer, primary_key=True)
    dossier_id = db.Column(db.Integer, db.ForeignKey("visa_dossiers.id"), nullable=False, index=True)

    code = db.Column(db.String(50), nullable=False)     # key in the checklist template
    label = db.Column(db.String(255), nullable=False)
    mode = db.Column(db.String(20), nullable=False)     # UPLOAD / PHYSICAL
    status = db.Column(db.String(30), nullable=False, default=DOC_MISSING)

    # UPLOAD items only
    file_url = db.Column(db.String(500))
    storage_namespace = db.Column(db.String(20))
    stored_filename = db.Column(db.String(255))
    original_filename = db.Column(db.String(255))
    content_type = db.Column(db.String(100))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint("dossier_id", "code", name="uq_visa_document_code"),)

    def to_dict(self):
        return {
            "id": self.id,
            "dossier_id": self.dossier_id,
            "code": self.code,
            "label": self.label,
            "mode": self.mode,
            "status": self.status,
            "file_url": self.file_url,
            "original_filename": self.original_filename,
            "content_type": self.content_type,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


def _iso(value):
    return value.isoformat() if value else None
