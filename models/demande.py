from datetime import datetime
from models import db

# Request types
TYPE_LEAVE = "leave"
TYPE_ABSENCE = "absence"
TYPE_TRAVEL_EXPENSE = "travel_expense"
TYPE_OTHER = "other"
REQUEST_TYPES = (TYPE_LEAVE, TYPE_ABSENCE, TYPE_TRAVEL_EXPENSE, TYPE_OTHER)

# Lifecycle
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REFUSED = "refused"
STATUS_IN_PROGRESS = "in_progress"
REQUEST_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REFUSED, STATUS_IN_PROGRESS)


class LeaveRequest(db.Model):
    __tablename__ = 'demande_rh'
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    request_type = db.Column(db.String(30), nullable=False)
    title = db.Column(db.String(255))

    leave_type = db.Column(db.String(50))
    leave_type_other = db.Column(db.String(255))
    start_date = db.Column(db.Date)
    return_date = db.Column(db.Date)
    start_time = db.Column(db.String(5))    # HH:MM
    return_time = db.Column(db.String(5))   # HH:MM
    half_day = db.Column(db.Boolean, default=False)
    travel_expenses = db.Column(db.Numeric(10, 2))

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)
    # None = no decision yet
    approval_manager1 = db.Column(db.Boolean, nullable=True)
    approval_manager2 = db.Column(db.Boolean, nullable=True)
    refusal_comment = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "type_demande": self.request_type,
            "titre": self.title,
            "type_conge": self.leave_type,
            "type_conge_autre": self.leave_type_other,
            "date_depart": self.start_date.isoformat() if self.start_date else None,
            "date_retour": self.return_date.isoformat() if self.return_date else None,
            "heure_depart": self.start_time,
            "heure_retour": self.return_time,
            "demi_journee": bool(self.half_day),
            "frais_deplacement": float(self.travel_expenses) if self.travel_expenses is not None else None,
            "statut": self.status,
            "approuve_responsable1": self.approval_manager1,
            "approuve_responsable2": self.approval_manager2,
            "commentaire_refus": self.refusal_comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if self.employee is not None:
            data.update({
                "nom": self.employee.last_name,
                "prenom": self.employee.first_name,
                "poste": self.employee.position,
                "photo": self.employee.photo,
            })
        return data
