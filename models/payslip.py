from datetime import datetime
from models import db


class Payslip(db.Model):
    """One distributed payslip page, matched to an employee by matricule."""
    __tablename__ = "payslips"
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    period = db.Column(db.String(7), nullable=False)   # YYYY-MM
    matricule = db.Column(db.String(50), nullable=False)
    page_number = db.Column(db.Integer, nullable=False)
    file_url = db.Column(db.String(500), nullable=False)
    stored_filename = db.Column(db.String(255), nullable=False)
    emailed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    employee = db.relationship("Employee", backref="payslips")

    def to_dict(self):
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "period": self.period,
            "matricule": self.matricule,
            "page_number": self.page_number,
            "file_url": self.file_url,
            "emailed_at": self.emailed_at.isoformat() if self.emailed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
