from routes.auth import auth_bp
from routes.demandes import demandes_bp
from routes.documents import documents_bp
from routes.email import email_bp
from routes.employees import employees_bp
from routes.files import files_bp
from routes.payslips import payslips_bp
from routes.visa import visa_bp

# (blueprint, url prefix)
BLUEPRINTS = (
    (auth_bp, "/api/auth"),
    (employees_bp, "/api/employees"),
    (demandes_bp, "/api/demandes"),
    (visa_bp, "/api"),
    (documents_bp, "/api"),
    (email_bp, "/api/email"),
    (payslips_bp, "/api/payslips"),
    (files_bp, "/files"),
)
