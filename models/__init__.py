# models/__init__.py
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Import all models
from .user import User
from .employee import Employee
from .demande import LeaveRequest
from .visa import VisaDossier, VisaDocument
from .payslip import Payslip
