import logging
from datetime import date
from urllib.parse import quote_plus

from flask import Blueprint, request
from sqlalchemy import or_

from models import db
from models.employee import Employee, STATUS_ACTIVE, STATUS_ARCHIVED
from schemas import ArchiveIn, EmployeeIn, EmployeeUpdate
from services.visa_service import get_employee_or_404
from utils.decorators import token_required
from utils.errors import ValidationError
from utils.responses import ok
from utils.validators import parse_body

logger = logging.getLogger(__name__)

employees_bp = Blueprint("employees", __name__)


def avatar_url(first_name, last_name):
    name = quote_plus(f"{first_name or ''} {last_name or ''}".strip() or "RH")
    return f"https://ui-avatars.com/api/?name={name}&background=random"


def _valid_photo(value):
    return bool(value) and value.startswith(("http://", "https://", "/files/"))


def _active_filter():
    return or_(Employee.status == STATUS_ACTIVE, Employee.status.is_(None))


@employees_bp.route("", methods=["GET"])
@token_required
def list_employees():
    rows = (
        Employee.query.filter(_active_filter())
        .order_by(Employee.last_name.asc(), Employee.first_name.asc())
        .all()
    )
    return ok("Employees", [e.to_dict() for e in rows])


@employees_bp.route("/archives", methods=["GET"])
@token_required
def list_archives():
    rows = (
        Employee.query.filter(Employee.status == STATUS_ARCHIVED)
        .order_by(Employee.departure_date.desc(), Employee.id.desc())
        .all()
    )
    return ok("Archived employees", [e.to_dict() for e in rows])


@employees_bp.route("/search", methods=["GET"])
@token_required
def search_employees():
    q = (request.args.get("q") or "").strip()
    statut = request.args.get("statut", STATUS_ACTIVE)

    query = Employee.query
    if statut == STATUS_ARCHIVED:
        query = query.filter(Employee.status == STATUS_ARCHIVED)
    else:
        query = query.filter(_active_filter())

    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Employee.last_name.ilike(like),
            Employee.first_name.ilike(like),
            Employee.position.ilike(like),
        ))

    rows = query.order_by(Employee.last_name.asc(), Employee.first_name.asc()).all()
    return ok("Search results", [e.to_dict() for e in rows])


@employees_bp.route("/<int:employee_id>", methods=["GET"])
@token_required
def get_employee(employee_id):
    return ok("Employee", get_employee_or_404(employee_id).to_dict())


@employees_bp.route("", methods=["POST"])
@token_required
def create_employee():
    body = parse_body(EmployeeIn)
    data = body.model_dump()
    if not _valid_photo(data.get("photo")):
        data["photo"] = avatar_url(body.first_name, body.last_name)

    employee = Employee(status=STATUS_ACTIVE, **data)
    db.session.add(employee)
    # IntegrityError (duplicate matricule / cin / email) goes to the app handler
    db.session.commit()
    logger.info("Employee %s created (matricule %s)", employee.id, employee.matricule)
    return ok("Employee created", employee.to_dict(), 201)


@employees_bp.route("/<int:employee_id>", methods=["PUT"])
@token_required
def update_employee(employee_id):
    employee = get_employee_or_404(employee_id)
    body = parse_body(EmployeeUpdate)
    changes = body.model_dump(exclude_unset=True)

    if "photo" in changes and not _valid_photo(changes["photo"]):
        changes["photo"] = avatar_url(
            changes.get("first_name", employee.first_name),
            changes.get("last_name", employee.last_name),
        )

    for field, value in changes.items():
        setattr(employee, field, value)

    start, end = employee.contract_start_date, employee.contract_end_date
    if start and end and end < start:
        db.session.rollback()
        raise ValidationError("contract_end_date must not be before contract_start_date", field="contract_end_date")

    db.session.commit()
    return ok("Employee updated", employee.to_dict())


@employees_bp.route("/<int:employee_id>/archive", methods=["PUT"])
@token_required
def archive_employee(employee_id):
    employee = get_employee_or_404(employee_id)
    body = parse_body(ArchiveIn)

    employee.status = STATUS_ARCHIVED
    employee.departure_date = date.today()
    if body.exit_interview is not None:
        employee.exit_interview = body.exit_interview
    db.session.commit()
    logger.info("Employee %s archived", employee.id)
    return ok("Employee archived", employee.to_dict())
