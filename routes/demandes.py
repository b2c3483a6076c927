import logging
from datetime import date

from flask import Blueprint, request

from models import db
from models.demande import LeaveRequest, REQUEST_STATUSES, REQUEST_TYPES, STATUS_PENDING, STATUS_REFUSED
from schemas import ApprovalIn, DemandeIn, DemandeStatusIn, DemandeUpdate
from services.leave_status import derive_status
from services.visa_service import get_employee_or_404
from utils.decorators import token_required
from utils.errors import NotFoundError, ValidationError
from utils.responses import ok, pagination
from utils.validators import parse_body

logger = logging.getLogger(__name__)

demandes_bp = Blueprint("demandes", __name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def get_demande_or_404(demande_id):
    demande = db.session.get(LeaveRequest, demande_id)
    if not demande:
        raise NotFoundError("Request not found")
    return demande


def _arg_int(name, default):
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", field=name)


def _arg_date(name):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{name} must use the YYYY-MM-DD format", field=name)


def _rederive(demande):
    demande.status = derive_status(
        demande.approval_manager1,
        demande.approval_manager2,
        demande.employee.has_second_manager,
    )


def _check_second_manager(employee, approval2):
    if approval2 is not None and not employee.has_second_manager:
        raise ValidationError("This employee has no second manager", field="approuve_responsable2")


def _check_dates(demande):
    if demande.start_date and demande.return_date and demande.return_date < demande.start_date:
        raise ValidationError("date_retour must not be before date_depart", field="date_retour")


@demandes_bp.route("", methods=["GET"])
@token_required
def list_demandes():
    page = max(1, _arg_int("page", 1))
    limit = min(MAX_LIMIT, max(1, _arg_int("limit", DEFAULT_LIMIT)))

    query = LeaveRequest.query
    if request.args.get("type_demande"):
        query = query.filter(LeaveRequest.request_type == request.args["type_demande"])
    if request.args.get("statut"):
        query = query.filter(LeaveRequest.status == request.args["statut"])
    employee_id = _arg_int("employee_id", None)
    if employee_id:
        query = query.filter(LeaveRequest.employee_id == employee_id)

    date_debut, date_fin = _arg_date("date_debut"), _arg_date("date_fin")
    if date_debut and date_fin:
        query = query.filter(LeaveRequest.start_date.between(date_debut, date_fin))

    total = query.count()
    rows = (
        query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ok("Requests", {
        "demandes": [d.to_dict() for d in rows],
        "pagination": pagination(page, limit, total),
    })


@demandes_bp.route("/stats/general", methods=["GET"])
@token_required
def stats():
    by_status = dict.fromkeys(REQUEST_STATUSES, 0)
    for status, count in db.session.query(LeaveRequest.status, db.func.count(LeaveRequest.id)).group_by(LeaveRequest.status):
        by_status[status] = count

    by_type = dict.fromkeys(REQUEST_TYPES, 0)
    for request_type, count in db.session.query(LeaveRequest.request_type, db.func.count(LeaveRequest.id)).group_by(LeaveRequest.request_type):
        by_type[request_type] = count

    return ok("Statistics", {
        "total": sum(by_status.values()),
        "par_statut": by_status,
        "par_type": by_type,
    })


@demandes_bp.route("/<int:demande_id>", methods=["GET"])
@token_required
def get_demande(demande_id):
    return ok("Request", get_demande_or_404(demande_id).to_dict())


@demandes_bp.route("", methods=["POST"])
@token_required
def create_demande():
    body = parse_body(DemandeIn)
    employee = get_employee_or_404(body.employee_id)
    _check_second_manager(employee, body.approval_manager2)

    demande = LeaveRequest(**body.model_dump(exclude_unset=True))
    demande.employee = employee
    demande.status = STATUS_PENDING
    if demande.approval_manager1 is not None or demande.approval_manager2 is not None:
        _rederive(demande)

    db.session.add(demande)
    db.session.commit()
    logger.info("Request %s (%s) created for employee %s", demande.id, demande.request_type, employee.id)
    return ok("Request created", demande.to_dict(), 201)


@demandes_bp.route("/<int:demande_id>", methods=["PUT"])
@token_required
def update_demande(demande_id):
    demande = get_demande_or_404(demande_id)
    changes = parse_body(DemandeUpdate).model_dump(exclude_unset=True)
    _check_second_manager(demande.employee, changes.get("approval_manager2"))

    for field, value in changes.items():
        setattr(demande, field, value)
    try:
        _check_dates(demande)
    except ValidationError:
        db.session.rollback()
        raise

    if "approval_manager1" in changes or "approval_manager2" in changes:
        _rederive(demande)

    db.session.commit()
    return ok("Request updated", demande.to_dict())


@demandes_bp.route("/<int:demande_id>/statut", methods=["PUT"])
@token_required
def set_status(demande_id):
    demande = get_demande_or_404(demande_id)
    body = parse_body(DemandeStatusIn)

    demande.status = body.status
    if body.refusal_comment is not None:
        demande.refusal_comment = body.refusal_comment
    db.session.commit()
    logger.info("Request %s set to %s", demande.id, demande.status)
    return ok("Status updated", demande.to_dict())


@demandes_bp.route("/<int:demande_id>/approval", methods=["PATCH"])
@token_required
def record_approval(demande_id):
    demande = get_demande_or_404(demande_id)
    body = parse_body(ApprovalIn)

    if body.manager == 2 and not demande.employee.has_second_manager:
        raise ValidationError("This employee has no second manager", field="manager")

    if body.manager == 1:
        demande.approval_manager1 = body.approved
    else:
        demande.approval_manager2 = body.approved
    if body.comment is not None:
        demande.refusal_comment = body.comment

    _rederive(demande)
    db.session.commit()
    if demande.status == STATUS_REFUSED:
        logger.info("Request %s refused by manager %s", demande.id, body.manager)
    return ok("Decision recorded", demande.to_dict())


@demandes_bp.route("/<int:demande_id>", methods=["DELETE"])
@token_required
def delete_demande(demande_id):
    demande = get_demande_or_404(demande_id)
    db.session.delete(demande)
    db.session.commit()
    return ok("Request deleted")
