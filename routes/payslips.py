from flask import Blueprint, current_app, request

from models.payslip import Payslip
from schemas import PayslipDistributionIn
from services import payslip_service
from services.pdf_merge import PDF_MIMETYPE, is_pdf_bytes
from utils.decorators import token_required
from utils.errors import ValidationError
from utils.responses import ok
from utils.validators import parse_form

payslips_bp = Blueprint("payslips", __name__)


@payslips_bp.route("/distribute", methods=["POST"])
@token_required
def distribute():
    body = parse_form(PayslipDistributionIn)
    upload = request.files.get("payslipsFile")
    if upload is None or not upload.filename:
        raise ValidationError("payslipsFile is required", field="payslipsFile")

    data = upload.read()
    if upload.mimetype != PDF_MIMETYPE or not is_pdf_bytes(data):
        raise ValidationError("Only PDF files are accepted", field="payslipsFile")

    payslips, unmatched, emails_sent = payslip_service.distribute(
        data,
        body.period,
        current_app.config["PAYSLIP_MATRICULE_PATTERN"],
        send_email=body.send_email,
    )
    return ok("Payslips distributed", {
        "period": body.period,
        "matched": [p.to_dict() for p in payslips],
        "unmatched": unmatched,
        "emailsSent": emails_sent,
    })


@payslips_bp.route("", methods=["GET"])
@token_required
def list_payslips():
    query = Payslip.query
    employee_id = request.args.get("employee_id", type=int)
    if employee_id:
        query = query.filter(Payslip.employee_id == employee_id)
    if request.args.get("period"):
        query = query.filter(Payslip.period == request.args["period"])

    rows = query.order_by(Payslip.period.desc(), Payslip.page_number.asc()).all()
    return ok("Payslips", [p.to_dict() for p in rows])
