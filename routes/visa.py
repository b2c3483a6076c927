import io

from flask import Blueprint, request, send_file

from models.visa import VisaDossier, DOSSIER_STATUS_RANK
from schemas import DossierStatusIn, VisaDocumentPatch, VisaDossierIn
from services import visa_service
from utils.decorators import token_required
from utils.errors import ValidationError
from utils.responses import ok
from utils.validators import parse_body

visa_bp = Blueprint("visa", __name__)


def _dossier_payload(dossier):
    data = dossier.to_dict(with_documents=True)
    data["progress"] = visa_service.checklist_progress(dossier)
    return data


# -----------------------------
# Dossiers
# -----------------------------
@visa_bp.route("/visa-dossiers", methods=["POST"])
@token_required
def create_dossier():
    body = parse_body(VisaDossierIn)
    dossier, email_sent = visa_service.create_dossier(
        body.employee_id, body.motif, body.departure_date, body.return_date
    )
    message = "Visa dossier created" if email_sent else "Visa dossier created, email not sent"
    return ok(message, _dossier_payload(dossier), 201, emailSent=email_sent)


@visa_bp.route("/visa-dossiers", methods=["GET"])
@token_required
def list_dossiers():
    query = VisaDossier.query
    employee_id = request.args.get("employee_id", type=int)
    if employee_id:
        query = query.filter(VisaDossier.employee_id == employee_id)
    status = request.args.get("status")
    if status:
        if status not in DOSSIER_STATUS_RANK:
            raise ValidationError(f"Unknown dossier status '{status}'", field="status")
        query = query.filter(VisaDossier.status == status)

    rows = query.order_by(VisaDossier.created_at.desc(), VisaDossier.id.desc()).all()
    data = []
    for dossier in rows:
        item = dossier.to_dict()
        item["progress"] = visa_service.checklist_progress(dossier)
        data.append(item)
    return ok("Visa dossiers", data)


@visa_bp.route("/visa-dossiers/<int:dossier_id>", methods=["GET"])
@token_required
def get_dossier(dossier_id):
    return ok("Visa dossier", _dossier_payload(visa_service.get_dossier_or_404(dossier_id)))


@visa_bp.route("/visa-dossiers/<int:dossier_id>/status", methods=["PATCH"])
@token_required
def change_status(dossier_id):
    body = parse_body(DossierStatusIn)
    dossier = visa_service.change_dossier_status(
        dossier_id,
        body.status,
        visa_number=body.visa_number,
        visa_valid_from=body.visa_valid_from,
        visa_valid_until=body.visa_valid_until,
    )
    return ok("Dossier status updated", _dossier_payload(dossier))


# No token: the merged PDF is opened straight from the browser
@visa_bp.route("/visa-dossiers/<int:dossier_id>/dossier-pdf", methods=["GET"])
def dossier_pdf(dossier_id):
    pdf = visa_service.build_dossier_pdf(dossier_id)
    return send_file(
        io.BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=False,
        download_name=f"dossier_visa_{dossier_id}.pdf",
    )


# -----------------------------
# Checklist documents
# -----------------------------
@visa_bp.route("/visa-documents/<int:document_id>/upload", methods=["POST"])
@token_required
def upload_document(document_id):
    document = visa_service.upload_document(document_id, request.files.get("pdfFile"))
    return ok("Document uploaded", document.to_dict())


@visa_bp.route("/visa-documents/<int:document_id>", methods=["PATCH"])
@token_required
def patch_document(document_id):
    body = parse_body(VisaDocumentPatch)
    document = visa_service.set_document_status(document_id, body.status)
    return ok("Document updated", document.to_dict())
