from flask import Blueprint

from schemas import AttestationIn, InvitationIn, OrdreMissionIn
from services import visa_service
from services.document_generator import KIND_ATTESTATION, KIND_INVITATION, KIND_ORDRE_MISSION
from utils.decorators import token_required
from utils.responses import ok
from utils.validators import parse_body

documents_bp = Blueprint("documents", __name__)


def _generate(kind, schema):
    body = parse_body(schema)
    fields = body.model_dump(exclude={"employee_id", "document_id"})
    document = visa_service.generate_document(kind, body.employee_id, body.document_id, fields)
    return ok("Document generated", document.to_dict(), 201)


@documents_bp.route("/attestation-travail", methods=["POST"])
@token_required
def attestation_travail():
    return _generate(KIND_ATTESTATION, AttestationIn)


@documents_bp.route("/invitation-prise-en-charge", methods=["POST"])
@token_required
def invitation_prise_en_charge():
    return _generate(KIND_INVITATION, InvitationIn)


@documents_bp.route("/ordre-mission", methods=["POST"])
@token_required
def ordre_mission():
    return _generate(KIND_ORDRE_MISSION, OrdreMissionIn)
