from flask import Blueprint

from schemas import DossierEmailIn
from services import visa_service
from utils.decorators import token_required
from utils.responses import fail, ok
from utils.validators import parse_body

email_bp = Blueprint("email", __name__)


@email_bp.route("/assurance", methods=["POST"])
@token_required
def request_insurance():
    body = parse_body(DossierEmailIn)
    if not visa_service.request_insurance(body.dossier_id):
        return fail("Failed to send email", 500, emailSent=False)
    return ok("Insurance request sent", emailSent=True)


@email_bp.route("/billet", methods=["POST"])
@token_required
def request_ticket():
    body = parse_body(DossierEmailIn)
    if not visa_service.request_ticket(body.dossier_id):
        return fail("Failed to send email", 500, emailSent=False)
    return ok("Ticket request sent", emailSent=True)
