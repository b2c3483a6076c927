import io
import logging
import os
import re
from collections import namedtuple
from datetime import date

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from services.checklist import ATTESTATION_TRAVAIL, INVITATION_PRISE_EN_CHARGE, ORDRE_MISSION
from utils.errors import DocumentTemplateError, ValidationError

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

DocumentKind = namedtuple("DocumentKind", "code title template employee_fields")

KIND_ATTESTATION = "attestation_travail"
KIND_INVITATION = "invitation_prise_en_charge"
KIND_ORDRE_MISSION = "ordre_mission"

DOCUMENT_KINDS = {
    KIND_ATTESTATION: DocumentKind(
        code=ATTESTATION_TRAVAIL,
        title="ATTESTATION DE TRAVAIL",
        template="attestation_travail.txt",
        employee_fields=("last_name", "first_name", "cin", "matricule", "position", "contract_start_date"),
    ),
    KIND_INVITATION: DocumentKind(
        code=INVITATION_PRISE_EN_CHARGE,
        title="INVITATION ET PRISE EN CHARGE",
        template="invitation_prise_en_charge.txt",
        employee_fields=("last_name", "first_name", "passport_number", "position"),
    ),
    KIND_ORDRE_MISSION: DocumentKind(
        code=ORDRE_MISSION,
        title="ORDRE DE MISSION",
        template="ordre_mission.txt",
        employee_fields=("last_name", "first_name", "cin", "matricule", "position"),
    ),
}


def _fmt_date(d):
    return d.strftime("%d/%m/%Y") if d else ""


class DocumentGenerator:
    """Fills the administrative letter templates and renders them as PDF."""

    def __init__(self, template_folder, company_name="", company_address="", company_city=""):
        self.template_folder = template_folder
        self.company_name = company_name
        self.company_address = company_address
        self.company_city = company_city

    def load_template(self, kind):
        path = os.path.join(self.template_folder, DOCUMENT_KINDS[kind].template)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            logger.error("Document template missing: %s", path)
            raise DocumentTemplateError(f"Document template for '{kind}' is not configured")

    def build_context(self, kind, employee, dossier, fields=None):
        kind_info = DOCUMENT_KINDS[kind]
        for name in kind_info.employee_fields:
            value = getattr(employee, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(
                    f"Employee field '{name}' is required to generate {kind_info.title.lower()}",
                    field=name,
                )

        context = {
            "company_name": self.company_name,
            "company_address": self.company_address,
            "place": self.company_city,
            "today": _fmt_date(date.today()),
            "last_name": employee.last_name,
            "first_name": employee.first_name,
            "full_name": employee.full_name,
            "matricule": employee.matricule or "",
            "cin": employee.cin or "",
            "birth_date": _fmt_date(employee.birth_date),
            "position": employee.position or "",
            "contract_type": employee.contract_type or "",
            "contract_start_date": _fmt_date(employee.contract_start_date),
            "passport_number": employee.passport_number or "",
            "passport_expiry_date": _fmt_date(employee.passport_expiry_date),
            "motif": dossier.motif,
            "departure_date": _fmt_date(dossier.departure_date),
            "return_date": _fmt_date(dossier.return_date),
            "signatory": "La Direction des Ressources Humaines",
            "host_organisation": self.company_name,
        }
        for key, value in (fields or {}).items():
            if value is None:
                continue
            context[key] = _fmt_date(value) if isinstance(value, date) else str(value)
        return context

    def render_text(self, kind, context):
        template = self.load_template(kind)

        def _sub(match):
            key = match.group(1)
            if key not in context:
                raise DocumentTemplateError(f"Unknown placeholder '{key}' in template '{kind}'")
            return str(context[key])

        return PLACEHOLDER_RE.sub(_sub, template)

    def render_pdf(self, title, text):
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)
        width, height = A4
        margin = 60
        y = height - 60

        if self.company_name:
            c.setFont("Helvetica-Bold", 12)
            c.drawString(margin, y, self.company_name)
            y -= 30

        c.setFont("Helvetica-Bold", 14)
        c.drawCentredString(width / 2, y, title)
        y -= 40

        c.setFont("Helvetica", 11)
        for paragraph in text.splitlines():
            lines = simpleSplit(paragraph, "Helvetica", 11, width - 2 * margin) or [""]
            for line in lines:
                c.drawString(margin, y, line)
                y -= 16
                if y < 70:
                    c.showPage()
                    c.setFont("Helvetica", 11)
                    y = height - 60

        c.showPage()
        c.save()
        return buf.getvalue()

    def generate(self, kind, employee, dossier, fields=None):
        """Return (pdf bytes, download filename) for one document kind."""
        context = self.build_context(kind, employee, dossier, fields)
        text = self.render_text(kind, context)
        filename = f"{kind}_{employee.matricule}.pdf"
        return self.render_pdf(DOCUMENT_KINDS[kind].title, text), filename
