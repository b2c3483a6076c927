import logging
import re
from datetime import datetime

from pypdf.errors import PdfReadError

from models import db
from models.employee import Employee
from models.payslip import Payslip
from services import get_notifier, get_storage
from services.pdf_merge import split_pages
from services.storage import NAMESPACE_PAYSLIPS
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


def extract_matricule(text, pattern):
    """First matricule found in a page of text, or None."""
    match = re.search(pattern, text or "", flags=re.IGNORECASE)
    if not match:
        return None
    return match.group(1).strip().upper()


def distribute(data: bytes, period: str, pattern: str, send_email=False):
    """
    Split a bulk payslip PDF page by page and file each page under the
    employee whose matricule it carries.
    """
    try:
        pages = list(split_pages(data))
    except PdfReadError:
        raise ValidationError("payslipsFile is not a readable PDF", field="payslipsFile")

    storage = get_storage()
    notifier = get_notifier()
    matched, unmatched, emails_sent = [], [], 0

    for page_number, text, page_pdf in pages:
        matricule = extract_matricule(text, pattern)
        employee = None
        if matricule:
            employee = Employee.query.filter(db.func.upper(Employee.matricule) == matricule).first()
        if not employee:
            unmatched.append({"page": page_number, "matricule": matricule})
            continue

        stored = storage.save(NAMESPACE_PAYSLIPS, page_pdf, ".pdf")
        payslip = Payslip(
            employee_id=employee.id,
            period=period,
            matricule=employee.matricule,
            page_number=page_number,
            file_url=stored.url,
            stored_filename=stored.filename,
        )
        db.session.add(payslip)
        matched.append((payslip, employee, page_pdf))

    db.session.commit()

    if send_email:
        for payslip, employee, page_pdf in matched:
            if not employee.email:
                continue
            filename = f"fiche_paie_{employee.matricule}_{period}.pdf"
            if notifier.payslip(employee, period, filename, page_pdf):
                payslip.emailed_at = datetime.utcnow()
                emails_sent += 1
        db.session.commit()

    logger.info("Payslips %s: %d matched, %d unmatched, %d emailed",
                period, len(matched), len(unmatched), emails_sent)
    return [p for p, _, _ in matched], unmatched, emails_sent
