import logging

from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.employee import Employee, STATUS_ARCHIVED
from models.visa import (
    VisaDossier, VisaDocument,
    DOC_MISSING, DOC_UPLOADED, DOC_STATUS_FOR_MODE,
    DOSSIER_APPROVED, DOSSIER_CREATED, DOSSIER_DOCUMENTS_PENDING,
    DOSSIER_STATUS_RANK, DOSSIER_TERMINAL,
    MODE_UPLOAD,
)
from services import get_document_generator, get_notifier, get_storage
from services.checklist import VISA_CHECKLIST
from services.document_generator import DOCUMENT_KINDS
from services.pdf_merge import PDF_MIMETYPE, is_pdf_bytes, merge_pdfs
from services.storage import NAMESPACE_GENERATED, NAMESPACE_VISA
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def get_employee_or_404(employee_id: int) -> Employee:
    employee = db.session.get(Employee, employee_id)
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def get_dossier_or_404(dossier_id: int) -> VisaDossier:
    dossier = db.session.get(VisaDossier, dossier_id)
    if not dossier:
        raise NotFoundError("Visa dossier not found")
    return dossier


def get_document_or_404(document_id: int) -> VisaDocument:
    document = db.session.get(VisaDocument, document_id)
    if not document:
        raise NotFoundError("Visa document not found")
    return document


def _ensure_open(dossier: VisaDossier):
    if dossier.status in DOSSIER_TERMINAL:
        raise ValidationError(f"Visa dossier is closed ({dossier.status})", field="status")


def _mark_in_progress(dossier: VisaDossier):
    if dossier.status == DOSSIER_CREATED:
        dossier.status = DOSSIER_DOCUMENTS_PENDING


def _is_pdf_document(document: VisaDocument) -> bool:
    if document.content_type:
        return document.content_type == PDF_MIMETYPE
    return (document.stored_filename or "").lower().endswith(".pdf")


def checklist_progress(dossier: VisaDossier):
    docs = dossier.documents
    return {
        "completed": sum(1 for d in docs if d.status != DOC_MISSING),
        "total": len(docs),
    }


# -----------------------------
# Dossier creation
# -----------------------------
def create_dossier(employee_id, motif, departure_date, return_date):
    """
    Insert the dossier and its full checklist in one transaction, then try to
    email the employee. Returns (dossier, email_sent).
    """
    if return_date < departure_date:
        raise ValidationError("return_date must not be before departure_date", field="return_date")

    employee = get_employee_or_404(employee_id)
    if employee.status == STATUS_ARCHIVED:
        raise ValidationError("Employee is archived", field="employee_id")

    dossier = VisaDossier(
        employee_id=employee.id,
        motif=motif,
        departure_date=departure_date,
        return_date=return_date,
        status=DOSSIER_CREATED,
    )
    for item in VISA_CHECKLIST:
        dossier.documents.append(VisaDocument(
            code=item.code,
            label=item.label,
            mode=item.mode,
            status=DOC_MISSING,
        ))

    try:
        db.session.add(dossier)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info("Visa dossier %s created for employee %s (%d documents)",
                dossier.id, employee.id, len(VISA_CHECKLIST))

    email_sent = get_notifier().dossier_created(employee, dossier)
    if not email_sent:
        logger.warning("Dossier %s created but the employee email was not sent", dossier.id)
    return dossier, email_sent


# -----------------------------
# Storing a file on a checklist item
# -----------------------------
def _record_file(document: VisaDocument, stored, original_filename, content_type):
    storage = get_storage()
    previous = (document.storage_namespace, document.stored_filename)

    document.file_url = stored.url
    document.storage_namespace = stored.namespace
    document.stored_filename = stored.filename
    document.original_filename = original_filename
    document.content_type = content_type
    document.status = DOC_UPLOADED
    _mark_in_progress(document.dossier)

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        storage.delete(stored.namespace, stored.filename)
        raise

    if previous[1] and previous != (stored.namespace, stored.filename):
        storage.delete(*previous)
    return document


def _check_uploadable(document: VisaDocument):
    _ensure_open(document.dossier)
    if document.mode != MODE_UPLOAD:
        raise ValidationError(
            f"Document '{document.code}' is handed over physically and cannot receive a file",
            field="status",
        )


def upload_document(document_id, file):
    """Replace the file of an UPLOAD checklist item with a client PDF."""
    if file is None or not file.filename:
        raise ValidationError("pdfFile is required", field="pdfFile")
    if file.mimetype != PDF_MIMETYPE:
        raise ValidationError("Only PDF files are accepted", field="pdfFile")
    head = file.stream.read(5)
    file.stream.seek(0)
    if not is_pdf_bytes(head):
        raise ValidationError("Only PDF files are accepted", field="pdfFile")

    document = get_document_or_404(document_id)
    _check_uploadable(document)

    stored = get_storage().save(NAMESPACE_VISA, file, ".pdf")
    _record_file(document, stored, file.filename, PDF_MIMETYPE)
    logger.info("Visa document %s uploaded (%s)", document.id, stored.filename)
    return document


def generate_document(kind, employee_id, document_id, fields=None):
    """Render a templated letter and store it on its checklist item."""
    kind_info = DOCUMENT_KINDS[kind]
    employee = get_employee_or_404(employee_id)
    document = get_document_or_404(document_id)

    if document.dossier.employee_id != employee.id:
        raise ValidationError("Document does not belong to a dossier of this employee", field="document_id")
    if document.code != kind_info.code:
        raise ValidationError(f"Document '{document.code}' is not a {kind_info.code} item", field="document_id")
    _check_uploadable(document)

    pdf, filename = get_document_generator().generate(kind, employee, document.dossier, fields)
    stored = get_storage().save(NAMESPACE_GENERATED, pdf, ".pdf")
    _record_file(document, stored, filename, PDF_MIMETYPE)
    logger.info("Generated %s for employee %s on document %s", kind, employee.id, document.id)
    return document


# -----------------------------
# Checklist status changes
# -----------------------------
def set_document_status(document_id, status):
    document = get_document_or_404(document_id)
    _ensure_open(document.dossier)

    if status == DOC_MISSING:
        previous = (document.storage_namespace, document.stored_filename)
        document.status = DOC_MISSING
        document.file_url = None
        document.storage_namespace = None
        document.stored_filename = None
        document.original_filename = None
        document.content_type = None
        db.session.commit()
        if previous[1]:
            get_storage().delete(*previous)
        return document

    if status != DOC_STATUS_FOR_MODE[document.mode]:
        raise ValidationError(
            f"A {document.mode} document cannot be marked {status}",
            field="status",
        )
    if status == DOC_UPLOADED and not document.stored_filename:
        raise ValidationError("Upload a file before marking this document as uploaded", field="status")

    document.status = status
    _mark_in_progress(document.dossier)
    db.session.commit()
    return document


def change_dossier_status(dossier_id, status, visa_number=None, visa_valid_from=None, visa_valid_until=None):
    """Move the dossier forward in its workflow; terminal states are final."""
    dossier = get_dossier_or_404(dossier_id)
    _ensure_open(dossier)

    if DOSSIER_STATUS_RANK[status] < DOSSIER_STATUS_RANK[dossier.status]:
        raise ValidationError(
            f"Cannot move a dossier back from {dossier.status} to {status}",
            field="status",
        )

    dossier.status = status
    if status == DOSSIER_APPROVED:
        dossier.visa_number = visa_number
        dossier.visa_valid_from = visa_valid_from
        dossier.visa_valid_until = visa_valid_until
    db.session.commit()
    logger.info("Visa dossier %s moved to %s", dossier.id, status)
    return dossier


# -----------------------------
# Dossier PDF assembly
# -----------------------------
def build_dossier_pdf(dossier_id) -> bytes:
    dossier = get_dossier_or_404(dossier_id)
    documents = sorted(
        (d for d in dossier.documents if d.status == DOC_UPLOADED and _is_pdf_document(d)),
        key=lambda d: (d.created_at, d.id),
    )
    if not documents:
        raise ValidationError("No uploaded PDF document in this dossier", field="documents")

    storage = get_storage()
    paths = [storage.path_for(d.storage_namespace, d.stored_filename) for d in documents]
    return merge_pdfs(paths)


# -----------------------------
# Back-office requests
# -----------------------------
def request_insurance(dossier_id) -> bool:
    dossier = get_dossier_or_404(dossier_id)
    return get_notifier().insurance_request(dossier.employee, dossier)


def request_ticket(dossier_id) -> bool:
    dossier = get_dossier_or_404(dossier_id)
    return get_notifier().ticket_request(dossier.employee, dossier)
