import io
import logging

from pypdf import PdfReader, PdfWriter

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"
PDF_MAGIC = b"%PDF-"


def is_pdf_bytes(head: bytes) -> bool:
    return head.startswith(PDF_MAGIC)


def merge_pdfs(paths) -> bytes:
    """Concatenate the pages of every PDF in `paths`, keeping the given order."""
    writer = PdfWriter()
    for path in paths:
        writer.append(path)
    page_count = len(writer.pages)

    buf = io.BytesIO()
    writer.write(buf)
    writer.close()
    logger.info("Merged %d PDF(s) into %d page(s)", len(paths), page_count)
    return buf.getvalue()


def split_pages(data: bytes):
    """Yield (page number starting at 1, page text, single-page PDF bytes)."""
    reader = PdfReader(io.BytesIO(data))
    for index, page in enumerate(reader.pages, start=1):
        writer = PdfWriter()
        writer.add_page(page)
        buf = io.BytesIO()
        writer.write(buf)
        yield index, page.extract_text() or "", buf.getvalue()
