"""Decoding of uploaded documents into images for the extraction model."""
import base64
import binascii
import logging
import re
from typing import List

import fitz  # PyMuPDF

from models.document import DocumentPayload, Page, RenderedDocument
from services.errors import DocumentDecodeError
from config import MAX_EXTRACTION_PAGES, PDF_RENDER_DPI

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[^,;]+=[^,;]*)*;base64,(?P<data>.*)$", re.DOTALL)


def parse_data_uri(data_uri: str) -> DocumentPayload:
    """
    Decode a 'data:<mimetype>;base64,<encoded_data>' URI.

    Raises:
        DocumentDecodeError: If the URI is malformed or the payload is not base64
    """
    match = _DATA_URI_RE.match(data_uri.strip()) if data_uri else None
    if not match:
        raise DocumentDecodeError("Expected a base64 data URI: 'data:<mimetype>;base64,<encoded_data>'")

    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentDecodeError(f"Invalid base64 document data: {e}") from e

    if not data:
        raise DocumentDecodeError("Document is empty")

    return DocumentPayload(mime_type=match.group("mime").lower(), data=data)


def to_data_uri(mime_type: str, data: bytes) -> str:
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class DocumentLoader:
    """Turns uploaded PDFs and images into page images a vision model accepts."""

    def __init__(self, max_pages: int = MAX_EXTRACTION_PAGES, dpi: int = PDF_RENDER_DPI):
        """
        Initialize DocumentLoader.

        Args:
            max_pages: Maximum number of page images per document
            dpi: Resolution used when rendering PDF pages
        """
        self.max_pages = max_pages
        self.dpi = dpi

    def load(self, data_uri: str) -> RenderedDocument:
        """
        Decode a data URI into page images.

        Args:
            data_uri: Uploaded document

        Returns:
            RenderedDocument with one image per page (images are a single page)

        Raises:
            DocumentDecodeError: If the document cannot be decoded or its type is unsupported
        """
        payload = parse_data_uri(data_uri)

        if payload.is_image:
            page = Page(page_number=1, image_data_uri=to_data_uri(payload.mime_type, payload.data))
            return RenderedDocument(mime_type=payload.mime_type, pages=[page], total_pages=1)

        if payload.is_pdf:
            return self._render_pdf(payload)

        raise DocumentDecodeError(f"Unsupported document type: {payload.mime_type}")

    def _render_pdf(self, payload: DocumentPayload) -> RenderedDocument:
        try:
            pdf_document = fitz.open(stream=payload.data, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open PDF: {str(e)}")
            raise DocumentDecodeError(f"Could not read PDF: {e}") from e

        pages: List[Page] = []
        try:
            total_pages = len(pdf_document)
            if total_pages == 0:
                raise DocumentDecodeError("PDF has no pages")

            for page_num in range(min(total_pages, self.max_pages)):
                pixmap = pdf_document[page_num].get_pixmap(dpi=self.dpi)
                pages.append(Page(
                    page_number=page_num + 1,  # 1-indexed
                    image_data_uri=to_data_uri("image/png", pixmap.tobytes("png"))
                ))
        finally:
            pdf_document.close()

        if total_pages > len(pages):
            logger.warning(
                f"PDF has {total_pages} pages; only the first {len(pages)} are sent for extraction"
            )

        return RenderedDocument(mime_type=payload.mime_type, pages=pages, total_pages=total_pages)
