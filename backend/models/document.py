"""Document data models."""
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DocumentPayload:
    """A decoded upload: declared media type plus raw bytes."""
    mime_type: str
    data: bytes

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass
class Page:
    """A single rendered page, ready to send to a vision model."""
    page_number: int
    image_data_uri: str


@dataclass
class RenderedDocument:
    """Images sent to the extraction model for one document."""
    mime_type: str
    pages: List[Page]
    total_pages: int

    @property
    def truncated(self) -> bool:
        return len(self.pages) < self.total_pages
