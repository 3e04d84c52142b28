"""Chunk data models."""
from dataclasses import dataclass, field
from typing import List


def chunk_id_for(document_id: str, index: int) -> str:
    """Build the collection id of the ``index``-th chunk of a document."""
    return f"{document_id}-chunk-{index}"


@dataclass(frozen=True)
class Chunk:
    """A fixed-size slice of a report's text, the unit stored in the vector collection."""
    chunk_id: str  # Format: "{document_id}-chunk-{index}"
    text: str
    owner_id: str
    document_id: str
    index: int

    @property
    def metadata(self) -> dict:
        """Metadata attached to the chunk in the vector collection."""
        return {"ownerId": self.owner_id, "documentId": self.document_id}


@dataclass
class RetrievedContext:
    """Chunk texts returned by a similarity search, in the collection's ranking order."""
    owner_id: str
    texts: List[str] = field(default_factory=list)
    chunk_ids: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.texts)
