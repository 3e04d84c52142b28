"""Fixed-size character chunking for report text."""
import logging
from typing import List

from models.chunk import Chunk, chunk_id_for
from config import CHUNK_SIZE

logger = logging.getLogger(__name__)


def chunk_text(text: str, chunk_size: int = CHUNK_SIZE) -> List[str]:
    """
    Split text into consecutive, non-overlapping slices of at most chunk_size characters.

    Boundaries ignore words and sentences; joining the result gives back the input.

    Args:
        text: Text to split
        chunk_size: Maximum slice length in characters

    Returns:
        List of slices, empty for empty text

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


class ChunkingEngine:
    """Segments a report's text into owner-tagged chunks."""

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Maximum chunk length in characters
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def chunk_document(self, text: str, document_id: str, owner_id: str) -> List[Chunk]:
        """
        Chunk one report and attach ids and owner metadata.

        Args:
            text: Full report text
            document_id: Id of the report the text belongs to
            owner_id: Id of the user who owns the report

        Returns:
            Chunks with ids "{document_id}-chunk-{index}", in text order
        """
        chunks = [
            Chunk(
                chunk_id=chunk_id_for(document_id, idx),
                text=piece,
                owner_id=owner_id,
                document_id=document_id,
                index=idx
            )
            for idx, piece in enumerate(chunk_text(text, self.chunk_size))
        ]

        logger.debug(f"Created {len(chunks)} chunks for document {document_id}")
        return chunks
