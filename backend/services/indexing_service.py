"""Ingestion of report text into the vector collection."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from services.chunking_engine import ChunkingEngine
from services.errors import VectorStoreError
from services.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class IndexingError:
    """Why an ingestion attempt failed."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IndexResult:
    """Outcome of indexing one report."""
    success: bool
    chunks_indexed: int = 0
    error: Optional[IndexingError] = None


class IndexingService:
    """Chunk a report and write the chunks to the vector collection in one batch."""

    def __init__(self, vector_store: VectorStore, chunking_engine: Optional[ChunkingEngine] = None):
        self.vector_store = vector_store
        self.chunking_engine = chunking_engine or ChunkingEngine()

    def index_report(self, text: str, document_id: str, owner_id: str) -> IndexResult:
        """
        Index one report's text for later retrieval.

        Chunks already stored for this document and owner are removed before
        the new batch is written, so re-indexing replaces the previous text.
        Failures of the external collection are logged and returned as a
        failed IndexResult; they are not raised and not retried. A missing
        credential (ConfigurationError) is raised.

        Args:
            text: Full report text
            document_id: Report id, used to derive chunk ids
            owner_id: Owner id, attached to every chunk

        Returns:
            IndexResult
        """
        chunks = self.chunking_engine.chunk_document(text, document_id, owner_id)

        if not chunks:
            logger.info(f"No text to index for document {document_id}")
            return IndexResult(success=True, chunks_indexed=0)

        try:
            # The collection ignores adds for ids it already holds
            self.vector_store.delete_document_chunks(document_id, owner_id)

            taken = self.vector_store.existing_ids([chunk.chunk_id for chunk in chunks])
            if taken:
                error = IndexingError(
                    code="DUPLICATE_DOCUMENT",
                    message="Document id is already indexed for another owner.",
                    details={"document_id": document_id, "conflicting_ids": taken}
                )
                logger.error(
                    f"Refusing to index document {document_id}: chunk ids already in use",
                    extra={"error_code": error.code, "error_details": error.details}
                )
                return IndexResult(success=False, error=error)

            written = self.vector_store.add_chunks(chunks)
        except VectorStoreError as e:
            error = IndexingError(
                code="VECTOR_STORE_ERROR",
                message="Failed to index report in the vector collection.",
                details={"document_id": document_id, "chunks": len(chunks), "original_error": str(e)}
            )
            logger.error(
                f"Failed to index document {document_id}: {e}",
                extra={"error_code": error.code, "error_details": error.details}
            )
            return IndexResult(success=False, error=error)

        logger.info(f"Successfully indexed {written} chunks for document {document_id}")
        return IndexResult(success=True, chunks_indexed=written)

    def purge_report(self, document_id: str, owner_id: str) -> IndexResult:
        """
        Remove a deleted report's chunks from the vector collection.

        Returns:
            IndexResult with success False and an error when the delete failed
        """
        try:
            self.vector_store.delete_document_chunks(document_id, owner_id)
        except VectorStoreError as e:
            error = IndexingError(
                code="VECTOR_STORE_ERROR",
                message="Failed to remove report chunks from the vector collection.",
                details={"document_id": document_id, "original_error": str(e)}
            )
            logger.error(
                f"Failed to purge chunks for document {document_id}: {e}",
                extra={"error_code": error.code, "error_details": error.details}
            )
            return IndexResult(success=False, error=error)

        return IndexResult(success=True)
