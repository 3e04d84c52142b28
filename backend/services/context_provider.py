"""Strategies for assembling the context a question is answered from."""
import logging
from typing import List, Optional, Protocol, runtime_checkable

from models.chunk import RetrievedContext
from services.vector_store import VectorStore
from config import MAX_CHUNKS

logger = logging.getLogger(__name__)


@runtime_checkable
class ContextProvider(Protocol):
    """Anything that can produce context texts for an owner's question."""

    mode: str

    def get_context(self, question: str, owner_id: str) -> RetrievedContext: ...


class RetrievalContextProvider:
    """Default strategy: similarity search over the owner's chunks, capped at MAX_CHUNKS."""

    mode = "retrieval"

    def __init__(self, vector_store: VectorStore, max_chunks: int = MAX_CHUNKS):
        self.vector_store = vector_store
        self.max_chunks = max_chunks

    def get_context(self, question: str, owner_id: str) -> RetrievedContext:
        return self.vector_store.query(question, owner_id, n_results=self.max_chunks)


class DirectContextProvider:
    """
    Opt-in strategy: answer from caller-supplied document texts, with no retrieval.

    Every non-empty text is used, so prompt size grows with the number and
    length of the documents.
    """

    mode = "direct"

    def __init__(self, documents: Optional[List[str]] = None):
        self.documents = documents or []

    def get_context(self, question: str, owner_id: str) -> RetrievedContext:
        texts = [text for text in self.documents if text and text.strip()]
        if len(texts) < len(self.documents):
            logger.debug(f"Skipped {len(self.documents) - len(texts)} empty documents")
        return RetrievedContext(owner_id=owner_id, texts=texts)
