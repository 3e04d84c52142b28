"""Vector store implementation using a Chroma collection."""
import logging
import threading
from typing import List, Optional

import chromadb
from chromadb import EmbeddingFunction

from models.chunk import Chunk, RetrievedContext
from services.errors import ConfigurationError, VectorStoreError
from config import (
    CHROMA_API_KEY,
    CHROMA_TENANT,
    CHROMA_DATABASE,
    CHROMA_PERSIST_DIRECTORY,
    COLLECTION_NAME,
    MAX_CHUNKS,
)

logger = logging.getLogger(__name__)


class VectorStore:
    """Store report chunks and run owner-scoped similarity search in Chroma."""

    def __init__(
        self,
        embedding_function: Optional[EmbeddingFunction] = None,
        api_key: Optional[str] = CHROMA_API_KEY,
        tenant: Optional[str] = CHROMA_TENANT,
        database: Optional[str] = CHROMA_DATABASE,
        persist_directory: Optional[str] = CHROMA_PERSIST_DIRECTORY,
        collection_name: str = COLLECTION_NAME,
        client: Optional[chromadb.ClientAPI] = None
    ):
        """
        Configure the vector store. No connection is made until first use.

        Args:
            embedding_function: Embedding function for the collection
                (defaults to HuggingFaceEmbeddingFunction, built on first use)
            api_key: Chroma Cloud API key
            tenant: Chroma Cloud tenant
            database: Chroma Cloud database
            persist_directory: Local directory for a persistent client; when set,
                cloud credentials are not needed
            collection_name: Name of the collection holding report chunks
            client: Pre-built Chroma client, used as-is
        """
        self.embedding_function = embedding_function
        self.api_key = api_key
        self.tenant = tenant
        self.database = database
        self.persist_directory = persist_directory
        self.collection_name = collection_name
        self.client = client

        self._collection = None
        self._lock = threading.Lock()

    def _get_collection(self):
        """
        Return the collection, connecting on the first call.

        Raises:
            ConfigurationError: If required credentials are missing
            VectorStoreError: If the collection cannot be opened
        """
        if self._collection is None:
            with self._lock:
                if self._collection is None:
                    self._collection = self._connect()
        return self._collection

    def _connect(self):
        if self.client is None:
            self.client = self._create_client()

        if self.embedding_function is None:
            # Imported here so the store can run with an injected function
            # without a Hugging Face key configured.
            from services.embedding_model import HuggingFaceEmbeddingFunction
            self.embedding_function = HuggingFaceEmbeddingFunction()

        try:
            collection = self.client.get_or_create_collection(
                name=self.collection_name,
                embedding_function=self.embedding_function
            )
        except Exception as e:
            error_msg = f"Failed to open collection '{self.collection_name}': {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

        logger.info(f"Connected to vector collection: {self.collection_name}")
        return collection

    def _create_client(self) -> chromadb.ClientAPI:
        if self.persist_directory:
            logger.info(f"Using local Chroma store at {self.persist_directory}")
            return chromadb.PersistentClient(path=self.persist_directory)

        missing = [
            name for name, value in (
                ("CHROMA_API_KEY", self.api_key),
                ("CHROMA_TENANT", self.tenant),
                ("CHROMA_DATABASE", self.database),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} environment variable(s) required for Chroma Cloud"
            )

        try:
            return chromadb.CloudClient(
                tenant=self.tenant,
                database=self.database,
                api_key=self.api_key
            )
        except Exception as e:
            error_msg = f"Failed to connect to Chroma Cloud: {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

    def add_chunks(self, chunks: List[Chunk]) -> int:
        """
        Write chunks to the collection in a single batch.

        The collection computes embeddings with its embedding function.

        Args:
            chunks: Chunks to store

        Returns:
            Number of chunks written (0 for an empty list, with no write made)

        Raises:
            ConfigurationError: If credentials are missing
            VectorStoreError: If the write fails
        """
        if not chunks:
            return 0

        collection = self._get_collection()
        logger.info(f"Adding {len(chunks)} chunks to vector store...")

        try:
            collection.add(
                ids=[chunk.chunk_id for chunk in chunks],
                documents=[chunk.text for chunk in chunks],
                metadatas=[chunk.metadata for chunk in chunks]
            )
        except Exception as e:
            error_msg = f"Failed to add chunks to vector store: {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

        logger.info(f"Successfully added {len(chunks)} chunks to vector store")
        return len(chunks)

    def query(self, query_text: str, owner_id: str, n_results: int = MAX_CHUNKS) -> RetrievedContext:
        """
        Find the chunks of one owner most similar to the query text.

        Args:
            query_text: Natural-language question
            owner_id: Only chunks with this ownerId are searched
            n_results: Maximum number of chunks to return

        Returns:
            RetrievedContext in the collection's ranking order

        Raises:
            ValueError: If owner_id is empty or n_results is invalid
            ConfigurationError: If credentials are missing
            VectorStoreError: If the search fails
        """
        if not owner_id:
            raise ValueError("owner_id is required for retrieval")

        if n_results <= 0:
            raise ValueError("n_results must be positive")

        collection = self._get_collection()

        try:
            results = collection.query(
                query_texts=[query_text],
                n_results=n_results,
                where={"ownerId": owner_id},
                include=["documents", "metadatas"]
            )
        except Exception as e:
            error_msg = f"Failed to search vector store: {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

        return self._to_context(results, owner_id)

    @staticmethod
    def _first_row(results, key: str) -> list:
        """Return the row for the single query text, or [] when Chroma sent nothing."""
        rows = results.get(key) if results else None
        if not rows:
            return []
        return rows[0] or []

    def _to_context(self, results, owner_id: str) -> RetrievedContext:
        documents = self._first_row(results, "documents")
        ids = self._first_row(results, "ids")
        metadatas = self._first_row(results, "metadatas")

        context = RetrievedContext(owner_id=owner_id)
        for idx, text in enumerate(documents):
            if text is None:
                continue

            metadata = metadatas[idx] if idx < len(metadatas) and metadatas[idx] else {}
            # Never hand another owner's chunk to the prompt.
            if metadata.get("ownerId", owner_id) != owner_id:
                logger.error(
                    "Dropped chunk with mismatched owner from search results",
                    extra={"expected_owner": owner_id}
                )
                continue

            context.texts.append(text)
            context.chunk_ids.append(ids[idx] if idx < len(ids) else "")

        logger.debug(f"Found {len(context)} chunks for owner query")
        return context

    def delete_document_chunks(self, document_id: str, owner_id: str) -> None:
        """
        Remove every chunk of one report.

        Args:
            document_id: Report whose chunks are removed
            owner_id: Owner of the report

        Raises:
            ValueError: If either id is empty
            ConfigurationError: If credentials are missing
            VectorStoreError: If the delete fails
        """
        if not document_id or not owner_id:
            raise ValueError("document_id and owner_id are required")

        collection = self._get_collection()

        try:
            collection.delete(
                where={"$and": [{"documentId": document_id}, {"ownerId": owner_id}]}
            )
        except Exception as e:
            error_msg = f"Failed to delete chunks for document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

        logger.info(f"Deleted chunks for document {document_id}")

    def existing_ids(self, chunk_ids: List[str]) -> List[str]:
        """
        Return which of the given chunk ids are already stored, for any owner.

        Raises:
            VectorStoreError: If the lookup fails
        """
        if not chunk_ids:
            return []

        collection = self._get_collection()

        try:
            results = collection.get(ids=chunk_ids, include=[])
        except Exception as e:
            error_msg = f"Failed to look up chunk ids: {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

        return list(results.get("ids") or [])

    def count(self, owner_id: Optional[str] = None) -> int:
        """
        Get the number of stored chunks, optionally for one owner.

        Raises:
            VectorStoreError: If the count fails
        """
        collection = self._get_collection()

        try:
            if owner_id is None:
                return collection.count()
            results = collection.get(where={"ownerId": owner_id}, include=[])
            return len(results["ids"])
        except Exception as e:
            error_msg = f"Failed to count chunks in vector store: {str(e)}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e
