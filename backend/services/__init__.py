"""Services for ReportChat RAG backend."""
from .errors import (
    ConfigurationError,
    VectorStoreError,
    DocumentDecodeError,
    ExtractionError,
    RepositoryError,
    ReportNotFoundError,
    StorageError,
)
from .chunking_engine import ChunkingEngine, chunk_text
from .embedding_model import HuggingFaceEmbeddingFunction
from .vector_store import VectorStore
from .context_provider import ContextProvider, RetrievalContextProvider, DirectContextProvider
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .indexing_service import IndexingService, IndexResult, IndexingError
from .query_service import QueryService, Answer
from .document_loader import DocumentLoader, parse_data_uri, to_data_uri
from .text_extractor import TextExtractor, ExtractionPolicy
from .report_repository import ReportRepository
from .file_storage import FileStorage, StoredFile

__all__ = [
    'ConfigurationError', 'VectorStoreError', 'DocumentDecodeError', 'ExtractionError',
    'RepositoryError', 'ReportNotFoundError', 'ChunkingEngine', 'chunk_text',
    'HuggingFaceEmbeddingFunction', 'VectorStore', 'ContextProvider',
    'RetrievalContextProvider', 'DirectContextProvider', 'LLMClient', 'LLMResponse',
    'LLMError', 'LLMClientError', 'IndexingService', 'IndexResult', 'IndexingError',
    'QueryService', 'Answer', 'DocumentLoader', 'parse_data_uri', 'to_data_uri',
    'TextExtractor', 'ExtractionPolicy', 'ReportRepository', 'StorageError',
    'FileStorage', 'StoredFile',
]
