"""Data models for ReportChat RAG backend."""
from .document import DocumentPayload, Page, RenderedDocument
from .chunk import Chunk, RetrievedContext, chunk_id_for
from .report import Report
from .api import (
    ErrorDetail,
    ExtractTextRequest,
    ExtractTextResponse,
    SummarizeRequest,
    SummarizeResponse,
    IndexRequest,
    IndexResponse,
    QueryRequest,
    QueryResponse,
    CreateReportRequest,
    CreateReportResponse,
    ReportResponse,
    DeleteReportResponse,
)

__all__ = [
    "DocumentPayload",
    "Page",
    "RenderedDocument",
    "Chunk",
    "RetrievedContext",
    "chunk_id_for",
    "Report",
    "ErrorDetail",
    "ExtractTextRequest",
    "ExtractTextResponse",
    "SummarizeRequest",
    "SummarizeResponse",
    "IndexRequest",
    "IndexResponse",
    "QueryRequest",
    "QueryResponse",
    "CreateReportRequest",
    "CreateReportResponse",
    "ReportResponse",
    "DeleteReportResponse",
]
