"""Request and response models for the HTTP API."""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error returned to the caller."""
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ExtractTextRequest(BaseModel):
    file_data_uri: str = Field(
        description="Document as a data URI: 'data:<mimetype>;base64,<encoded_data>'"
    )


class ExtractTextResponse(BaseModel):
    text: str


class SummarizeRequest(BaseModel):
    file_data_uri: str = Field(
        description="Report as a data URI: 'data:<mimetype>;base64,<encoded_data>'"
    )


class SummarizeResponse(BaseModel):
    summary: str


class IndexRequest(BaseModel):
    text: str = Field(description="Full text of the report to index")
    document_id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)


class IndexResponse(BaseModel):
    success: bool
    chunks_indexed: int = 0
    error: Optional[ErrorDetail] = None


class QueryRequest(BaseModel):
    question: str
    owner_id: str = Field(min_length=1)
    context_mode: Literal["retrieval", "direct"] = "retrieval"
    documents: Optional[List[str]] = Field(
        default=None,
        description="Texts to answer from in direct mode; the owner's reports are used when omitted",
    )


class QueryResponse(BaseModel):
    answer: str
    chunks_retrieved: int
    context_mode: str
    model_used: Optional[str] = None


class CreateReportRequest(BaseModel):
    owner_id: str = Field(min_length=1)
    name: str = Field(min_length=1, description="Original file name")
    file_data_uri: str = Field(
        description="Report as a data URI; the decoded file is kept in object storage"
    )


class ReportResponse(BaseModel):
    report_id: str
    owner_id: str
    name: str
    text: str
    created_at: datetime
    file_url: Optional[str] = None
    mime_type: Optional[str] = None


class CreateReportResponse(BaseModel):
    report: ReportResponse
    index: IndexResponse


class DeleteReportResponse(BaseModel):
    report_id: str
    deleted: bool
    chunks_purged: bool
    file_deleted: bool
    errors: List[ErrorDetail] = Field(default_factory=list)
