"""Main entry point for ReportChat RAG API."""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, CORS_ORIGINS, LOG_LEVEL, LOG_FORMAT
from logger import setup_logging
from models.api import (
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
from models.report import Report
from services.errors import (
    ConfigurationError,
    DocumentDecodeError,
    ExtractionError,
    RepositoryError,
    ReportNotFoundError,
    StorageError,
    VectorStoreError,
)
from services.document_loader import parse_data_uri, to_data_uri
from services.file_storage import FileStorage
from services.context_provider import DirectContextProvider, RetrievalContextProvider
from services.indexing_service import IndexingService, IndexResult
from services.llm_client import LLMClient, LLMClientError
from services.query_service import QueryService
from services.report_repository import ReportRepository
from services.text_extractor import TextExtractor
from services.vector_store import VectorStore

# Initialize logging
logger = logging.getLogger(__name__)

# Services are built explicitly at startup; tests replace them with mocks.
indexing_service: IndexingService = None
query_service: QueryService = None
text_extractor: TextExtractor = None
report_repository: ReportRepository = None
file_storage: FileStorage = None


def build_services() -> None:
    """Construct every service and wire its dependencies. No network calls are made."""
    global indexing_service, query_service, text_extractor, report_repository, file_storage

    vector_store = VectorStore()
    llm_client = LLMClient()

    indexing_service = IndexingService(vector_store)
    logger.info("Initialized IndexingService")

    query_service = QueryService(llm_client, RetrievalContextProvider(vector_store))
    logger.info("Initialized QueryService")

    text_extractor = TextExtractor(llm_client)
    logger.info("Initialized TextExtractor")

    report_repository = ReportRepository()
    logger.info("Initialized ReportRepository")

    file_storage = FileStorage()
    logger.info("Initialized FileStorage")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup."""
    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL)

    logger.info("Initializing ReportChat services...")
    build_services()
    logger.info("All services initialized successfully")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="ReportChat RAG API",
    description="Upload reports and chat with them",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, code: str, message: str, details: Optional[dict] = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": {"code": code, "message": message, "details": details or {}}}
    )


def _to_http_error(exc: Exception) -> HTTPException:
    """Map a service exception onto the API's error responses."""
    if isinstance(exc, LLMClientError):
        logger.error(f"LLM client error: {exc.error.message}")
        return _error(503, exc.error.code, exc.error.message, exc.error.details)
    if isinstance(exc, ConfigurationError):
        logger.error(f"Configuration error: {exc}")
        return _error(500, "CONFIGURATION_ERROR", str(exc))
    if isinstance(exc, (DocumentDecodeError, ValueError)):
        return _error(400, "INVALID_REQUEST", str(exc))
    if isinstance(exc, ReportNotFoundError):
        return _error(404, "REPORT_NOT_FOUND", f"Report not found: {exc}")
    if isinstance(exc, VectorStoreError):
        return _error(503, "VECTOR_STORE_ERROR", str(exc))
    if isinstance(exc, RepositoryError):
        return _error(503, "REPOSITORY_ERROR", str(exc))
    if isinstance(exc, StorageError):
        return _error(503, "STORAGE_ERROR", str(exc))
    if isinstance(exc, ExtractionError):
        return _error(502, "EXTRACTION_ERROR", str(exc))

    logger.error(f"Unexpected error: {exc}", exc_info=exc)
    return _error(500, "UNKNOWN_ERROR", f"Internal server error: {str(exc)}")


def _index_response(result: IndexResult) -> IndexResponse:
    error = None
    if result.error:
        error = ErrorDetail(
            code=result.error.code,
            message=result.error.message,
            details=result.error.details
        )
    return IndexResponse(success=result.success, chunks_indexed=result.chunks_indexed, error=error)


def _report_response(report: Report) -> ReportResponse:
    return ReportResponse(
        report_id=report.report_id,
        owner_id=report.owner_id,
        name=report.name,
        text=report.text,
        created_at=report.created_at,
        file_url=report.file_url,
        mime_type=report.mime_type
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "ReportChat RAG API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "reportchat-rag",
        "version": "1.0.0"
    }


@app.post("/documents/extract", response_model=ExtractTextResponse)
def extract_endpoint(request: ExtractTextRequest) -> ExtractTextResponse:
    """Transcribe an uploaded PDF or image into plain text."""
    try:
        return ExtractTextResponse(text=text_extractor.extract_text(request.file_data_uri))
    except Exception as e:
        raise _to_http_error(e)


@app.post("/documents/summarize", response_model=SummarizeResponse)
def summarize_endpoint(request: SummarizeRequest) -> SummarizeResponse:
    """Summarize the key findings of an uploaded report."""
    try:
        return SummarizeResponse(summary=text_extractor.summarize(request.file_data_uri))
    except Exception as e:
        raise _to_http_error(e)


@app.post("/index", response_model=IndexResponse)
def index_endpoint(request: IndexRequest) -> IndexResponse:
    """
    Chunk a report's text and store it in the vector collection.

    Collection failures come back as {"success": false, "error": {...}} with
    status 200; only configuration errors fail the request.
    """
    try:
        result = indexing_service.index_report(request.text, request.document_id, request.owner_id)
    except Exception as e:
        raise _to_http_error(e)
    return _index_response(result)


@app.post("/query", response_model=QueryResponse)
def query_endpoint(request: QueryRequest) -> QueryResponse:
    """
    Answer a question about the owner's reports.

    context_mode "retrieval" (default) searches the owner's chunks;
    "direct" answers from the given documents, or from every stored report
    of the owner when none are given.
    """
    start_time = time.time()

    if not request.question or not request.question.strip():
        raise _error(400, "INVALID_REQUEST", "Question field is required and cannot be empty")

    logger.info(f"Processing query: {request.question[:100]}...")

    try:
        provider = None
        if request.context_mode == "direct":
            documents = request.documents
            if documents is None:
                documents = [report.text for report in report_repository.list_for_owner(request.owner_id)]
            provider = DirectContextProvider(documents)

        answer = query_service.answer(request.question, request.owner_id, provider)
    except Exception as e:
        raise _to_http_error(e)

    total_latency_ms = int((time.time() - start_time) * 1000)
    logger.info(f"Query processed successfully in {total_latency_ms}ms")

    return QueryResponse(
        answer=answer.text,
        chunks_retrieved=answer.chunks_retrieved,
        context_mode=answer.context_mode,
        model_used=answer.model_used
    )


@app.post("/reports", response_model=CreateReportResponse)
def create_report_endpoint(request: CreateReportRequest) -> CreateReportResponse:
    """Upload flow: extract the text, store the file, store the record, index the text."""
    try:
        payload = parse_data_uri(request.file_data_uri)
        text = text_extractor.extract_text(request.file_data_uri)
        stored = file_storage.upload(request.owner_id, request.name, payload)
        report = report_repository.create(
            owner_id=request.owner_id,
            name=request.name,
            text=text,
            file_url=stored.url,
            file_path=stored.path,
            mime_type=payload.mime_type
        )
        result = indexing_service.index_report(report.text, report.report_id, report.owner_id)
    except Exception as e:
        raise _to_http_error(e)

    if not result.success:
        logger.warning(f"Report {report.report_id} stored but not indexed")

    return CreateReportResponse(report=_report_response(report), index=_index_response(result))


@app.get("/reports", response_model=list[ReportResponse])
def list_reports_endpoint(owner_id: str = Query(min_length=1)) -> list[ReportResponse]:
    """List the owner's reports, newest first."""
    try:
        reports = report_repository.list_for_owner(owner_id)
    except Exception as e:
        raise _to_http_error(e)
    return [_report_response(report) for report in reports]


@app.get("/reports/{report_id}", response_model=ReportResponse)
def get_report_endpoint(report_id: str, owner_id: str = Query(min_length=1)) -> ReportResponse:
    """Get one of the owner's reports."""
    try:
        report = report_repository.get(report_id, owner_id)
    except Exception as e:
        raise _to_http_error(e)
    return _report_response(report)


@app.post("/reports/{report_id}/summary", response_model=SummarizeResponse)
def summarize_report_endpoint(report_id: str, owner_id: str = Query(min_length=1)) -> SummarizeResponse:
    """Summarize a stored report from its uploaded file."""
    try:
        report = report_repository.get(report_id, owner_id)
        if not report.file_path:
            raise ValueError(f"Report {report_id} has no stored file to summarize")

        data = file_storage.download(report.file_path)
        mime_type = report.mime_type or "application/pdf"
        summary = text_extractor.summarize(to_data_uri(mime_type, data))
    except Exception as e:
        raise _to_http_error(e)
    return SummarizeResponse(summary=summary)


@app.delete("/reports/{report_id}", response_model=DeleteReportResponse)
def delete_report_endpoint(report_id: str, owner_id: str = Query(min_length=1)) -> DeleteReportResponse:
    """
    Delete a report record, purge its chunks, and remove its stored file.

    Chunk purge and file removal failures are reported in the response; the
    record stays deleted.
    """
    try:
        report = report_repository.delete(report_id, owner_id)
        purge = indexing_service.purge_report(report_id, owner_id)
    except Exception as e:
        raise _to_http_error(e)

    errors = []
    if purge.error:
        errors.append(ErrorDetail(code=purge.error.code, message=purge.error.message, details=purge.error.details))

    file_deleted = False
    if report.file_path:
        try:
            file_storage.delete(report.file_path)
            file_deleted = True
        except StorageError as e:
            logger.warning(f"Report {report_id} deleted but its file was not removed")
            errors.append(ErrorDetail(code="STORAGE_ERROR", message=str(e), details={"file_path": report.file_path}))

    return DeleteReportResponse(
        report_id=report_id,
        deleted=True,
        chunks_purged=purge.success,
        file_deleted=file_deleted,
        errors=errors
    )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting ReportChat RAG API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
