"""
Document Ingestion Script for ReportChat.

This script, for each file given:
1. Reads a local PDF or image
2. Extracts its text with the vision model
3. Chunks the text and stores it in the Chroma collection for one owner

Usage:
    python ingest_documents.py --owner-id USER_ID report1.pdf scan.png
"""
import argparse
import hashlib
import logging
import mimetypes
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from services.document_loader import to_data_uri
from services.errors import ConfigurationError
from services.indexing_service import IndexingService
from services.llm_client import LLMClient
from services.text_extractor import TextExtractor
from services.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionOutcome:
    """Result of ingesting one file."""
    path: Path
    document_id: str
    success: bool
    chunks_indexed: int = 0
    error: Optional[str] = None


def document_id_for(path: Path, owner_id: str) -> str:
    """
    Derive a stable document id from a file name, its location, and its owner.

    The same file re-ingested for the same owner keeps its id; files that share
    a name in other directories or for other owners do not.
    """
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "-", path.stem).strip("-") or "document"
    digest = hashlib.sha256(f"{owner_id}:{path.resolve()}".encode()).hexdigest()[:12]
    return f"{stem}-{digest}"


def ingest_file(
    path: Path,
    owner_id: str,
    text_extractor: TextExtractor,
    indexing_service: IndexingService
) -> IngestionOutcome:
    """Extract and index a single file; errors other than configuration errors are reported, not raised."""
    document_id = document_id_for(path, owner_id)
    mime_type, _ = mimetypes.guess_type(path.name)

    try:
        if mime_type is None:
            raise ValueError(f"Cannot determine the media type of {path.name}")

        data_uri = to_data_uri(mime_type, path.read_bytes())
        text = text_extractor.extract_text(data_uri)
        logger.info(f"Extracted {len(text)} characters from {path.name}")

        result = indexing_service.index_report(text, document_id, owner_id)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(f"Error ingesting {path.name}: {e}")
        return IngestionOutcome(path=path, document_id=document_id, success=False, error=str(e))

    return IngestionOutcome(
        path=path,
        document_id=document_id,
        success=result.success,
        chunks_indexed=result.chunks_indexed,
        error=result.error.message if result.error else None
    )


def run_ingestion(
    paths: List[Path],
    owner_id: str,
    text_extractor: TextExtractor,
    indexing_service: IndexingService
) -> List[IngestionOutcome]:
    """Ingest every file in order, continuing past failures."""
    outcomes = []
    for path in paths:
        logger.info(f"Ingesting {path}...")
        outcomes.append(ingest_file(path, owner_id, text_extractor, indexing_service))
    return outcomes


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract and index reports for one owner.")
    parser.add_argument("--owner-id", required=True, help="Owner the reports belong to")
    parser.add_argument("files", nargs="+", type=Path, help="PDF or image files")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main ingestion process."""
    args = parse_args(argv)

    logger.info("=" * 60)
    logger.info("Starting ReportChat Document Ingestion")
    logger.info("=" * 60)

    llm_client = LLMClient()
    text_extractor = TextExtractor(llm_client)
    indexing_service = IndexingService(VectorStore())

    outcomes = run_ingestion(args.files, args.owner_id, text_extractor, indexing_service)

    for outcome in outcomes:
        if outcome.success:
            print(f"OK   {outcome.path.name}: {outcome.chunks_indexed} chunks as {outcome.document_id}")
        else:
            print(f"FAIL {outcome.path.name}: {outcome.error}")

    failed = sum(1 for outcome in outcomes if not outcome.success)
    logger.info(f"Ingestion finished: {len(outcomes) - failed} succeeded, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    sys.exit(main())
