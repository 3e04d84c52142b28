"""Tests for structured JSON logging."""
import sys
import json
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from logger import JSONFormatter, setup_logging


def _record(message="Indexed 3 chunks", **extra):
    record = logging.LogRecord(
        name="services.indexing_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "services.indexing_service"
        assert data["message"] == "Indexed 3 chunks"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        data = json.loads(JSONFormatter().format(
            _record(error_code="VECTOR_STORE_ERROR", error_details={"document_id": "doc1"})
        ))

        assert data["error_code"] == "VECTOR_STORE_ERROR"
        assert data["error_details"] == {"document_id": "doc1"}

    def test_standard_attributes_excluded(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert "pathname" not in data
        assert "lineno" not in data
        assert "args" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("collection unavailable")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "collection unavailable" in data["exception"]


class TestSetupLogging:

    def test_replaces_root_handlers(self):
        root_logger = logging.getLogger()
        original_handlers = list(root_logger.handlers)
        original_level = root_logger.level

        try:
            setup_logging("WARNING")

            assert len(root_logger.handlers) == 1
            assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
            assert root_logger.level == logging.WARNING
        finally:
            for handler in list(root_logger.handlers):
                root_logger.removeHandler(handler)
            for handler in original_handlers:
                root_logger.addHandler(handler)
            root_logger.setLevel(original_level)
