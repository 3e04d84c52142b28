"""Unit tests for ReportRepository."""
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock, MagicMock, patch
from models.report import Report
from services.errors import ConfigurationError, ReportNotFoundError, RepositoryError
from services.report_repository import ReportRepository


def _row(report_id="r1", owner_id="user-a", name="Q3.pdf", text="body"):
    return {
        "id": report_id,
        "owner_id": owner_id,
        "name": name,
        "text": text,
        "file_url": None,
        "created_at": "2026-01-15T10:30:00Z",
    }


@pytest.fixture
def mock_table():
    """Supabase query builder; every chained call returns the same builder."""
    table = MagicMock()
    for method in ("insert", "select", "delete", "eq", "order", "limit"):
        getattr(table, method).return_value = table
    table.execute.return_value = Mock(data=[])
    return table


@pytest.fixture
def repository(mock_table):
    client = MagicMock()
    client.table.return_value = mock_table
    return ReportRepository(client=client, table_name="reports")


class TestReportRepository:
    """Test suite for ReportRepository."""

    def test_missing_credentials_raise_on_first_use(self):
        repository = ReportRepository(supabase_url=None, supabase_key=None)

        with pytest.raises(ConfigurationError, match="SUPABASE_URL and SUPABASE_KEY"):
            repository.list_for_owner("user-a")

    @patch('services.report_repository.create_client')
    def test_client_created_once(self, mock_create_client):
        mock_create_client.return_value.table.return_value.select.return_value \
            .eq.return_value.order.return_value.execute.return_value = Mock(data=[])
        repository = ReportRepository(supabase_url="https://x.supabase.co", supabase_key="key")

        repository.list_for_owner("user-a")
        repository.list_for_owner("user-a")

        mock_create_client.assert_called_once_with("https://x.supabase.co", "key")

    def test_create_inserts_record(self, repository, mock_table):
        mock_table.execute.return_value = Mock(data=[_row()])

        report = repository.create("user-a", "Q3.pdf", "body")

        assert isinstance(report, Report)
        assert report.report_id == "r1"
        assert report.created_at == datetime.fromisoformat("2026-01-15T10:30:00+00:00")
        record = mock_table.insert.call_args[0][0]
        assert record["owner_id"] == "user-a"
        assert record["name"] == "Q3.pdf"
        assert record["text"] == "body"
        assert record["id"]

    def test_create_without_returned_row_uses_record(self, repository, mock_table):
        report = repository.create("user-a", "Q3.pdf", "body", file_url="https://files/q3.pdf")

        assert report.owner_id == "user-a"
        assert report.file_url == "https://files/q3.pdf"
        assert report.report_id == mock_table.insert.call_args[0][0]["id"]

    def test_create_failure(self, repository, mock_table):
        mock_table.execute.side_effect = Exception("connection reset")

        with pytest.raises(RepositoryError, match="Failed to create report record"):
            repository.create("user-a", "Q3.pdf", "body")

    def test_list_for_owner_newest_first(self, repository, mock_table):
        mock_table.execute.return_value = Mock(data=[_row("r2"), _row("r1")])

        reports = repository.list_for_owner("user-a")

        assert [r.report_id for r in reports] == ["r2", "r1"]
        mock_table.eq.assert_called_once_with("owner_id", "user-a")
        mock_table.order.assert_called_once_with("created_at", desc=True)

    def test_list_for_owner_none_data(self, repository, mock_table):
        mock_table.execute.return_value = Mock(data=None)

        assert repository.list_for_owner("user-a") == []

    def test_get_scoped_to_owner(self, repository, mock_table):
        mock_table.execute.return_value = Mock(data=[_row(text=None)])

        report = repository.get("r1", "user-a")

        assert report.text == ""
        assert mock_table.eq.call_args_list[0][0] == ("id", "r1")
        assert mock_table.eq.call_args_list[1][0] == ("owner_id", "user-a")

    def test_get_missing(self, repository):
        with pytest.raises(ReportNotFoundError):
            repository.get("r1", "user-b")

    def test_delete(self, repository, mock_table):
        mock_table.execute.return_value = Mock(data=[_row()])

        deleted = repository.delete("r1", "user-a")

        assert deleted.report_id == "r1"
        mock_table.delete.assert_called_once()
        assert mock_table.eq.call_args_list[1][0] == ("owner_id", "user-a")

    def test_delete_missing(self, repository):
        with pytest.raises(ReportNotFoundError):
            repository.delete("r1", "user-a")

    def test_delete_failure(self, repository, mock_table):
        mock_table.execute.side_effect = Exception("timeout")

        with pytest.raises(RepositoryError, match="Failed to delete report r1"):
            repository.delete("r1", "user-a")

    @pytest.mark.parametrize("created_at,expected", [
        ("2024-05-01T12:00:00.12345+00:00", datetime(2024, 5, 1, 12, 0, 0, 123450, tzinfo=timezone.utc)),
        ("2024-05-01T12:00:00.1+00:00", datetime(2024, 5, 1, 12, 0, 0, 100000, tzinfo=timezone.utc)),
        ("2024-05-01T12:00:00Z", datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)),
    ])
    def test_timestamps_with_trimmed_fractions(self, repository, mock_table, created_at, expected):
        """Timestamps as PostgREST returns them, trailing zeros dropped."""
        row = _row()
        row["created_at"] = created_at
        mock_table.execute.return_value = Mock(data=[row])

        assert repository.get("r1", "user-a").created_at == expected

    def test_create_records_stored_file(self, repository, mock_table):
        report = repository.create(
            "user-a", "Q3.pdf", "body",
            file_url="https://x.supabase.co/storage/v1/object/public/reports/users/user-a/reports/Q3.pdf_1",
            file_path="users/user-a/reports/Q3.pdf_1",
            mime_type="application/pdf"
        )

        record = mock_table.insert.call_args[0][0]
        assert record["file_path"] == "users/user-a/reports/Q3.pdf_1"
        assert record["mime_type"] == "application/pdf"
        assert report.file_path == "users/user-a/reports/Q3.pdf_1"
