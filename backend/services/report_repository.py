"""Report record storage using a Supabase table."""
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from supabase import create_client, Client

from models.report import Report
from services.errors import ConfigurationError, ReportNotFoundError, RepositoryError
from config import SUPABASE_URL, SUPABASE_KEY, REPORTS_TABLE

logger = logging.getLogger(__name__)

# PostgREST trims trailing zeros from fractional seconds
_TIMESTAMP = TypeAdapter(datetime)


def _parse_timestamp(value: Any) -> datetime:
    return _TIMESTAMP.validate_python(value)


def _row_to_report(row: Dict[str, Any]) -> Report:
    return Report(
        report_id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        text=row.get("text") or "",
        created_at=_parse_timestamp(row["created_at"]),
        file_url=row.get("file_url"),
        file_path=row.get("file_path"),
        mime_type=row.get("mime_type")
    )


class ReportRepository:
    """Owner-scoped CRUD over uploaded report records."""

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        table_name: str = REPORTS_TABLE,
        client: Optional[Client] = None
    ):
        """
        Configure the repository. The Supabase client is created on first use.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Table holding report records
            client: Pre-built Supabase client, used as-is
        """
        self.supabase_url = supabase_url
        self.supabase_key = supabase_key
        self.table_name = table_name
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Client:
        """
        Supabase client, created on first access.

        Raises:
            ConfigurationError: If Supabase credentials are missing
        """
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self.supabase_url or not self.supabase_key:
                        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY environment variables are required")
                    self._client = create_client(self.supabase_url, self.supabase_key)
                    logger.info(f"Initialized ReportRepository with table: {self.table_name}")
        return self._client

    def create(
        self,
        owner_id: str,
        name: str,
        text: str,
        file_url: Optional[str] = None,
        file_path: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> Report:
        """
        Persist a new report record.

        Returns:
            The stored Report

        Raises:
            RepositoryError: If the insert fails
        """
        record = {
            "id": str(uuid.uuid4()),
            "owner_id": owner_id,
            "name": name,
            "text": text,
            "file_url": file_url,
            "file_path": file_path,
            "mime_type": mime_type,
            "created_at": datetime.now(timezone.utc).isoformat()
        }
        table = self.client.table(self.table_name)

        try:
            response = table.insert(record).execute()
        except Exception as e:
            error_msg = f"Failed to create report record: {str(e)}"
            logger.error(error_msg)
            raise RepositoryError(error_msg) from e

        row = response.data[0] if response.data else record
        logger.info(f"Created report {row['id']} for owner")
        return _row_to_report(row)

    def list_for_owner(self, owner_id: str) -> List[Report]:
        """
        Get an owner's reports, newest first.

        Raises:
            RepositoryError: If the query fails
        """
        table = self.client.table(self.table_name)

        try:
            response = (
                table.select("*")
                .eq("owner_id", owner_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            error_msg = f"Failed to list reports: {str(e)}"
            logger.error(error_msg)
            raise RepositoryError(error_msg) from e

        return [_row_to_report(row) for row in response.data or []]

    def get(self, report_id: str, owner_id: str) -> Report:
        """
        Get one of an owner's reports.

        Raises:
            ReportNotFoundError: If the owner has no report with this id
            RepositoryError: If the query fails
        """
        table = self.client.table(self.table_name)

        try:
            response = (
                table.select("*")
                .eq("id", report_id)
                .eq("owner_id", owner_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            error_msg = f"Failed to load report {report_id}: {str(e)}"
            logger.error(error_msg)
            raise RepositoryError(error_msg) from e

        if not response.data:
            raise ReportNotFoundError(report_id)
        return _row_to_report(response.data[0])

    def delete(self, report_id: str, owner_id: str) -> Report:
        """
        Delete one of an owner's reports.

        Returns:
            The deleted Report

        Raises:
            ReportNotFoundError: If the owner has no report with this id
            RepositoryError: If the delete fails
        """
        table = self.client.table(self.table_name)

        try:
            response = (
                table.delete()
                .eq("id", report_id)
                .eq("owner_id", owner_id)
                .execute()
            )
        except Exception as e:
            error_msg = f"Failed to delete report {report_id}: {str(e)}"
            logger.error(error_msg)
            raise RepositoryError(error_msg) from e

        if not response.data:
            raise ReportNotFoundError(report_id)
        logger.info(f"Deleted report {report_id}")
        return _row_to_report(response.data[0])
