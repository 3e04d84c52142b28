"""Report record models."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Report:
    """One uploaded report as persisted in the record store."""
    report_id: str
    owner_id: str
    name: str
    text: str
    created_at: datetime
    file_url: Optional[str] = None
    file_path: Optional[str] = None  # Object path in the storage bucket
    mime_type: Optional[str] = None
