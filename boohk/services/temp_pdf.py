"""
Temporary PDF store.

Holds generated proposal PDFs in process memory so a client can download
them once. Entries expire after 30 minutes and are removed by a periodic
sweep (see boohk.background_jobs). Nothing is persisted or shared between
processes.
"""
import logging
import re
import secrets
import time
from typing import Optional

from boohk.timeutil import epoch_ms

logger = logging.getLogger(__name__)

MAX_AGE_SECONDS = 30 * 60
SWEEP_INTERVAL_MINUTES = 5


def slugify(value: str, max_length: int = 50) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", value or "").strip("_")
    return slug[:max_length] or "proposal"


def temp_pdf_filename(proposal_id: str, title: str) -> str:
    return f"OH_PROP_{proposal_id}_{slugify(title)}.pdf"


class TempPDFStore:
    """Process-local store of short-lived PDFs, retrievable once."""

    def __init__(self, max_age_seconds: int = MAX_AGE_SECONDS, clock=time.time):
        self.max_age_seconds = max_age_seconds
        self.clock = clock
        self._entries = {}

    def __len__(self):
        return len(self._entries)

    def put(self, proposal_id: str, title: str, pdf_bytes: bytes) -> dict:
        """Store a PDF and return its handle and metadata."""
        temp_id = f"temp_{epoch_ms()}_{secrets.token_hex(4)}"
        filename = temp_pdf_filename(proposal_id, title)
        self._entries[temp_id] = {
            "data": pdf_bytes,
            "filename": filename,
            "timestamp": self.clock(),
        }
        size = len(pdf_bytes)
        logger.info(f"Stored temp PDF {temp_id} ({size} bytes)")
        return {
            "tempId": temp_id,
            "filename": filename,
            "size": size,
            "sizeMB": round(size / (1024 * 1024), 2),
            "compressed": False,
        }

    def take(self, temp_id: str) -> Optional[dict]:
        """Return and remove an entry. Expired entries count as missing."""
        entry = self._entries.pop(temp_id, None)
        if entry is None:
            return None
        if self.clock() - entry["timestamp"] > self.max_age_seconds:
            return None
        return entry

    def sweep(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self.clock()
        expired = [
            temp_id
            for temp_id, entry in list(self._entries.items())
            if now - entry["timestamp"] > self.max_age_seconds
        ]
        for temp_id in expired:
            self._entries.pop(temp_id, None)
        if expired:
            logger.info(f"Swept {len(expired)} expired temp PDF(s)")
        return len(expired)


# Shared store for the running process
temp_pdf_store = TempPDFStore()
