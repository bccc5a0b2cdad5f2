"""JSON-file-backed UnitOfWork.

The whole store is one JSON document::

    {
      "schema_version": 1,
      "assets": [...], "bookings": [...], "orders": [...],
      "pricing_tiers": [...], "companies": [...],
      "sequences": {"ORD-20250601": 3, ...}
    }

A transaction holds an exclusive ``flock`` on a sibling lock file from
``_begin`` to ``_end``, so a second process running the same
check-then-book sequence waits for the first to finish.  ``commit``
writes the document to a temp file and ``os.replace``s it into place.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import IO, Any

from ers.domain.repository.unit_of_work import UnitOfWork
from ers.infrastructure.persistence.json_asset_repository import JsonAssetRepository
from ers.infrastructure.persistence.json_booking_repository import JsonBookingRepository
from ers.infrastructure.persistence.json_company_repository import JsonCompanyRepository
from ers.infrastructure.persistence.json_order_repository import JsonOrderRepository
from ers.infrastructure.persistence.json_pricing_tier_repository import (
    JsonPricingTierRepository,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
TABLES = ("assets", "bookings", "orders", "pricing_tiers", "companies")


def empty_document() -> dict[str, Any]:
    document: dict[str, Any] = {"schema_version": SCHEMA_VERSION}
    for table in TABLES:
        document[table] = []
    document["sequences"] = {}
    return document


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock_path = file_path.with_name(f".{file_path.name}.lock")
        self._lock_file: IO[str] | None = None
        self._snapshot: str | None = None
        self._document: dict[str, Any] = {}

    # --- UnitOfWork interface -------------------------------------------------

    def _begin(self) -> None:
        if self._lock_file is not None:
            raise RuntimeError("Unit of work is already in progress")
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock_file = open(self._lock_path, "w", encoding="utf-8")
        fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_EX)
        try:
            self._snapshot = self._read_text()
            self._bind(json.loads(self._snapshot))
        except Exception:
            # __exit__ does not run when __enter__ raises
            self._snapshot = None
            self._end()
            raise

    def _end(self) -> None:
        if self._lock_file is None:
            return
        try:
            fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            self._lock_file.close()
            self._lock_file = None

    def commit(self) -> None:
        text = json.dumps(self._document, indent=2) + "\n"
        self._write_atomically(text)
        self._snapshot = text

    def rollback(self) -> None:
        if self._snapshot is None:
            return
        self._bind(json.loads(self._snapshot))

    # --- Helpers --------------------------------------------------------------

    def _bind(self, document: dict[str, Any]) -> None:
        for table in TABLES:
            document.setdefault(table, [])
        document.setdefault("sequences", {})
        self._document = document
        self.assets = JsonAssetRepository(document)
        self.bookings = JsonBookingRepository(document)
        self.companies = JsonCompanyRepository(document)
        self.orders = JsonOrderRepository(document)
        self.pricing_tiers = JsonPricingTierRepository(document)

    def _read_text(self) -> str:
        if not self._file_path.exists():
            return json.dumps(empty_document())
        return self._file_path.read_text(encoding="utf-8")

    def _write_atomically(self, text: str) -> None:
        fd, temp_path = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(temp_path, self._file_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
        logger.debug("Committed store to %s", self._file_path)
