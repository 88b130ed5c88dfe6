"""JSON-file-backed implementation of LedgerRepository.

All entries of all resources live in one file, in insertion order.
Instants are stored as ISO-8601 strings with their UTC offset.

Every handle on the same file shares one store lock (see ``json_file``),
so ``atomic`` serializes writers across handlers, threads and processes.
The lock covers the whole store, not single resources.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from stockpool.domain.exceptions import EntityNotFoundError
from stockpool.domain.model.ledger import EntryKind, EntryStatus, LedgerEntry, Reference
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.infrastructure.persistence.json_file import (
    ensure_file,
    read_records,
    store_lock,
    write_records,
)


class JsonLedgerRepository(LedgerRepository):

    def __init__(self, file_path: Path) -> None:
        super().__init__()
        self._file_path = file_path
        self._lock = store_lock(file_path)
        self._ensure_file()

    # --- LedgerRepository interface -------------------------------------------

    def get(self, entry_id: str) -> LedgerEntry | None:
        for raw in self._load_raw():
            if raw["id"] == entry_id:
                return self._to_domain(raw)
        return None

    def entries_for(self, resource_id: str) -> list[LedgerEntry]:
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw["resource_id"] == resource_id
        ]

    def append(self, *entries: LedgerEntry) -> None:
        with self._lock:
            records = self._load_raw()
            records.extend(self._to_raw(entry) for entry in entries)
            self._persist_raw(records)

    def save(self, entry: LedgerEntry) -> None:
        with self._lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if raw["id"] == entry.id:
                    records[i] = self._to_raw(entry)
                    break
            else:
                raise EntityNotFoundError(f"Ledger entry {entry.id} not found")
            self._persist_raw(records)

    @contextmanager
    def atomic(self, *resource_ids: str) -> Iterator[None]:
        with self._lock:
            yield

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(entry: LedgerEntry) -> dict:
        return {
            "id": entry.id,
            "resource_id": entry.resource_id,
            "quantity": entry.quantity,
            "kind": entry.kind.value,
            "status": entry.status.value,
            "claimed_from": _dump_instant(entry.claimed_from),
            "expires_at": _dump_instant(entry.expires_at),
            "note": entry.note,
            "reference": str(entry.reference) if entry.reference else None,
            "created_at": entry.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> LedgerEntry:
        reference = raw.get("reference")
        return LedgerEntry(
            id=raw["id"],
            resource_id=raw["resource_id"],
            quantity=raw["quantity"],
            kind=EntryKind(raw["kind"]),
            status=EntryStatus(raw["status"]),
            claimed_from=_load_instant(raw.get("claimed_from")),
            expires_at=_load_instant(raw.get("expires_at")),
            note=raw.get("note"),
            reference=Reference.parse(reference) if reference else None,
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return read_records(self._file_path)

    def _persist_raw(self, records: list[dict]) -> None:
        write_records(self._file_path, records)

    def _ensure_file(self) -> None:
        ensure_file(self._file_path)


def _dump_instant(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_instant(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
