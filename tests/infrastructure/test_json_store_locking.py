"""Writers on one JSON store serialize however many handles are open on it."""

import json
import threading
import time

from stockpool.domain.exceptions import InsufficientStock
from stockpool.domain.model.ledger import EntryKind, LedgerEntry
from stockpool.domain.model.resource import Resource
from stockpool.domain.service.stock_ledger import StockLedger
from stockpool.infrastructure.persistence.json_file import store_lock, write_records
from stockpool.infrastructure.persistence.json_ledger_repository import JsonLedgerRepository
from tests.fakes import T0, FakeClock


class SlowLedgerRepository(JsonLedgerRepository):
    """Widens the gap between reading availability and appending the claim."""

    def entries_for(self, resource_id):
        entries = super().entries_for(resource_id)
        time.sleep(0.2)
        return entries


def _run_in_threads(*targets):
    threads = [threading.Thread(target=target) for target in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return [t.is_alive() for t in threads]


class TestSharedStoreSerialization:

    def test_last_unit_claimed_once_across_handles(self, tmp_path):
        path = tmp_path / "ledger.json"
        room = Resource.create(id="1", name="Room 1")
        clock = FakeClock()
        StockLedger(room, JsonLedgerRepository(path), clock).increase(1)

        results: list[str] = []
        start = threading.Barrier(2)

        def claim_through_own_handle():
            ledger = StockLedger(room, SlowLedgerRepository(path), clock)
            start.wait()
            try:
                ledger.claim(1)
                results.append("ok")
            except InsufficientStock:
                results.append("short")

        stuck = _run_in_threads(claim_through_own_handle, claim_through_own_handle)

        assert not any(stuck)
        assert sorted(results) == ["ok", "short"]
        claims = [e for e in JsonLedgerRepository(path).entries_for("1") if e.is_claim]
        assert len(claims) == 1

    def test_handles_on_one_file_share_the_store_lock(self, tmp_path):
        path = tmp_path / "ledger.json"
        first = JsonLedgerRepository(path)
        second = JsonLedgerRepository(tmp_path / "." / "ledger.json")

        assert store_lock(path) is store_lock(tmp_path / "." / "ledger.json")

        def nested():
            with first.atomic("1"):
                with second.atomic("2"):
                    second.append(
                        LedgerEntry(resource_id="2", quantity=1, kind=EntryKind.INCREASE, created_at=T0)
                    )

        stuck = _run_in_threads(nested)

        assert stuck == [False]
        assert len(first.entries_for("2")) == 1

    def test_other_stores_do_not_wait(self, tmp_path):
        busy = JsonLedgerRepository(tmp_path / "a" / "ledger.json")
        free = JsonLedgerRepository(tmp_path / "b" / "ledger.json")
        done = threading.Event()

        def write_elsewhere():
            free.append(
                LedgerEntry(resource_id="1", quantity=1, kind=EntryKind.INCREASE, created_at=T0)
            )
            done.set()

        with busy.atomic("1"):
            _run_in_threads(write_elsewhere)
            assert done.is_set()


class TestAtomicWrites:

    def test_readers_never_see_a_partial_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        repo = JsonLedgerRepository(path)
        errors: list[Exception] = []
        writing = threading.Event()
        writing.set()

        def writer():
            for _ in range(100):
                repo.append(
                    LedgerEntry(resource_id="1", quantity=1, kind=EntryKind.INCREASE, created_at=T0)
                )
            writing.clear()

        def reader():
            reader_repo = JsonLedgerRepository(path)
            while writing.is_set():
                try:
                    reader_repo.entries_for("1")
                except json.JSONDecodeError as exc:
                    errors.append(exc)

        stuck = _run_in_threads(writer, reader)

        assert not any(stuck)
        assert errors == []
        assert len(repo.entries_for("1")) == 100

    def test_no_temp_files_left_behind(self, tmp_path):
        path = tmp_path / "prices.json"
        path.write_text("[]", encoding="utf-8")

        write_records(path, [{"resource_id": "1", "amount": "10"}])

        assert json.loads(path.read_text(encoding="utf-8")) == [
            {"resource_id": "1", "amount": "10"}
        ]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["prices.json"]
