"""File helpers shared by the JSON repositories.

Each store is one JSON array rewritten as a whole.  Writes go to a temp
file in the same directory that is then renamed over the store, so a
reader sees either the old array or the new one, never a truncated file.

``store_lock(path)`` returns the one lock for a store in this process.  It
holds a thread lock and an OS-level lock on ``<store>.lock``, so handles
opened by different handlers, threads or CLI processes all serialize on
the same file.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path

from filelock import FileLock

_store_locks: dict[Path, StoreLock] = {}
_registry_guard = threading.Lock()


class StoreLock:
    """Re-entrant exclusive lock on one store.

    The thread lock admits one thread of this process at a time; the file
    lock then keeps other processes out.  Both count nested acquisitions,
    so a pool claim can re-enter for each of its members.
    """

    def __init__(self, lock_path: Path) -> None:
        self._thread_lock = threading.RLock()
        self._file_lock = FileLock(str(lock_path), thread_local=False)

    def __enter__(self) -> StoreLock:
        self._thread_lock.acquire()
        try:
            self._file_lock.acquire()
        except BaseException:
            self._thread_lock.release()
            raise
        return self

    def __exit__(self, *exc_info) -> None:
        try:
            self._file_lock.release()
        finally:
            self._thread_lock.release()


def store_lock(path: Path) -> StoreLock:
    key = path.resolve()
    with _registry_guard:
        if key not in _store_locks:
            _store_locks[key] = StoreLock(key.with_name(key.name + ".lock"))
        return _store_locks[key]


def read_records(path: Path) -> list[dict]:
    return json.loads(path.read_text(encoding="utf-8"))


def write_records(path: Path, records: list[dict]) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(records, fh, indent=2)
            fh.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise


def ensure_file(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with store_lock(path):
        if not path.exists():
            write_records(path, [])
