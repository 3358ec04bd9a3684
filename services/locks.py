"""Per-intern mutual exclusion for schedule read-modify-write sequences."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

_registry_lock = threading.Lock()
_locks: Dict[int, threading.RLock] = {}


def _lock_for(intern_id: int) -> threading.RLock:
    with _registry_lock:
        lock = _locks.get(intern_id)
        if lock is None:
            lock = threading.RLock()
            _locks[intern_id] = lock
        return lock


@contextmanager
def intern_lock(intern_id: int) -> Iterator[None]:
    # re-entrant: intern creation holds it while generating the first sequence
    lock = _lock_for(int(intern_id))
    with lock:
        yield
