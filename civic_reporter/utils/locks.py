"""Per-store, per-key locks shared by every service in the process."""
import threading
import weakref

_registry_lock = threading.Lock()
_locks: "weakref.WeakKeyDictionary[object, dict[str, threading.RLock]]" = weakref.WeakKeyDictionary()


def store_lock(store: object, key: str) -> threading.RLock:
    """
    Lock guarding read-modify-write of `key` on `store`.

    Two services built over the same store get the same lock, so their
    mutations of one key never interleave.
    """
    with _registry_lock:
        per_store = _locks.setdefault(store, {})
        if key not in per_store:
            per_store[key] = threading.RLock()
        return per_store[key]
