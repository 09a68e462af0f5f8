"""Time-derived identifiers for accounts, reports and session tokens."""
import threading
import time

_lock = threading.Lock()
_last_millis = 0


def next_millis() -> int:
    """
    Current epoch milliseconds, bumped so that every call in this process
    returns a strictly larger value than the previous one.
    """
    global _last_millis
    with _lock:
        now = int(time.time() * 1000)
        if now <= _last_millis:
            now = _last_millis + 1
        _last_millis = now
        return now


def generate_account_id() -> str:
    return str(next_millis())


def generate_report_id() -> str:
    """Report ids sort in creation order as integers."""
    return str(next_millis())


def generate_session_token() -> str:
    return f"auth_token_{next_millis()}"
