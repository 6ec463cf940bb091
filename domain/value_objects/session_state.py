from enum import Enum


class SessionState(str, Enum):
    """Enumerate the lifecycle states of a pipeline session."""

    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
